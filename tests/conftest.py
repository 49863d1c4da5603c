import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from legal_qa.config import Settings
from legal_qa.retrieval import Retriever

DOCUMENTS = {
    "contracts.txt": "A valid contract requires offer, acceptance and consideration between the parties.",
    "negligence.txt": "Negligence requires a duty of care, a breach of that duty, causation and damages.",
    "copyright.txt": "Copyright protects original works of authorship such as books, music and software.",
}


class FakeLLMClient:
    """Stands in for LLMClient without touching the network"""

    def __init__(self, configured=True, answer="Generated answer", error=None):
        self.is_configured = configured
        self.answer = answer
        self.error = error
        self.calls = []

    def generate_answer(self, docs, question):
        self.calls.append((docs, question))
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def documents_dir(tmp_path):
    for name, text in DOCUMENTS.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path


@pytest.fixture
def retriever(documents_dir):
    return Retriever.from_directory(documents_dir)


@pytest.fixture
def settings(documents_dir):
    return Settings(documents_dir=documents_dir, llm_provider="openai", top_k=2)

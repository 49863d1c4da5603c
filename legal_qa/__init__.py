# Retrieval and answer generation for the legal QA backend

from .retrieval import retrieve_documents, load_documents, build_index, Retriever
from .llm import LLMClient, build_rag_prompt, create_llm_client
from .config import Settings
from .errors import LegalQAError, CorpusError, LLMError, LLMNotConfiguredError

__all__ = [
    'retrieve_documents', 'load_documents', 'build_index', 'Retriever',
    'LLMClient', 'build_rag_prompt', 'create_llm_client', 'Settings',
    'LegalQAError', 'CorpusError', 'LLMError', 'LLMNotConfiguredError',
]

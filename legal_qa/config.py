import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DOCUMENTS_DIR = BASE_DIR / "documents"


def default_documents_dir() -> Path:
    """./documents under the working directory, else the source checkout's folder"""
    cwd_documents = Path.cwd() / "documents"
    if cwd_documents.is_dir():
        return cwd_documents
    return DEFAULT_DOCUMENTS_DIR


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r, using %d", name, raw, default)
        return default


def _list_env(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or [default]


@dataclass
class Settings:
    port: int = 5000
    llm_provider: str = "openai"
    openai_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    openai_model: Optional[str] = None
    groq_model: Optional[str] = None
    documents_dir: Path = field(default_factory=default_documents_dir)
    top_k: int = 3
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from the process environment (and a .env file)"""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            port=_int_env("PORT", 5000),
            llm_provider=os.environ.get("LLM_PROVIDER", "openai").strip().lower(),
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
            groq_api_key=os.environ.get("GROQ_API_KEY") or None,
            openai_model=os.environ.get("OPENAI_MODEL") or None,
            groq_model=os.environ.get("GROQ_MODEL") or None,
            documents_dir=Path(os.environ.get("DOCUMENTS_DIR") or default_documents_dir()),
            top_k=_int_env("TOP_K", 3),
            cors_origins=_list_env("CORS_ORIGINS", "*"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def api_key(self) -> Optional[str]:
        """Key for the selected provider, None when unset or unsupported"""
        if self.llm_provider == "openai":
            return self.openai_api_key
        if self.llm_provider == "groq":
            return self.groq_api_key
        return None

    @property
    def model(self) -> Optional[str]:
        if self.llm_provider == "openai":
            return self.openai_model
        if self.llm_provider == "groq":
            return self.groq_model
        return None

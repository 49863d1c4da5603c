import logging
from typing import Dict, List, Optional

import groq
import openai

from .errors import LLMError, LLMNotConfiguredError

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-8b-instant",
}

SYSTEM_MESSAGE = (
    "You are a helpful legal assistant that answers questions "
    "based on provided legal documents."
)

NO_ANSWER_MESSAGE = (
    "I couldn't find any relevant information in the legal documents "
    "to answer your question."
)


def build_rag_prompt(docs: List[Dict], question: str) -> str:
    """Wrap the retrieved paragraphs and the question into a single prompt"""
    context = "\n\n".join(
        f"[Document {i}]:\n{doc['text']}" for i, doc in enumerate(docs, start=1)
    )

    return (
        "You are a legal expert assistant. Use ONLY the following retrieved "
        "paragraphs to answer the user's question. If the answer cannot be "
        "found in the provided context, say so clearly.\n"
        "\n"
        "<context>\n"
        f"{context}\n"
        "</context>\n"
        "\n"
        f"Question: {question}\n"
        "\n"
        "Please provide a clear, accurate answer based solely on the "
        "information provided above."
    )


def _make_client(provider: str, api_key: str):
    if provider == "openai":
        return openai.OpenAI(api_key=api_key)
    if provider == "groq":
        return groq.Groq(api_key=api_key)
    return None


class LLMClient:
    """Chat-completion client for the configured provider (openai or groq)"""

    def __init__(self, provider: str = "openai", api_key: Optional[str] = None,
                 model: Optional[str] = None, temperature: float = 0.3,
                 max_tokens: int = 500, client=None):
        self.provider = (provider or "").lower()
        self.model = model or DEFAULT_MODELS.get(self.provider)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

        if self._client is None and api_key and self.provider in DEFAULT_MODELS:
            try:
                self._client = _make_client(self.provider, api_key)
                logger.info("%s client initialized", self.provider_name)
            except (openai.OpenAIError, groq.GroqError) as e:
                logger.error("Failed to initialize %s client: %s", self.provider_name, e)

    @property
    def provider_name(self) -> str:
        return {"openai": "OpenAI", "groq": "Groq"}.get(self.provider, self.provider)

    @property
    def is_configured(self) -> bool:
        return self.provider in DEFAULT_MODELS and self._client is not None

    def _complete(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        content = response.choices[0].message.content
        if content is None:
            logger.warning("%s returned an empty completion", self.provider_name)
            return ""
        return content

    def generate_answer(self, docs: List[Dict], question: str) -> str:
        """Ask the LLM to answer the question from the retrieved documents"""
        if self.provider not in DEFAULT_MODELS:
            raise LLMNotConfiguredError(f"Unsupported LLM provider: {self.provider}")
        if self._client is None:
            raise LLMNotConfiguredError(
                f"{self.provider_name} client not initialized. Check your API key."
            )

        prompt = build_rag_prompt(docs, question)
        logger.info("Generating answer using %s (%s)", self.provider.upper(), self.model)

        try:
            answer = self._complete(prompt)
        except groq.APIConnectionError as e:
            logger.error("Groq API error: %s", e)
            raise LLMError(
                "Failed to connect to Groq API. Please check your internet "
                "connection and API key."
            ) from e
        except (openai.OpenAIError, groq.GroqError) as e:
            logger.error("%s API error: %s", self.provider_name, e)
            raise LLMError(f"{self.provider_name} API failed: {e}") from e

        logger.info("Answer generated successfully")
        return answer


def create_llm_client(settings) -> LLMClient:
    """Build the LLM client described by a Settings object"""
    if settings.llm_provider not in DEFAULT_MODELS:
        logger.warning("Unsupported LLM_PROVIDER %r", settings.llm_provider)
    elif not settings.api_key:
        logger.warning("%s_API_KEY not set", settings.llm_provider.upper())

    return LLMClient(
        provider=settings.llm_provider,
        api_key=settings.api_key,
        model=settings.model,
    )

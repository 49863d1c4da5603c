class LegalQAError(Exception):
    """Base class for errors raised by the legal QA backend"""


class CorpusError(LegalQAError):
    """The document folder is missing, empty or has no usable terms"""


class LLMError(LegalQAError):
    """The LLM provider call failed"""


class LLMNotConfiguredError(LLMError):
    """No usable client for the selected provider"""

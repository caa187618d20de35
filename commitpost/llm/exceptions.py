"""LLM-related exception classes.

Contains:
- LLMError: Base exception for summarizer errors
- MissingAPIKeyError: Raised when the provider's API key is not set
"""


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class MissingAPIKeyError(LLMError):
    """Raised when the required API key is not set."""

    pass

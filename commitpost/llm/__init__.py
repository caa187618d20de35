"""Summarizer providers for commitpost.

Optional AI condensation of commit headlines. The provider is chosen with
AI_PROVIDER; it only runs when its API key is set and AI_SUMMARY is not off.
"""

from typing import Optional

from commitpost.config import LLMProvider, Settings
from commitpost.llm.base import BaseSummarizer
from commitpost.llm.exceptions import LLMError, MissingAPIKeyError


def get_summarizer(
    provider: LLMProvider,
    api_key: str,
    model: Optional[str] = None,
) -> BaseSummarizer:
    """Get a summarizer instance.

    Args:
        provider: The provider to use.
        api_key: The provider API key.
        model: Model override. Defaults to the provider's default model.

    Returns:
        An instance of the appropriate summarizer.

    Raises:
        ValueError: If the provider is not supported.
        MissingAPIKeyError: If the API key is empty.
    """
    if provider == LLMProvider.OPENAI:
        from commitpost.llm.openai_provider import OpenAISummarizer

        return OpenAISummarizer(api_key=api_key, model=model)

    elif provider == LLMProvider.ANTHROPIC:
        from commitpost.llm.anthropic_provider import AnthropicSummarizer

        return AnthropicSummarizer(api_key=api_key, model=model)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


def summarizer_from_settings(settings: Settings) -> Optional[BaseSummarizer]:
    """Build the configured summarizer, or None when condensation is disabled."""
    if not settings.summarizer_enabled:
        return None
    return get_summarizer(settings.ai_provider, settings.ai_api_key, settings.ai_model)


__all__ = [
    "BaseSummarizer",
    "LLMError",
    "MissingAPIKeyError",
    "get_summarizer",
    "summarizer_from_settings",
]

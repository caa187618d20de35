"""Base class and shared prompts for commit summarizers."""

from abc import ABC, abstractmethod

from commitpost.llm.exceptions import LLMError, MissingAPIKeyError


_SYSTEM_PROMPT_BASE = (
    "You are a concise release/commit summarizer for social media. "
    "Write in first-person, author's commentary voice. Be specific and human. "
    "Exclude git commit hashes/SHAs. Keep semantic version identifiers if present. "
)

# Repository topics will be appended as hashtags, so the model must not add any
SYSTEM_PROMPT_WITH_TOPICS = _SYSTEM_PROMPT_BASE + (
    "DO NOT add hashtags (they will be added from repository topics). No quotes."
)

SYSTEM_PROMPT_WITHOUT_TOPICS = _SYSTEM_PROMPT_BASE + (
    "Add 2-4 relevant hashtags at the end based on the content "
    "(e.g., #Python #OpenSource #DevTools #Release). No quotes."
)

USER_PROMPT_WITH_TOPICS = """Summarize as a short first-person commentary (~20 words). Do not include any git hashes/SHAs or hashtags. Keep semver if present:
"{text}\""""

USER_PROMPT_WITHOUT_TOPICS = """Summarize as a short first-person commentary (~20 words), then add 2-4 relevant hashtags. Do not include any git hashes/SHAs. Keep semver if present:
"{text}\""""


def build_prompts(text: str, has_topics: bool) -> tuple[str, str]:
    """Build the system and user prompts.

    Args:
        text: The sanitized commit headline.
        has_topics: Whether repository topics will supply hashtags.

    Returns:
        (system_prompt, user_prompt)
    """
    if has_topics:
        return SYSTEM_PROMPT_WITH_TOPICS, USER_PROMPT_WITH_TOPICS.format(text=text)
    return SYSTEM_PROMPT_WITHOUT_TOPICS, USER_PROMPT_WITHOUT_TOPICS.format(text=text)


def clean_summary(raw: str) -> str:
    """Trim whitespace and wrapping quotes the model added anyway."""
    cleaned = raw.strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in "\"'":
        cleaned = cleaned[1:-1].strip()
    return cleaned


class BaseSummarizer(ABC):
    """Abstract base class for summarization providers."""

    def __init__(self, api_key: str, model: str, max_tokens: int, temperature: float, timeout: float):
        if not api_key:
            raise MissingAPIKeyError(f"{type(self).__name__} requires an API key.")
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    @abstractmethod
    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send the prompts to the provider and return the raw text reply.

        Raises:
            LLMError: For any provider or transport failure.
        """
        pass

    async def summarize(self, text: str, has_topics: bool) -> str:
        """Condense a commit headline into a short social post.

        Args:
            text: The sanitized commit headline.
            has_topics: Whether repository topics will supply hashtags.

        Returns:
            The condensed text.

        Raises:
            LLMError: If the provider fails or returns nothing usable.
        """
        system_prompt, user_prompt = build_prompts(text, has_topics)
        raw = await self._complete(system_prompt, user_prompt)
        summary = clean_summary(raw or "")
        if not summary:
            raise LLMError("Summarizer returned an empty response")
        return summary

"""Anthropic Claude summarizer implementation."""

from anthropic import AsyncAnthropic

from commitpost.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
    LLMProvider,
)
from commitpost.llm.base import BaseSummarizer
from commitpost.llm.exceptions import LLMError


class AnthropicSummarizer(BaseSummarizer):
    """Anthropic Claude messages summarizer."""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = LLM_TIMEOUT_SECONDS,
    ):
        super().__init__(
            api_key=api_key,
            model=model or DEFAULT_MODELS[LLMProvider.ANTHROPIC],
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=timeout,
        )

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)

        try:
            message = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
            return "".join(
                block.text for block in message.content if getattr(block, "type", None) == "text"
            )
        except Exception as e:
            raise LLMError(f"Anthropic API call failed: {e}")
        finally:
            await client.close()

"""OpenAI GPT summarizer implementation."""

from openai import AsyncOpenAI

from commitpost.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
    LLMProvider,
)
from commitpost.llm.base import BaseSummarizer
from commitpost.llm.exceptions import LLMError


class OpenAISummarizer(BaseSummarizer):
    """OpenAI chat completions summarizer."""

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
            model=model or DEFAULT_MODELS[LLMProvider.OPENAI],
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=timeout,
        )

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

        try:
            response = await client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            raise LLMError(f"OpenAI API call failed: {e}")
        finally:
            await client.close()

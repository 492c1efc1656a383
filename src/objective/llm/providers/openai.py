"""OpenAI LLM provider."""

import logging
import os
from typing import Any

from objective.llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI provider using the chat completions API.

    Requires an API key (from settings, env var, or passed directly).
    """

    provider_name = "openai"

    def __init__(
        self,
        model: str = "gpt-5.2",
        api_key: str | None = None,
        max_tokens: int = 1024,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            model: Model identifier (e.g., "gpt-4o", "gpt-5.2").
            api_key: Optional API key. If None, uses OPENAI_API_KEY env var.
            max_tokens: Reply length cap.
        """
        super().__init__(model=model, api_key=api_key)
        self.max_tokens = max_tokens
        logger.info("OpenAIProvider initialized (model=%s)", model)

    def _get_async_client(self) -> Any:
        from openai import AsyncOpenAI

        api_key = self.api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key not configured. "
                "Set OPENAI_API_KEY or configure it in settings."
            )
        return AsyncOpenAI(api_key=api_key)

    async def _complete(self, prompt: str, system: str | None) -> str:
        client = self._get_async_client()
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_completion_tokens=self.max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

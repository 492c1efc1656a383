"""Anthropic LLM provider using Claude Agent SDK."""

import logging
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    TextBlock,
    query,
)

from objective.llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic provider using Claude Agent SDK.

    Supports both web auth (default) and API key authentication.
    """

    provider_name = "anthropic"

    def __init__(
        self,
        model: str = "claude-sonnet-4-5",
        api_key: str | None = None,
        use_web_auth: bool = True,
    ) -> None:
        """Initialize Anthropic provider.

        Args:
            model: Model identifier.
            api_key: Optional API key. If None and use_web_auth=True, uses web auth.
            use_web_auth: Whether to use web auth (default True).
        """
        super().__init__(model=model, api_key=api_key)
        self.use_web_auth = use_web_auth
        logger.info(
            "AnthropicProvider initialized (model=%s, web_auth=%s)",
            model,
            use_web_auth,
        )

    def _build_options(self, system: str | None) -> ClaudeAgentOptions:
        env: dict[str, Any] = {}
        if self.use_web_auth:
            # Blank key forces web auth
            env["ANTHROPIC_API_KEY"] = ""
        elif self.api_key:
            env["ANTHROPIC_API_KEY"] = self.api_key
        return ClaudeAgentOptions(
            allowed_tools=[],
            system_prompt=system or None,
            model=self.model,
            env=env,
        )

    async def _complete(self, prompt: str, system: str | None) -> str:
        chunks: list[str] = []
        options = self._build_options(system)
        async for message in query(prompt=prompt, options=options):
            if isinstance(message, AssistantMessage):
                for block in message.content:
                    if isinstance(block, TextBlock):
                        chunks.append(block.text)
                        logger.debug("Got chunk: %d chars", len(block.text))
            elif isinstance(message, ResultMessage):
                logger.info(
                    "Query complete, cost: $%.4f", message.total_cost_usd or 0
                )
        return "".join(chunks)

"""LLM provider implementations."""
from __future__ import annotations

from objective.llm.providers.base import (
    APIErrorType,
    LLMProvider,
    classify_api_error,
    is_retryable_error,
)

PROVIDER_NAMES = ("anthropic", "openai")


def create_provider(
    name: str,
    model: str | None = None,
    api_key: str | None = None,
) -> LLMProvider:
    """Build a provider by name.

    Args:
        name: "anthropic" or "openai".
        model: Model identifier; the provider default when None.
        api_key: Optional API key. For Anthropic a key disables web auth.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name == "anthropic":
        from objective.llm.providers.anthropic import AnthropicProvider

        if model is None:
            return AnthropicProvider(api_key=api_key, use_web_auth=api_key is None)
        return AnthropicProvider(
            model=model, api_key=api_key, use_web_auth=api_key is None
        )
    if name == "openai":
        from objective.llm.providers.openai import OpenAIProvider

        if model is None:
            return OpenAIProvider(api_key=api_key)
        return OpenAIProvider(model=model, api_key=api_key)
    raise ValueError(f"Unknown LLM provider: {name}")


__all__ = [
    "APIErrorType",
    "LLMProvider",
    "PROVIDER_NAMES",
    "classify_api_error",
    "create_provider",
    "is_retryable_error",
]

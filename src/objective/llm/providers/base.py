"""Base class for LLM providers.

Providers answer "quiet" prompts: a single fully rendered prompt in, the
reply text out. The objective uses them to judge task completion and to
break an objective down into tasks.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum

logger = logging.getLogger(__name__)


class APIErrorType(Enum):
    """Types of API errors for classification."""

    RATE_LIMITED = "rate_limited"
    API_UNAVAILABLE = "api_unavailable"
    BUDGET_EXCEEDED = "budget_exceeded"
    UNKNOWN = "unknown"


# Patterns to match in error messages (case-insensitive)
RATE_LIMIT_PATTERNS = [
    "rate limit",
    "rate_limit",
    "ratelimit",
    "429",
    "too many requests",
    "throttl",
]

UNAVAILABLE_PATTERNS = [
    "overloaded",
    "503",
    "502",
    "504",
    "unavailable",
    "service error",
    "temporarily",
    "try again later",
    "capacity",
]

BUDGET_PATTERNS = [
    "budget",
    "spending limit",
    "billing",
    "credit",
    "quota exceeded",
    "usage limit",
    "daily limit",
    "out of usage",
    "limit reached",
]


def classify_api_error(error: Exception) -> APIErrorType:
    """Classify an API error by parsing the error message."""
    error_str = str(error).lower()

    for pattern in BUDGET_PATTERNS:
        if pattern in error_str:
            return APIErrorType.BUDGET_EXCEEDED

    for pattern in RATE_LIMIT_PATTERNS:
        if pattern in error_str:
            return APIErrorType.RATE_LIMITED

    for pattern in UNAVAILABLE_PATTERNS:
        if pattern in error_str:
            return APIErrorType.API_UNAVAILABLE

    return APIErrorType.UNKNOWN


def is_retryable_error(error_type: APIErrorType) -> bool:
    """Check if an error type is retryable."""
    return error_type in (APIErrorType.RATE_LIMITED, APIErrorType.API_UNAVAILABLE)


# Retry configuration
MAX_RETRIES = 3
RETRY_DELAYS = [5, 15, 45]  # Exponential backoff


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    provider_name: str  # "anthropic" or "openai"

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            model: Model identifier string.
            api_key: Optional API key (uses env var or web auth if None).
        """
        self.model = model
        self.api_key = api_key

    @abstractmethod
    async def _complete(self, prompt: str, system: str | None) -> str:
        """Send one prompt and return the full reply text."""

    async def generate(self, prompt: str, system: str | None = None) -> str:
        """Answer a prompt, retrying transient API errors.

        Args:
            prompt: Fully substituted prompt text.
            system: Optional system prompt.

        Returns:
            The reply text.

        Raises:
            Exception: The provider error once retries are exhausted or the
                error is not retryable.
        """
        last_error: Exception | None = None
        for attempt in range(MAX_RETRIES + 1):
            if attempt > 0:
                delay = RETRY_DELAYS[min(attempt - 1, len(RETRY_DELAYS) - 1)]
                logger.warning(
                    "Retrying %s generate after %ds (attempt %d/%d): %s",
                    self.provider_name,
                    delay,
                    attempt + 1,
                    MAX_RETRIES + 1,
                    last_error,
                )
                await asyncio.sleep(delay)
            try:
                text = await self._complete(prompt, system)
            except Exception as e:
                error_type = classify_api_error(e)
                if not is_retryable_error(error_type):
                    raise
                logger.warning(
                    "Transient API error (%s): %s. Will retry.",
                    error_type.value,
                    e,
                )
                last_error = e
                continue
            logger.info(
                "%s reply: %d chars for %d char prompt",
                self.provider_name,
                len(text),
                len(prompt),
            )
            return text

        assert last_error is not None
        raise last_error

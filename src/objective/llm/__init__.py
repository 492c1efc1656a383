"""Prompt templates and LLM providers for the objective."""
from __future__ import annotations

from .prompts import (
    CHECK_TASK_COMPLETED_PROMPT,
    CREATE_TASK_PROMPT,
    CURRENT_TASK_PROMPT,
    ObjectivePrompts,
    substitute_prompt,
)

__all__ = [
    "CHECK_TASK_COMPLETED_PROMPT",
    "CREATE_TASK_PROMPT",
    "CURRENT_TASK_PROMPT",
    "ObjectivePrompts",
    "substitute_prompt",
]

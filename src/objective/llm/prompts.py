"""Prompt templates for task generation, completion checks and context.

Templates may contain ``{{objective}}``, ``{{task}}`` and ``{{parent}}``.
They are filled from the current tree state before the host applies its own
global substitutions (character names and the like).
"""
from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Self

CREATE_TASK_PROMPT = (
    "Pause your roleplay. Please generate a numbered list of plain text tasks "
    "to complete an objective. The objective that you must make a numbered "
    'task list for is: "{{objective}}". The tasks created should take into '
    "account the character traits of {{char}}. These tasks may or may not "
    "involve {{user}} directly. Include the objective as the final task."
)

CHECK_TASK_COMPLETED_PROMPT = (
    "Pause your roleplay. Determine if this task is completed: [{{task}}]. "
    "To do this, examine the most recent messages. Your response must only "
    "contain either true or false, and nothing else. Example output: true"
)

CURRENT_TASK_PROMPT = (
    "Your current task is [{{task}}]. Balance existing roleplay with "
    "completing this task."
)

_OBJECTIVE_TOKEN = re.compile(r"{{objective}}", re.IGNORECASE)
_TASK_TOKEN = re.compile(r"{{task}}", re.IGNORECASE)
_PARENT_TOKEN = re.compile(r"{{parent}}", re.IGNORECASE)


@dataclass
class ObjectivePrompts:
    """The three editable templates used by a chat's objective."""

    create_task: str = CREATE_TASK_PROMPT
    check_task_completed: str = CHECK_TASK_COMPLETED_PROMPT
    current_task: str = CURRENT_TASK_PROMPT

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "createTask": self.create_task,
            "checkTaskCompleted": self.check_task_completed,
            "currentTask": self.current_task,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Self:
        """Create from dictionary, filling missing templates with defaults."""
        data = data or {}
        return cls(
            create_task=data.get("createTask") or CREATE_TASK_PROMPT,
            check_task_completed=(
                data.get("checkTaskCompleted") or CHECK_TASK_COMPLETED_PROMPT
            ),
            current_task=data.get("currentTask") or CURRENT_TASK_PROMPT,
        )


def substitute_prompt(
    template: str,
    *,
    objective: str | None = None,
    task: str | None = None,
    parent: str | None = None,
    substitute_global: Callable[[str], str] | None = None,
) -> str:
    """Fill the objective placeholders of a template.

    Args:
        template: Template text.
        objective: Description of the active objective.
        task: Description of the current task.
        parent: Description of the current task's parent.
        substitute_global: Optional host substitution applied afterwards.

    Returns:
        The rendered prompt. Missing values render as empty strings.
    """
    # Callables keep backslashes in descriptions from being read as escapes
    content = _OBJECTIVE_TOKEN.sub(lambda _: objective or "", template)
    content = _TASK_TOKEN.sub(lambda _: task or "", content)
    content = _PARENT_TOKEN.sub(lambda _: parent or "", content)
    if substitute_global is not None:
        content = substitute_global(content)
    return content

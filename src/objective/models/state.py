"""Persisted objective state for a single chat.

The document layout is the one stored in chat metadata::

    {
        "_schema": "objective_state", "_version": "1.0",
        "currentObjectiveId": 0,
        "taskTree": {...},
        "checkFrequency": 3,
        "chatDepth": 2,
        "hideTasks": false,
        "prompts": {"createTask": ..., "checkTaskCompleted": ..., "currentTask": ...}
    }
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from objective.llm.prompts import ObjectivePrompts
from objective.models.schema import (
    InvalidSchemaError,
    migrate_if_needed,
    write_schema_fields,
)
from objective.models.task import ROOT_ID
from objective.models.tree import TaskTree, TreeIntegrityError

logger = logging.getLogger(__name__)

SCHEMA_TYPE = "objective_state"

DEFAULT_CHECK_FREQUENCY = 3
DEFAULT_CHAT_DEPTH = 2

# Chat id used when the host has no chat selected
NO_CHAT_ID = "no-chat-id"


@dataclass
class ObjectiveState:
    """Everything persisted for one chat's objective."""

    task_tree: TaskTree = field(default_factory=TaskTree.new)
    current_objective_id: int = ROOT_ID
    check_frequency: int = DEFAULT_CHECK_FREQUENCY
    chat_depth: int = DEFAULT_CHAT_DEPTH
    hide_tasks: bool = False
    prompts: ObjectivePrompts = field(default_factory=ObjectivePrompts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            **write_schema_fields(SCHEMA_TYPE),
            "currentObjectiveId": self.current_objective_id,
            "taskTree": self.task_tree.to_dict(),
            "checkFrequency": self.check_frequency,
            "chatDepth": self.chat_depth,
            "hideTasks": self.hide_tasks,
            "prompts": self.prompts.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<state>") -> Self:
        """Create from dictionary, migrating and validating first.

        Raises:
            InvalidSchemaError: If the document is malformed or the tree
                breaks its invariants.
            MigrationNotFoundError: If the document version is unsupported.
        """
        data = migrate_if_needed(data, SCHEMA_TYPE, source)

        try:
            raw_tree = data.get("taskTree")
            task_tree = TaskTree.from_dict(raw_tree) if raw_tree else TaskTree.new()
            task_tree.validate()
            for node in task_tree.rederive_completion():
                logger.warning(
                    "Task %d completion did not match its sub-tasks, set to %s (%s)",
                    node.id,
                    node.completed,
                    source,
                )
            check_frequency = int(data.get("checkFrequency", DEFAULT_CHECK_FREQUENCY))
            chat_depth = int(data.get("chatDepth", DEFAULT_CHAT_DEPTH))
            objective_id = data.get("currentObjectiveId")
            current_objective_id = (
                int(objective_id) if objective_id is not None else ROOT_ID
            )
            prompts = ObjectivePrompts.from_dict(data.get("prompts"))
        except (
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
            TreeIntegrityError,
        ) as e:
            raise InvalidSchemaError(source, str(e)) from e

        if check_frequency < 0 or chat_depth < 0:
            raise InvalidSchemaError(
                source, "checkFrequency and chatDepth must be non-negative"
            )

        if task_tree.find_by_id(current_objective_id) is None:
            logger.warning(
                "Objective %d not in tree, falling back to root (%s)",
                current_objective_id,
                source,
            )
            current_objective_id = task_tree.root.id

        return cls(
            task_tree=task_tree,
            current_objective_id=current_objective_id,
            check_frequency=check_frequency,
            chat_depth=chat_depth,
            hide_tasks=bool(data.get("hideTasks", False)),
            prompts=prompts,
        )


class StateStore:
    """Reads and writes per-chat objective state as JSON files."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, chat_id: str | None) -> Path:
        """Get the state file for a chat.

        Raises:
            ValueError: If the chat id is not a plain file name.
        """
        name = chat_id or NO_CHAT_ID
        if name in (".", "..") or any(sep in name for sep in ("/", "\\", "\0")):
            raise ValueError(f"Invalid chat id: {name!r}")
        return self.directory / f"{name}.json"

    def exists(self, chat_id: str | None) -> bool:
        """Check if a chat has saved state."""
        return self.path_for(chat_id).exists()

    def load(self, chat_id: str | None) -> ObjectiveState | None:
        """Load a chat's state.

        Returns:
            ObjectiveState if a file exists, None otherwise.

        Raises:
            InvalidSchemaError: If the file is not valid state JSON.
        """
        path = self.path_for(chat_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidSchemaError(str(path), f"Invalid JSON: {e}") from e
        return ObjectiveState.from_dict(data, source=str(path))

    def save(self, chat_id: str | None, state: ObjectiveState) -> None:
        """Write a chat's state (write to temp file, then rename)."""
        path = self.path_for(chat_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            temp_path.replace(path)
        except Exception:
            # Clean up temp file on error
            if temp_path.exists():
                temp_path.unlink()
            raise
        logger.debug("Saved objective state to %s", path)

"""Shared context helpers for CLI command modules."""

from __future__ import annotations

import argparse
import sys

from objective.config.paths import get_paths
from objective.models.schema import SchemaError
from objective.models.state import StateStore
from objective.models.task import TaskNode
from objective.orchestration.session import ObjectiveSession


def state_store() -> StateStore:
    """State store rooted in the workspace chats directory."""
    return StateStore(get_paths().chats_dir)


def load_session_or_error(args: argparse.Namespace) -> ObjectiveSession | None:
    """Load the chat's session or print a user-facing error and return None."""
    try:
        return ObjectiveSession.load(state_store(), args.chat)
    except SchemaError as e:
        print(f"Error: Could not load objective state: {e}", file=sys.stderr)
        return None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def task_or_error(session: ObjectiveSession, task_id: int) -> TaskNode | None:
    """Look up a task by id or print a user-facing error and return None."""
    node = session.tree.find_by_id(task_id)
    if node is None:
        print(f"Error: Task {task_id} not found", file=sys.stderr)
    return node

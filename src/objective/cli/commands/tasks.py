"""Task editing commands."""

from __future__ import annotations

import argparse
import sys

from objective.cli.context import load_session_or_error, task_or_error
from objective.models.tree import TaskTreeError


def cmd_add(args: argparse.Namespace) -> int:
    """Add a task under the objective, or after another task."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    try:
        if args.after is not None:
            anchor = task_or_error(session, args.after)
            if anchor is None:
                return 1
            node = session.add_task_after(anchor, args.description)
        else:
            node = session.add_task(args.description, args.index)
    except (IndexError, TaskTreeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Added task {node.id}: {node.description}")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    """Delete a task and its sub-tasks."""
    session = load_session_or_error(args)
    if session is None:
        return 1
    node = task_or_error(session, args.task_id)
    if node is None:
        return 1

    try:
        session.remove_task(node)
    except TaskTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Removed task {node.id}")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    """Change a task's description."""
    session = load_session_or_error(args)
    if session is None:
        return 1
    node = task_or_error(session, args.task_id)
    if node is None:
        return 1

    session.edit_task(node, args.description)
    print(f"Updated task {node.id}")
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    """Swap a task with its previous or next sibling."""
    session = load_session_or_error(args)
    if session is None:
        return 1
    node = task_or_error(session, args.task_id)
    if node is None:
        return 1

    try:
        if args.direction == "up":
            moved = session.move_task_up(node)
        else:
            moved = session.move_task_down(node)
    except TaskTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not moved:
        edge = "top" if args.direction == "up" else "bottom"
        print(f"Task {node.id} is already at the {edge}")
    else:
        print(f"Moved task {node.id} {args.direction}")
    return 0


def _set_completed(args: argparse.Namespace, completed: bool) -> int:
    session = load_session_or_error(args)
    if session is None:
        return 1

    if args.task_id is None:
        node = session.current_task
        if node is None:
            print("Error: No current task", file=sys.stderr)
            return 1
    else:
        node = task_or_error(session, args.task_id)
        if node is None:
            return 1

    session.set_task_completed(node, completed)
    state = "completed" if completed else "not completed"
    print(f"Task {node.id} marked {state}")
    return 0


def cmd_complete(args: argparse.Namespace) -> int:
    """Mark a task (default: the current task) completed."""
    return _set_completed(args, True)


def cmd_uncomplete(args: argparse.Namespace) -> int:
    """Mark a task (default: the current task) not completed."""
    return _set_completed(args, False)

"""Commands that change the active objective."""

from __future__ import annotations

import argparse
import sys

from objective.cli.context import load_session_or_error, task_or_error
from objective.models.tree import OrphanedNodeError, TaskTreeError


def cmd_objective(args: argparse.Namespace) -> int:
    """Print or set the active objective's text."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    if args.text is None:
        print(session.objective.description)
        return 0

    session.set_objective_description(args.text)
    print(f"Objective set: {args.text}")
    return 0


def cmd_branch(args: argparse.Namespace) -> int:
    """Make a task the active objective."""
    session = load_session_or_error(args)
    if session is None:
        return 1
    node = task_or_error(session, args.task_id)
    if node is None:
        return 1

    try:
        session.branch(node)
    except TaskTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Objective is now task {node.id}: {node.description}")
    return 0


def cmd_parent(args: argparse.Namespace) -> int:
    """Move the active objective up to its parent."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    try:
        parent = session.go_to_parent()
    except OrphanedNodeError:
        print("Error: Objective is already the top-level objective", file=sys.stderr)
        return 1

    print(f"Objective is now task {parent.id}: {parent.description}")
    return 0

"""Commands that display the task tree."""

from __future__ import annotations

import argparse
import json

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from objective.cli.context import load_session_or_error
from objective.models.task import TaskNode
from objective.orchestration.session import ObjectiveSession


def _label(
    node: TaskNode, session: ObjectiveSession, highlighted: set[int]
) -> str:
    mark = "[green]✓[/green]" if node.completed else "[dim]○[/dim]"
    text = escape(node.description) or "[dim italic](empty)[/dim italic]"
    label = f"{mark} [dim]#{node.id}[/dim] {text}"
    if node.id in highlighted:
        label = f"[bold yellow]{label}[/bold yellow]"
    if node is session.objective:
        label += " [cyan](objective)[/cyan]"
    return label


def build_tree(session: ObjectiveSession) -> Tree:
    """Render the objective subtree as a rich Tree."""
    highlighted = set(session.highlighted_ids())
    objective = session.objective
    root = Tree(_label(objective, session, highlighted))

    def add_children(branch: Tree, node: TaskNode) -> None:
        for child in node.children:
            add_children(branch.add(_label(child, session, highlighted)), child)

    add_children(root, objective)
    return root


def cmd_show(args: argparse.Namespace) -> int:
    """Show the active objective and its tasks."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    console = Console()
    task = session.current_task
    if session.state.hide_tasks and not getattr(args, "all", False):
        console.print(f"Objective: {escape(session.objective.description)}")
    else:
        console.print(build_tree(session))

    if task is None:
        console.print("[dim]No current task[/dim]")
    else:
        console.print(f"Current task: [bold]{escape(task.description)}[/bold]")
    return 0


def cmd_debug(args: argparse.Namespace) -> int:
    """Dump the session state as JSON."""
    session = load_session_or_error(args)
    if session is None:
        return 1
    print(json.dumps(session.debug_dump(), indent=2))
    return 0

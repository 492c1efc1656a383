"""Argument parser construction for the objective CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from objective.cli.commands.prompts import PROMPT_FIELDS
from objective.llm.providers import PROVIDER_NAMES


def _task_id_argument(parser: argparse.ArgumentParser, optional: bool = False) -> None:
    if optional:
        parser.add_argument(
            "task_id",
            type=int,
            nargs="?",
            help="Task id (default: the current task)",
        )
    else:
        parser.add_argument("task_id", type=int, help="Task id")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        description="Objective - break a chat goal into tasks and track them"
    )
    parser.add_argument(
        "--workdir",
        "-w",
        type=Path,
        help="Working directory holding .objective/ (default: current directory)",
    )
    parser.add_argument(
        "--chat",
        "-c",
        help="Chat id whose objective to use (default: no-chat-id)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    show_parser = subparsers.add_parser("show", help="Show the objective and tasks")
    show_parser.add_argument(
        "--all",
        action="store_true",
        help="Show the task tree even when tasks are hidden",
    )

    objective_parser = subparsers.add_parser(
        "objective",
        help="Print or set the active objective text",
    )
    objective_parser.add_argument("text", nargs="?", help="New objective text")

    add_parser = subparsers.add_parser("add", help="Add a task")
    add_parser.add_argument("description", nargs="?", default="", help="Task text")
    position = add_parser.add_mutually_exclusive_group()
    position.add_argument(
        "--index",
        "-i",
        type=int,
        help="Position among the objective's tasks (default: last)",
    )
    position.add_argument(
        "--after",
        "-a",
        type=int,
        metavar="TASK_ID",
        help="Insert directly after this task",
    )

    remove_parser = subparsers.add_parser("remove", help="Delete a task")
    _task_id_argument(remove_parser)

    edit_parser = subparsers.add_parser("edit", help="Change a task's text")
    _task_id_argument(edit_parser)
    edit_parser.add_argument("description", help="New task text")

    move_parser = subparsers.add_parser("move", help="Reorder a task")
    _task_id_argument(move_parser)
    move_parser.add_argument("direction", choices=["up", "down"])

    complete_parser = subparsers.add_parser("complete", help="Mark a task done")
    _task_id_argument(complete_parser, optional=True)

    uncomplete_parser = subparsers.add_parser(
        "uncomplete",
        help="Mark a task not done",
    )
    _task_id_argument(uncomplete_parser, optional=True)

    branch_parser = subparsers.add_parser(
        "branch",
        help="Make a task the active objective",
    )
    _task_id_argument(branch_parser)

    subparsers.add_parser("parent", help="Go back to the objective's parent")

    subparsers.add_parser(
        "generate",
        help="Replace the objective's tasks with an LLM-generated list",
    )
    subparsers.add_parser(
        "check",
        help="Ask the LLM whether the current task is done",
    )

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument(
        "--check-frequency",
        type=int,
        help="Messages between automatic completion checks (0 disables)",
    )
    config_parser.add_argument(
        "--chat-depth",
        type=int,
        help="How many messages up the current task prompt is injected",
    )
    visibility = config_parser.add_mutually_exclusive_group()
    visibility.add_argument(
        "--hide-tasks",
        dest="hide_tasks",
        action="store_const",
        const=True,
        help="Hide the task list in 'show'",
    )
    visibility.add_argument(
        "--show-tasks",
        dest="hide_tasks",
        action="store_const",
        const=False,
        help="Show the task list in 'show'",
    )
    config_parser.add_argument("--provider", choices=PROVIDER_NAMES)
    config_parser.add_argument("--model", help="Model id (empty for default)")
    config_parser.add_argument(
        "--group-wait",
        type=float,
        help="Seconds to wait for group generation before a request",
    )
    config_parser.add_argument(
        "--send-wait",
        type=float,
        help="Seconds to wait for a pending send before a request",
    )

    prompts_parser = subparsers.add_parser(
        "prompts",
        help="Show, edit, and manage prompt presets",
    )
    prompts_sub = prompts_parser.add_subparsers(dest="prompts_command")
    prompts_sub.add_parser("show", help="Show the chat's prompt templates")
    prompts_sub.add_parser("list", help="List saved presets")
    set_parser = prompts_sub.add_parser("set", help="Replace one prompt template")
    set_parser.add_argument("field", choices=PROMPT_FIELDS)
    set_parser.add_argument("text", help="Template text")
    for name, help_text in (
        ("save", "Save the chat's prompts as a preset"),
        ("load", "Load a preset into the chat"),
        ("delete", "Delete a preset"),
    ):
        preset_parser = prompts_sub.add_parser(name, help=help_text)
        preset_parser.add_argument("name", help="Preset name")

    subparsers.add_parser("debug", help="Dump the chat's objective state")

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)

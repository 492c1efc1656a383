"""CLI orchestration and command routing."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from objective.cli.commands import (
    cmd_add,
    cmd_branch,
    cmd_check,
    cmd_complete,
    cmd_config,
    cmd_debug,
    cmd_edit,
    cmd_generate,
    cmd_move,
    cmd_objective,
    cmd_parent,
    cmd_prompts,
    cmd_remove,
    cmd_show,
    cmd_uncomplete,
)
from objective.cli.parser import parse_args
from objective.config.paths import get_paths, reset_paths

logger = logging.getLogger(__name__)


def dispatch(args: argparse.Namespace) -> int:
    """Route parsed args to the correct command handler."""
    command_handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "show": cmd_show,
        "objective": cmd_objective,
        "add": cmd_add,
        "remove": cmd_remove,
        "edit": cmd_edit,
        "move": cmd_move,
        "complete": cmd_complete,
        "uncomplete": cmd_uncomplete,
        "branch": cmd_branch,
        "parent": cmd_parent,
        "generate": cmd_generate,
        "check": cmd_check,
        "config": cmd_config,
        "prompts": cmd_prompts,
        "debug": cmd_debug,
    }

    handler = command_handlers.get(args.command or "show")
    if handler is None:
        return cmd_show(args)

    return handler(args)


def run(
    argv: Sequence[str] | None = None,
    *,
    configure_logging: Callable[[], None] | None = None,
) -> int:
    """Parse args, apply shared CLI setup, and execute command."""
    args = parse_args(argv)

    if args.workdir:
        workdir = args.workdir.resolve()
        workdir.mkdir(parents=True, exist_ok=True)
        os.chdir(workdir)
        reset_paths()
        get_paths(workdir)

    if configure_logging is not None:
        configure_logging()

    logger.info("Working directory: %s", Path.cwd())
    return dispatch(args)

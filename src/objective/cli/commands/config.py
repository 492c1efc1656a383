"""Chat and global configuration command."""

from __future__ import annotations

import argparse
import sys

from objective.cli.context import load_session_or_error
from objective.config.settings import settings
from objective.llm.providers import PROVIDER_NAMES


def _print_config(args: argparse.Namespace) -> None:
    session = load_session_or_error(args)
    if session is not None:
        state = session.state
        print(f"check_frequency: {state.check_frequency}")
        print(f"chat_depth: {state.chat_depth}")
        print(f"hide_tasks: {state.hide_tasks}")
    print(f"provider: {settings.llm_provider}")
    print(f"model: {settings.llm_model or '(provider default)'}")
    print(f"group_wait_timeout: {settings.group_wait_timeout:g}")
    print(f"send_wait_timeout: {settings.send_wait_timeout:g}")


def cmd_config(args: argparse.Namespace) -> int:
    """Show or change settings.

    Chat settings (check frequency, depth, task visibility) are stored with
    the chat; provider and wait settings are global.
    """
    chat_changes = (
        args.check_frequency is not None
        or args.chat_depth is not None
        or args.hide_tasks is not None
    )
    global_changes = (
        args.provider is not None
        or args.model is not None
        or args.group_wait is not None
        or args.send_wait is not None
    )
    if not chat_changes and not global_changes:
        _print_config(args)
        return 0

    if chat_changes:
        session = load_session_or_error(args)
        if session is None:
            return 1
        try:
            if args.check_frequency is not None:
                session.set_check_frequency(args.check_frequency)
            if args.chat_depth is not None:
                session.set_chat_depth(args.chat_depth)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if args.hide_tasks is not None:
            session.set_hide_tasks(args.hide_tasks)

    if args.provider is not None:
        if args.provider not in PROVIDER_NAMES:
            print(f"Error: Unknown provider '{args.provider}'", file=sys.stderr)
            return 1
        settings.llm_provider = args.provider
    if args.model is not None:
        settings.llm_model = args.model
    if args.group_wait is not None:
        settings.group_wait_timeout = args.group_wait
    if args.send_wait is not None:
        settings.send_wait_timeout = args.send_wait

    print("Settings updated")
    return 0

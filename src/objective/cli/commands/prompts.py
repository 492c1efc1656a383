"""Prompt template and preset commands."""

from __future__ import annotations

import argparse
import sys

from objective.cli.context import load_session_or_error
from objective.config.settings import PromptPresetError, settings

PROMPT_FIELDS = ("create_task", "check_task_completed", "current_task")


def cmd_prompts(args: argparse.Namespace) -> int:
    """Show, edit, or swap the chat's prompt templates."""
    if args.prompts_command == "list":
        for name in settings.list_prompt_presets():
            print(name)
        return 0

    session = load_session_or_error(args)
    if session is None:
        return 1
    prompts = session.state.prompts

    if args.prompts_command == "show":
        for field in PROMPT_FIELDS:
            print(f"[{field}]")
            print(getattr(prompts, field))
            print()
        return 0

    if args.prompts_command == "set":
        setattr(prompts, args.field, args.text)
        session.refresh_current_task()
        print(f"Updated {args.field} prompt")
        return 0

    try:
        if args.prompts_command == "save":
            settings.save_prompt_preset(args.name, prompts)
            print(f"Saved prompt preset '{args.name.strip()}'")
        elif args.prompts_command == "load":
            session.state.prompts = settings.load_prompt_preset(args.name)
            session.refresh_current_task()
            print(f"Loaded prompt preset '{args.name}'")
        elif args.prompts_command == "delete":
            settings.delete_prompt_preset(args.name)
            print(f"Deleted prompt preset '{args.name}'")
        else:
            print("Error: Missing prompts subcommand", file=sys.stderr)
            return 1
    except PromptPresetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0

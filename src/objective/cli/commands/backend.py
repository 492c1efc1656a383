"""Commands that ask the LLM backend for a judgment or a task list."""

from __future__ import annotations

import argparse
import asyncio
import sys

from objective.cli.context import load_session_or_error
from objective.config.settings import settings
from objective.llm.providers import LLMProvider, create_provider
from objective.orchestration.completion import CheckState, CompletionWorkflow
from objective.orchestration.generation import TaskGenerator
from objective.runtime.waits import WaitPolicy


def provider_from_settings() -> LLMProvider:
    """Build the configured provider."""
    name = settings.llm_provider
    return create_provider(
        name, model=settings.llm_model, api_key=settings.api_key_for(name)
    )


def _wait_policies() -> tuple[WaitPolicy, WaitPolicy]:
    return (
        WaitPolicy(timeout_seconds=settings.group_wait_timeout),
        WaitPolicy(timeout_seconds=settings.send_wait_timeout),
    )


def cmd_generate(args: argparse.Namespace) -> int:
    """Replace the objective's tasks with a generated list."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    try:
        provider = provider_from_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    group_wait, send_wait = _wait_policies()
    generator = TaskGenerator(
        session, provider, group_wait=group_wait, send_wait=send_wait
    )
    print(f"Generating tasks for: {session.objective.description}")
    outcome = asyncio.run(generator.generate_tasks())
    if outcome.aborted:
        print(f"Error: Task generation failed: {outcome.reason}", file=sys.stderr)
        return 1

    for index, task in enumerate(outcome.tasks, start=1):
        print(f"  {index}. {task.description}")
    print(f"Created {len(outcome.tasks)} tasks")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Ask the backend whether the current task is done."""
    session = load_session_or_error(args)
    if session is None:
        return 1

    try:
        provider = provider_from_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    group_wait, send_wait = _wait_policies()
    workflow = CompletionWorkflow(
        session, provider, group_wait=group_wait, send_wait=send_wait
    )
    outcome = asyncio.run(workflow.check_task_completed())

    if outcome.state is CheckState.IDLE:
        print("No current task to check")
        return 0
    if outcome.state is CheckState.ABORTED:
        print(f"Error: Completion check aborted: {outcome.reason}", file=sys.stderr)
        return 1
    if outcome.completed:
        print(f"Task {outcome.task_id} completed")
    elif outcome.ambiguous:
        print(f"Could not tell whether task {outcome.task_id} is done")
    else:
        print(f"Task {outcome.task_id} is not done yet")
    return 0

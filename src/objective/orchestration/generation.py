"""Task-list generation for the active objective."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from objective.llm.providers.base import LLMProvider
from objective.models.task import TaskNode
from objective.orchestration.session import ObjectiveSession
from objective.runtime.waits import (
    GROUP_WAIT,
    SEND_WAIT,
    BusyFlags,
    WaitPolicy,
    WaitTimeoutError,
    wait_until_idle,
)

logger = logging.getLogger(__name__)

NUMBERED_LIST_PATTERN = re.compile(r"^\d+\.")


def parse_numbered_list(text: str) -> list[str]:
    """Extract the items of a "1. ..." list, dropping every other line."""
    items: list[str] = []
    for line in text.split("\n"):
        line = line.strip()
        if NUMBERED_LIST_PATTERN.match(line):
            items.append(NUMBERED_LIST_PATTERN.sub("", line, count=1).strip())
    return items


@dataclass
class GenerationOutcome:
    """Result of a task-list generation."""

    tasks: list[TaskNode] = field(default_factory=list)
    response: str | None = None
    aborted: bool = False
    reason: str | None = None


class TaskGenerator:
    """Asks the backend to break the active objective into tasks."""

    def __init__(
        self,
        session: ObjectiveSession,
        provider: LLMProvider,
        busy: BusyFlags | None = None,
        *,
        group_wait: WaitPolicy = GROUP_WAIT,
        send_wait: WaitPolicy = SEND_WAIT,
    ) -> None:
        self.session = session
        self.provider = provider
        self.busy = busy or BusyFlags()
        self.group_wait = group_wait
        self.send_wait = send_wait

    async def generate_tasks(self) -> GenerationOutcome:
        """Replace the active objective's sub-tasks with a generated list.

        Existing sub-tasks are discarded only once a reply has arrived.
        """
        async with self.session.backend_lock:
            try:
                await wait_until_idle(self.busy, self.group_wait, self.send_wait)
            except WaitTimeoutError as e:
                logger.debug("Skipping task generation: %s", e)
                return GenerationOutcome(aborted=True, reason=str(e))

            objective = self.session.objective
            prompt = self.session.render_prompt(self.session.state.prompts.create_task)
            logger.info("Generating tasks for objective '%s'", objective.description)
            try:
                response = await self.provider.generate(prompt)
            except Exception as e:
                logger.debug("Task generation failed: %s", e)
                return GenerationOutcome(aborted=True, reason=str(e))

            if not self.session.tree.contains(objective):
                logger.debug("Objective %d was removed during generation", objective.id)
                return GenerationOutcome(
                    response=response,
                    aborted=True,
                    reason="objective removed during generation",
                )

            tasks = self.session.replace_objective_tasks(
                parse_numbered_list(response), objective
            )
            logger.info(
                "Response for objective '%s' was %r, which created %d tasks",
                objective.description,
                response,
                len(tasks),
            )
            return GenerationOutcome(tasks=tasks, response=response)

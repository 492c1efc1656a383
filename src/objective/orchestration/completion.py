"""Completion workflow: turn a yes/no judgment into a tree update.

Each check runs through a small state machine::

    IDLE -> WAITING -> EVALUATING -> COMPLETED | UNRESOLVED | ABORTED

IDLE means there is no current task. WAITING polls the host busy flags with a
bounded budget; running out of budget aborts the check before anything is
sent. EVALUATING asks the backend whether the current task is done and
classifies the reply. Only COMPLETED changes the tree.

Manual completion skips straight to COMPLETED. Automatic checks are gated
by a countdown of received chat messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

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


class CheckState(str, Enum):
    """States of a single completion check."""

    IDLE = "idle"
    WAITING = "waiting"
    EVALUATING = "evaluating"
    COMPLETED = "completed"
    UNRESOLVED = "unresolved"
    ABORTED = "aborted"


class Verdict(Enum):
    """Classification of a backend reply to the completion prompt."""

    TRUE = "true"
    FALSE = "false"
    AMBIGUOUS = "ambiguous"


def classify_response(response: str) -> Verdict:
    """Classify a reply by looking for "true" or "false" anywhere in it."""
    text = response.lower()
    if "true" in text:
        return Verdict.TRUE
    if "false" in text:
        return Verdict.FALSE
    return Verdict.AMBIGUOUS


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """Result of one completion check."""

    state: CheckState
    task_id: int | None = None
    response: str | None = None
    ambiguous: bool = False
    reason: str | None = None

    @property
    def completed(self) -> bool:
        return self.state is CheckState.COMPLETED


class CompletionWorkflow:
    """Decides when the current task is done and applies the result."""

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
        self.state = CheckState.IDLE
        self.counter = session.state.check_frequency
        self._armed_frequency = self.counter
        self._ignore_next_message = False

    def _enter(self, state: CheckState) -> None:
        logger.debug("Completion check: %s -> %s", self.state.value, state.value)
        self.state = state

    def _finish(
        self,
        state: CheckState,
        task: TaskNode | None = None,
        *,
        response: str | None = None,
        ambiguous: bool = False,
        reason: str | None = None,
    ) -> CheckOutcome:
        self._enter(state)
        return CheckOutcome(
            state=state,
            task_id=task.id if task is not None else None,
            response=response,
            ambiguous=ambiguous,
            reason=reason,
        )

    # --- Triggers ---

    async def check_task_completed(self) -> CheckOutcome:
        """Ask the backend whether the current task is done.

        Bypasses the message counter. Waits for the session's backend lock,
        so it never overlaps another check or a task generation.
        """
        if self.session.current_task is None:
            logger.debug("No current task to check")
            return self._finish(CheckState.IDLE)

        async with self.session.backend_lock:
            task = self.session.current_task
            if task is None:
                logger.debug("No current task to check")
                return self._finish(CheckState.IDLE)

            self._enter(CheckState.WAITING)
            try:
                await wait_until_idle(self.busy, self.group_wait, self.send_wait)
            except WaitTimeoutError as e:
                logger.debug("Skipping completion check: %s", e)
                return self._finish(CheckState.ABORTED, task, reason=str(e))

            self._enter(CheckState.EVALUATING)
            prompt = self.session.render_prompt(
                self.session.state.prompts.check_task_completed
            )
            try:
                response = await self.provider.generate(prompt)
            except Exception as e:
                logger.debug("Completion check failed, skipping: %s", e)
                return self._finish(CheckState.ABORTED, task, reason=str(e))

            return self._apply(task, response)

    def _apply(self, task: TaskNode, response: str) -> CheckOutcome:
        verdict = classify_response(response)

        if verdict is Verdict.TRUE:
            if not self.session.tree.contains(task):
                logger.debug("Task %d was removed during the check", task.id)
                return self._finish(
                    CheckState.ABORTED,
                    task,
                    response=response,
                    reason="task removed during check",
                )
            logger.info(
                "Character determined task '%s' is completed.", task.description
            )
            self.session.tree.complete_task(task)
            return self._finish(CheckState.COMPLETED, task, response=response)

        if verdict is Verdict.AMBIGUOUS:
            logger.warning(
                "Completion response did not contain true or false: %r", response
            )
            return self._finish(
                CheckState.UNRESOLVED, task, response=response, ambiguous=True
            )

        logger.debug("Checked task completion. Response: %r", response)
        return self._finish(CheckState.UNRESOLVED, task, response=response)

    def mark_task_completed(self) -> CheckOutcome:
        """Complete the current task on the user's say-so."""
        task = self.session.current_task
        if task is None:
            logger.warning("No current task to complete")
            return self._finish(CheckState.IDLE)
        logger.info("User determined task '%s' is completed.", task.description)
        self.session.tree.complete_task(task)
        return self._finish(CheckState.COMPLETED, task)

    async def on_message_received(self) -> CheckOutcome | None:
        """Count a received chat message and run a check when due.

        Returns:
            The check outcome if a check ran, otherwise None.
        """
        if self._ignore_next_message:
            self._ignore_next_message = False
            return None
        if self.session.current_task is None:
            return None

        frequency = self.session.state.check_frequency
        if frequency <= 0:
            return None
        if frequency != self._armed_frequency:
            # Frequency changed on the session since the countdown started
            self.reset_counter()

        self.counter -= 1
        if self.counter > 0:
            logger.debug("Next completion check in %d messages", self.counter)
            return None

        self.reset_counter()
        return await self.check_task_completed()

    def on_message_swiped(self) -> None:
        """A swiped reply replaces the last message; don't count the next one."""
        self._ignore_next_message = True

    def reset_counter(self) -> None:
        """Restart the countdown from the configured frequency."""
        self.counter = self.session.state.check_frequency
        self._armed_frequency = self.counter

    def set_check_frequency(self, frequency: int) -> None:
        """Change how many messages pass between automatic checks (0 disables)."""
        self.session.set_check_frequency(frequency)
        self.reset_counter()

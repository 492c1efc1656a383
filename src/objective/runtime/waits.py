"""Bounded polling waits on host-owned busy flags."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass


class WaitTimeoutError(Exception):
    """Raised when a condition does not become true within its budget."""

    def __init__(self, label: str, timeout_seconds: float) -> None:
        self.label = label
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Timed out after {timeout_seconds:g}s waiting for {label}")


@dataclass(frozen=True, slots=True)
class WaitPolicy:
    """How long and how often to poll a condition."""

    timeout_seconds: float
    interval_seconds: float = 0.01


# Group generation normally finishes quickly; sends can take a full reply
GROUP_WAIT = WaitPolicy(timeout_seconds=1.0)
SEND_WAIT = WaitPolicy(timeout_seconds=30.0)


@dataclass
class BusyFlags:
    """Host activity flags that block a backend request while set."""

    group_generating: bool = False
    send_in_progress: bool = False


async def wait_until(
    condition: Callable[[], bool],
    policy: WaitPolicy,
    label: str = "condition",
) -> None:
    """Poll ``condition`` until it returns True.

    Raises:
        WaitTimeoutError: If the condition is still False after the timeout.
    """
    deadline = time.monotonic() + policy.timeout_seconds
    while not condition():
        if time.monotonic() >= deadline:
            raise WaitTimeoutError(label, policy.timeout_seconds)
        await asyncio.sleep(policy.interval_seconds)


async def wait_until_idle(
    flags: BusyFlags,
    group_policy: WaitPolicy = GROUP_WAIT,
    send_policy: WaitPolicy = SEND_WAIT,
) -> None:
    """Wait for group generation to stop, then for any pending send.

    Raises:
        WaitTimeoutError: If either flag stays set past its budget.
    """
    await wait_until(
        lambda: not flags.group_generating, group_policy, "group generation"
    )
    await wait_until(lambda: not flags.send_in_progress, send_policy, "message send")

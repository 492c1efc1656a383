"""Runtime helpers for waiting on host activity."""

from objective.runtime.waits import (
    GROUP_WAIT,
    SEND_WAIT,
    BusyFlags,
    WaitPolicy,
    WaitTimeoutError,
    wait_until,
    wait_until_idle,
)

__all__ = [
    "BusyFlags",
    "GROUP_WAIT",
    "SEND_WAIT",
    "WaitPolicy",
    "WaitTimeoutError",
    "wait_until",
    "wait_until_idle",
]

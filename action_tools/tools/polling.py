"""Bounded poll-until-terminal helper for asynchronous remote jobs."""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional, TypeVar

from action_tools.tools.exceptions import ToolExecutionError

T = TypeVar("T")


class PollTimeoutError(ToolExecutionError):
    """The job did not reach a terminal state before the deadline."""


class PollCancelledError(ToolExecutionError):
    """The caller cancelled the wait."""


def poll_until(
    fetch: Callable[[], T],
    is_terminal: Callable[[T], bool],
    *,
    interval: float,
    max_wait: float,
    cancel: Optional[threading.Event] = None,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Call ``fetch`` every ``interval`` seconds until ``is_terminal`` holds.

    Waits before each fetch. Gives up with ``PollTimeoutError`` once
    ``max_wait`` seconds have elapsed, or with ``PollCancelledError`` as soon
    as ``cancel`` is set.
    """
    cancel = cancel or threading.Event()
    deadline = clock() + max_wait
    attempts = 0

    while True:
        remaining = deadline - clock()
        if remaining <= 0:
            raise PollTimeoutError(f"Timed out after {max_wait:g}s and {attempts} status checks")
        if cancel.wait(min(interval, remaining)):
            raise PollCancelledError("Cancelled while waiting for the job to finish")

        attempts += 1
        value = fetch()
        if is_terminal(value):
            return value

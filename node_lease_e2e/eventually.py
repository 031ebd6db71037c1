#!/usr/bin/env python3
"""Retry-until-true polling for state that the cluster reconciles asynchronously."""

import time
from typing import Callable, Optional

from .errors import ConvergenceTimeout

# A condition returns None once it holds, otherwise a short reason it does not (yet).
Condition = Callable[[], Optional[str]]


def eventually(
    condition: Condition,
    timeout: float,
    interval: float,
    description: str,
    printer=None,
) -> None:
    """
    Poll a condition until it holds or the timeout elapses.

    The condition is always evaluated at least once. A condition that raises
    counts as one failed attempt and is retried like any other.

    Args:
        condition: Zero-argument callable returning None on success or an error message
        timeout: Total seconds to keep polling
        interval: Seconds to sleep between attempts
        description: What is being waited for, used in progress and failure messages
        printer: Printer instance for output (optional)

    Raises:
        ConvergenceTimeout: If the condition never held within the timeout
    """
    deadline = time.monotonic() + timeout
    attempt = 0
    last_error = None

    while True:
        attempt += 1
        try:
            last_error = condition()
        except Exception as e:
            last_error = f"{type(e).__name__}: {e}"

        if last_error is None:
            if printer and attempt > 1:
                printer.print_success(f"Condition met after {attempt} attempts: {description}")
            return

        if printer:
            printer.print_info(f"Attempt {attempt}: still waiting for {description} ({last_error})")

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        time.sleep(min(interval, remaining))

    raise ConvergenceTimeout(description, timeout, last_error)

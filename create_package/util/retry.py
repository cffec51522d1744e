"""
Fixed-delay polling for providers that are eventually consistent.

Both helpers wait indefinitely unless a timeout is given.
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from create_package.exceptions import PollTimeoutError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def wait_until(
    predicate: Callable[[], bool],
    description: str,
    interval: float = 1.0,
    timeout: float | None = None,
    on_wait: Callable[[], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Block until ``predicate`` returns True.

    Args:
        predicate: Called before every wait; polling stops once it is truthy
        description: What is being waited for, used in logs and errors
        interval: Seconds between polls (default: 1.0)
        timeout: Give up after this many seconds (default: never)
        on_wait: Optional callback invoked before each sleep
        sleep: Sleep function, replaceable in tests
        clock: Monotonic clock, replaceable in tests

    Raises:
        PollTimeoutError: If ``timeout`` elapses first

    Example:
        wait_until(lambda: not travis.current_user()["is_syncing"], "Travis sync")
    """
    deadline = None if timeout is None else clock() + timeout

    while not predicate():
        if deadline is not None and clock() >= deadline:
            raise PollTimeoutError(description, timeout)
        logger.debug(f"Waiting {interval}s for {description}")
        if on_wait is not None:
            on_wait()
        sleep(interval)


def retry_on(
    should_retry: Callable[[Exception], bool],
    func: Callable[[], T],
    description: str,
    interval: float = 1.0,
    timeout: float | None = None,
    on_retry: Callable[[Exception], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call ``func`` until it succeeds, retrying only errors ``should_retry`` accepts.

    Any other exception propagates immediately.

    Args:
        should_retry: Filter deciding whether an exception is retried
        func: Operation to attempt
        description: What is being attempted, used in logs and errors
        interval: Seconds between attempts (default: 1.0)
        timeout: Give up after this many seconds (default: never)
        on_retry: Optional callback invoked with the error before each retry
        sleep: Sleep function, replaceable in tests
        clock: Monotonic clock, replaceable in tests

    Returns:
        The first successful result of ``func``

    Raises:
        PollTimeoutError: If ``timeout`` elapses first
    """
    deadline = None if timeout is None else clock() + timeout

    while True:
        try:
            return func()
        except Exception as e:
            if not should_retry(e):
                raise
            if deadline is not None and clock() >= deadline:
                raise PollTimeoutError(description, timeout) from e
            logger.debug(f"Retrying {description} in {interval}s: {e}")
            if on_retry is not None:
                on_retry(e)
            sleep(interval)

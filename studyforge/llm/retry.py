"""Retry with exponential backoff for collaborator calls.

Responsibilities:
- Re-invoke a failing call only when its error is classified as retryable.
- Double the delay between attempts up to a fixed ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import sleep
from typing import Callable, TypeVar

from ..errors import is_transient_error
from ..telemetry.logger import log_event

T = TypeVar("T")


def with_retry(
    fn: Callable[[], T],
    *,
    max_retries: int = 3,
    initial_delay_seconds: float = 1.0,
    max_delay_seconds: float = 10.0,
    should_retry: Callable[[BaseException], bool] = is_transient_error,
    sleeper: Callable[[float], None] = sleep,
    operation: str = "collaborator",
) -> T:
    """Call `fn` up to `1 + max_retries` times and return its first success.

    Non-retryable errors and the error of the final attempt propagate unchanged.
    """

    if max_retries < 0:
        raise ValueError("`max_retries` must be non-negative.")

    delay = initial_delay_seconds
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:
            if attempt >= max_retries or not should_retry(exc):
                raise
            attempt += 1
            log_event(
                "WARNING",
                "retry",
                "backoff",
                operation=operation,
                attempt=f"{attempt}/{max_retries}",
                delay_seconds=f"{delay:.2f}",
                error_type=type(exc).__name__,
            )
            sleeper(delay)
            delay = min(delay * 2, max_delay_seconds)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry settings bundled for injection into pipeline components."""

    max_retries: int = 3
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    should_retry: Callable[[BaseException], bool] = is_transient_error
    sleeper: Callable[[float], None] = sleep

    def call(self, fn: Callable[[], T], *, operation: str = "collaborator") -> T:
        """Invoke `fn` under this policy."""

        return with_retry(
            fn,
            max_retries=self.max_retries,
            initial_delay_seconds=self.initial_delay_seconds,
            max_delay_seconds=self.max_delay_seconds,
            should_retry=self.should_retry,
            sleeper=self.sleeper,
            operation=operation,
        )

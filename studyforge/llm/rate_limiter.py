"""Per-user generation quota enforcement.

Responsibilities:
- Count a user's recent invocations in the durable store.
- Deny requests over quota before any generation work starts.
- Fail open when the store cannot answer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..io.storage import ContentStore
from ..models.datatypes import RateLimitDecision
from ..telemetry.logger import log_event


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


@dataclass(slots=True)
class RateLimiter:
    """Sliding-window per-user limiter backed by a `ContentStore`."""

    store: ContentStore
    max_invocations: int = 10
    window: timedelta = field(default_factory=lambda: timedelta(hours=1))
    clock: Callable[[], datetime] = utc_now

    def check(self, user_id: str) -> RateLimitDecision:
        """Return whether `user_id` may start another generation now."""

        now = self.clock()
        reset_at = now + self.window
        try:
            used = self.store.count_recent_invocations(user_id, now - self.window)
        except Exception as exc:
            log_event(
                "WARNING",
                "rate-limit",
                "fail_open",
                error_type=type(exc).__name__,
            )
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_invocations,
                reset_at=reset_at,
            )

        if used >= self.max_invocations:
            return RateLimitDecision(
                allowed=False,
                remaining=0,
                reset_at=reset_at,
                error=(
                    "Rate limit exceeded. You can generate up to "
                    f"{self.max_invocations} items per {_describe_window(self.window)}. "
                    "Please try again later."
                ),
            )
        return RateLimitDecision(
            allowed=True,
            remaining=max(0, self.max_invocations - used),
            reset_at=reset_at,
        )


def _describe_window(window: timedelta) -> str:
    seconds = int(window.total_seconds())
    if seconds == 3600:
        return "hour"
    if seconds % 3600 == 0:
        return f"{seconds // 3600} hours"
    if seconds % 60 == 0:
        return f"{seconds // 60} minutes"
    return f"{seconds} seconds"

"""Freshness-bounded content cache over the durable content store.

Responsibilities:
- Serve previously generated content for the same user, source, kind, and parameters.
- Match request parameters exactly, after rendering values as strings.
- Track basic cache telemetry (hits/misses) for run diagnostics.
- Fail open: store errors degrade to a miss on lookup and are dropped on store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping

from ..io.storage import ContentStore
from ..models.content import ContentKind, GeneratedContent, Narration
from ..models.datatypes import CacheEntry
from ..telemetry.logger import log_event
from .rate_limiter import utc_now


def stringify_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Render request parameters the way cache entries store them."""

    return {str(key): str(value) for key, value in params.items()}


@dataclass(slots=True)
class ContentCache:
    """Cache of generated content keyed by user, source, kind, and parameters."""

    store: ContentStore
    freshness_window: timedelta = field(default_factory=lambda: timedelta(days=7))
    clock: Callable[[], datetime] = utc_now
    hits: int = 0
    misses: int = 0

    def lookup(
        self,
        user_id: str,
        source_id: str,
        kind: ContentKind,
        params: Mapping[str, Any],
    ) -> CacheEntry | None:
        """Return the newest fresh entry whose parameters match exactly, else `None`."""

        freshness_start = self.clock() - self.freshness_window
        try:
            entry = self.store.find_recent_entry(user_id, source_id, kind, freshness_start)
        except Exception as exc:
            log_event("WARNING", "cache", "lookup_failed", error_type=type(exc).__name__)
            entry = None

        if entry is None or not self._is_servable(entry, params):
            self.misses += 1
            return None
        self.hits += 1
        log_event("INFO", "cache", "hit", kind=kind.value, source=source_id)
        return entry

    def store_content(
        self,
        user_id: str,
        source_id: str,
        kind: ContentKind,
        params: Mapping[str, Any],
        content: GeneratedContent,
    ) -> CacheEntry:
        """Insert a new entry for produced content and return it."""

        entry = CacheEntry(
            user_id=user_id,
            source_id=source_id,
            kind=kind,
            params=stringify_params(params),
            content=content,
            created_at=self.clock(),
        )
        try:
            self.store.insert_entry(entry)
        except Exception as exc:
            log_event("WARNING", "cache", "store_failed", error_type=type(exc).__name__)
        return entry

    def hit_rate(self) -> float:
        """Return cache hit rate for current cache lifecycle."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)

    @staticmethod
    def _is_servable(entry: CacheEntry, params: Mapping[str, Any]) -> bool:
        if dict(entry.params) != stringify_params(params):
            return False
        if isinstance(entry.content, Narration) and not entry.content.audio_reference:
            return False
        return True

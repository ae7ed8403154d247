"""Artifact and generated-content storage.

Responsibilities:
- Provide deterministic filesystem storage for audio artifacts.
- Define the durable content-store contract used by the rate limiter and cache.
- Offer in-memory and JSON-file content stores.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from ..models.content import ContentKind, content_from_payload, content_to_payload
from ..models.datatypes import CacheEntry


class ArtifactStore:
    """Filesystem-backed artifact store."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def save_bytes(self, relative_path: Path | str, data: bytes) -> str:
        """Save binary data and return an opaque reference to it."""

        path = self.root / Path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)


class ContentStore(Protocol):
    """Durable store of generated content entries."""

    def count_recent_invocations(self, user_id: str, window_start: datetime) -> int:
        """Return how many entries `user_id` created at or after `window_start`."""

    def find_recent_entry(
        self,
        user_id: str,
        source_id: str,
        kind: ContentKind,
        freshness_start: datetime,
    ) -> CacheEntry | None:
        """Return the newest matching entry created at or after `freshness_start`."""

    def insert_entry(self, entry: CacheEntry) -> None:
        """Persist one generated content entry."""


def _newest_match(
    entries: list[CacheEntry],
    user_id: str,
    source_id: str,
    kind: ContentKind,
    freshness_start: datetime,
) -> CacheEntry | None:
    matches = [
        entry
        for entry in entries
        if entry.user_id == user_id
        and entry.source_id == source_id
        and entry.kind is kind
        and entry.created_at >= freshness_start
    ]
    if not matches:
        return None
    return max(matches, key=lambda entry: entry.created_at)


@dataclass(slots=True)
class InMemoryContentStore:
    """Process-local content store, mainly for tests and one-shot CLI runs."""

    entries: list[CacheEntry] = field(default_factory=list)

    def count_recent_invocations(self, user_id: str, window_start: datetime) -> int:
        return sum(
            1
            for entry in self.entries
            if entry.user_id == user_id and entry.created_at >= window_start
        )

    def find_recent_entry(
        self,
        user_id: str,
        source_id: str,
        kind: ContentKind,
        freshness_start: datetime,
    ) -> CacheEntry | None:
        return _newest_match(self.entries, user_id, source_id, kind, freshness_start)

    def insert_entry(self, entry: CacheEntry) -> None:
        self.entries.append(entry)


def entry_to_record(entry: CacheEntry) -> dict[str, Any]:
    """Serialize a cache entry into a JSON-compatible record."""

    return {
        "user_id": entry.user_id,
        "source_id": entry.source_id,
        "kind": entry.kind.value,
        "params": dict(entry.params),
        "content": content_to_payload(entry.content),
        "created_at": entry.created_at.isoformat(),
    }


def entry_from_record(record: dict[str, Any]) -> CacheEntry:
    """Rebuild a cache entry from its JSON record."""

    kind = ContentKind.parse(str(record["kind"]))
    params = record.get("params", {})
    if not isinstance(params, dict):
        raise ValueError("Stored entry field `params` must be an object.")
    return CacheEntry(
        user_id=str(record["user_id"]),
        source_id=str(record["source_id"]),
        kind=kind,
        params={str(key): str(value) for key, value in params.items()},
        content=content_from_payload(kind, record["content"]),
        created_at=datetime.fromisoformat(str(record["created_at"])),
    )


class JsonFileContentStore:
    """Content store persisted as one JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def count_recent_invocations(self, user_id: str, window_start: datetime) -> int:
        return sum(
            1
            for entry in self._load()
            if entry.user_id == user_id and entry.created_at >= window_start
        )

    def find_recent_entry(
        self,
        user_id: str,
        source_id: str,
        kind: ContentKind,
        freshness_start: datetime,
    ) -> CacheEntry | None:
        return _newest_match(self._load(), user_id, source_id, kind, freshness_start)

    def insert_entry(self, entry: CacheEntry) -> None:
        with self._lock:
            entries = self._load()
            entries.append(entry)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"entries": [entry_to_record(item) for item in entries]}
            self.path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )

    def _load(self) -> list[CacheEntry]:
        """Load all entries; a missing file is an empty store."""

        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        records = payload.get("entries", []) if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise ValueError(f"Content store `{self.path}` must hold an `entries` list.")
        return [entry_from_record(record) for record in records]

"""Unit tests for per-user rate limiting and the freshness-bounded content cache."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from studyforge.io.storage import InMemoryContentStore
from studyforge.llm.cache import ContentCache, stringify_params
from studyforge.llm.rate_limiter import RateLimiter
from studyforge.models.content import (
    ContentKind,
    Narration,
    Question,
    QuestionSet,
)
from studyforge.models.datatypes import CacheEntry


class _BrokenStore:
    """Content store whose every operation fails."""

    def count_recent_invocations(self, user_id: str, window_start: datetime) -> int:
        raise ConnectionError("store offline")

    def find_recent_entry(self, *args: object) -> CacheEntry | None:
        raise ConnectionError("store offline")

    def insert_entry(self, entry: CacheEntry) -> None:
        raise ConnectionError("store offline")


def _quiz(question: str = "What is osmosis?") -> QuestionSet:
    return QuestionSet(
        questions=(
            Question(question=question, options=("a", "b", "c", "d"), correct_answer=2),
        ),
        difficulty="basic",
    )


def _entry(
    created_at: datetime,
    *,
    user_id: str = "user-1",
    source_id: str = "notes.pdf",
    kind: ContentKind = ContentKind.QUIZ,
    params: dict[str, str] | None = None,
    content: object | None = None,
) -> CacheEntry:
    return CacheEntry(
        user_id=user_id,
        source_id=source_id,
        kind=kind,
        params=params or {"difficulty": "basic", "count": "1"},
        content=content or _quiz(),
        created_at=created_at,
    )


def test_rate_limiter_allows_users_under_quota(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
    fixed_now: datetime,
) -> None:
    """Users under quota should be allowed with the remaining count reported."""

    for minutes in (5, 10, 20):
        content_store.insert_entry(_entry(fixed_now - timedelta(minutes=minutes)))
    content_store.insert_entry(_entry(fixed_now - timedelta(minutes=5), user_id="user-2"))
    limiter = RateLimiter(store=content_store, max_invocations=10, clock=fixed_clock)

    decision = limiter.check("user-1")

    assert decision.allowed is True
    assert decision.remaining == 7
    assert decision.reset_at == fixed_now + timedelta(hours=1)
    assert decision.error is None


def test_rate_limiter_denies_users_at_quota(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
    fixed_now: datetime,
) -> None:
    """A user with a full window should be denied with a readable error."""

    for minutes in range(10):
        content_store.insert_entry(_entry(fixed_now - timedelta(minutes=minutes)))
    limiter = RateLimiter(store=content_store, max_invocations=10, clock=fixed_clock)

    decision = limiter.check("user-1")

    assert decision.allowed is False
    assert decision.remaining == 0
    assert decision.error is not None
    assert "up to 10 items per hour" in decision.error


def test_rate_limiter_ignores_invocations_outside_window(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
    fixed_now: datetime,
) -> None:
    """Entries older than the window should not count toward the quota."""

    for hours in (2, 3, 5):
        content_store.insert_entry(_entry(fixed_now - timedelta(hours=hours)))
    limiter = RateLimiter(store=content_store, max_invocations=3, clock=fixed_clock)

    decision = limiter.check("user-1")

    assert decision.allowed is True
    assert decision.remaining == 3


def test_rate_limiter_fails_open_when_store_is_unavailable(
    fixed_clock: Callable[[], datetime],
) -> None:
    """Store failures should allow the request with the full quota."""

    limiter = RateLimiter(store=_BrokenStore(), max_invocations=4, clock=fixed_clock)

    decision = limiter.check("user-1")

    assert decision.allowed is True
    assert decision.remaining == 4


def test_cache_serves_stored_content_for_identical_parameters(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
    fixed_now: datetime,
) -> None:
    """A stored entry should be returned for the same user, source, kind, and params."""

    cache = ContentCache(store=content_store, clock=fixed_clock)
    params = {"difficulty": "basic", "count": "1"}

    stored = cache.store_content("user-1", "notes.pdf", ContentKind.QUIZ, params, _quiz())
    hit = cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, params)

    assert stored.created_at == fixed_now
    assert hit == stored
    assert cache.hits == 1
    assert cache.misses == 0
    assert cache.hit_rate() == 1.0


def test_cache_misses_on_parameter_kind_or_identity_mismatch(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
) -> None:
    """Different parameters, kinds, users, or sources should all miss."""

    cache = ContentCache(store=content_store, clock=fixed_clock)
    params = {"difficulty": "basic", "count": "1"}
    cache.store_content("user-1", "notes.pdf", ContentKind.QUIZ, params, _quiz())

    assert cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, {**params, "count": "2"}) is None
    assert cache.lookup("user-1", "notes.pdf", ContentKind.FLASHCARDS, params) is None
    assert cache.lookup("user-2", "notes.pdf", ContentKind.QUIZ, params) is None
    assert cache.lookup("user-1", "other.pdf", ContentKind.QUIZ, params) is None
    assert cache.misses == 4
    assert cache.hit_rate() == 0.0


def test_cache_uses_only_the_newest_fresh_entry(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
    fixed_now: datetime,
) -> None:
    """Stale entries should be ignored and the newest entry alone decides a hit."""

    params = {"difficulty": "basic", "count": "1"}
    content_store.insert_entry(
        _entry(fixed_now - timedelta(days=8), params=params, content=_quiz("stale"))
    )
    cache = ContentCache(store=content_store, clock=fixed_clock)

    assert cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, params) is None

    content_store.insert_entry(
        _entry(fixed_now - timedelta(days=2), params=params, content=_quiz("older"))
    )
    content_store.insert_entry(
        _entry(fixed_now - timedelta(days=1), params=params, content=_quiz("newest"))
    )
    hit = cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, params)

    assert hit is not None
    assert hit.content.questions[0].question == "newest"

    content_store.insert_entry(
        _entry(
            fixed_now - timedelta(hours=1),
            params={"difficulty": "advanced", "count": "1"},
        )
    )
    assert cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, params) is None


def test_cache_does_not_serve_narration_without_audio(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
) -> None:
    """Narration entries lacking an audio reference should be treated as misses."""

    cache = ContentCache(store=content_store, clock=fixed_clock)
    params = {"difficulty": "basic"}
    narration = Narration(
        script="A narrated summary.",
        audio_reference="",
        duration_seconds=1,
        voice="onyx",
        difficulty="basic",
    )
    cache.store_content("user-1", "notes.pdf", ContentKind.NARRATION, params, narration)

    assert cache.lookup("user-1", "notes.pdf", ContentKind.NARRATION, params) is None


def test_cache_fails_open_on_store_errors(fixed_clock: Callable[[], datetime]) -> None:
    """Lookup errors should be misses and store errors should not propagate."""

    cache = ContentCache(store=_BrokenStore(), clock=fixed_clock)
    params = {"difficulty": "basic", "count": "1"}

    assert cache.lookup("user-1", "notes.pdf", ContentKind.QUIZ, params) is None
    entry = cache.store_content("user-1", "notes.pdf", ContentKind.QUIZ, params, _quiz())
    assert entry.content == _quiz()
    assert cache.misses == 1


def test_cache_requires_parameter_values_to_match_exactly(
    content_store: InMemoryContentStore,
    fixed_clock: Callable[[], datetime],
) -> None:
    """Padded values should miss, while key order should not matter."""

    cache = ContentCache(store=content_store, clock=fixed_clock)
    cache.store_content(
        "user-1", "notes.pdf", ContentKind.QUIZ, {"difficulty": "basic", "count": 10}, _quiz()
    )

    assert cache.lookup(
        "user-1", "notes.pdf", ContentKind.QUIZ, {"difficulty": "basic ", "count": "10"}
    ) is None
    assert cache.lookup(
        "user-1", "notes.pdf", ContentKind.QUIZ, {"count": "10", "difficulty": "basic"}
    ) is not None
    assert stringify_params({"count": 10, "skip": False}) == {"count": "10", "skip": "False"}

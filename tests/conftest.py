"""Shared pytest fixtures for the full Studyforge test suite."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from datetime import datetime, timezone

import pytest
from loguru import logger

from studyforge.io.storage import InMemoryContentStore
from studyforge.llm.retry import RetryPolicy

FIXED_NOW = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_loguru_sinks() -> Iterator[None]:
    """Restore the default loguru sink so CLI runs cannot leak closed streams."""

    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def fixed_now() -> datetime:
    """Provide the deterministic timestamp returned by `fixed_clock`."""

    return FIXED_NOW


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Provide a clock that always returns the same UTC timestamp."""

    return lambda: FIXED_NOW


@pytest.fixture
def content_store() -> InMemoryContentStore:
    """Provide an empty process-local content store."""

    return InMemoryContentStore()


@pytest.fixture
def no_sleep_retry_policy() -> RetryPolicy:
    """Provide the default retry policy without real backoff delays."""

    return RetryPolicy(sleeper=lambda _: None)

"""Deterministic slug helpers for filesystem-safe artifact names.

Responsibilities:
- Normalize free-form source identifiers into stable ASCII slugs.
- Keep slug behavior locale-independent for reproducible filenames.
"""

from __future__ import annotations

import re
import unicodedata


def slugify(value: str, fallback: str = "source") -> str:
    """Return a deterministic filesystem-safe ASCII slug."""

    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    lowered = ascii_only.lower().strip()
    collapsed = re.sub(r"[^a-z0-9]+", "-", lowered)
    slug = collapsed.strip("-")
    return slug or fallback

"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations

from pathlib import Path


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_required_string(value: object, field_name: str) -> str:
    """Parse a required non-empty string value."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must be a non-empty string.")
    return normalized


def parse_path(value: object, field_name: str) -> Path:
    """Parse a required non-empty path value."""

    return Path(parse_required_string(value, field_name))


def parse_int(value: object, field_name: str, *, minimum: int = 0) -> int:
    """Parse an integer token no smaller than `minimum`.

    Raises:
        ValueError: If the value is a boolean, not integral, or below `minimum`.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be an integer >= {minimum}.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        try:
            parsed = int(normalized) if normalized is not None else None
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be an integer >= {minimum}.") from exc
        if parsed is None:
            raise ValueError(f"`{field_name}` must be an integer >= {minimum}.")
    if parsed < minimum:
        raise ValueError(f"`{field_name}` must be an integer >= {minimum}.")
    return parsed


def parse_float(value: object, field_name: str, *, minimum: float = 0.0) -> float:
    """Parse a float token no smaller than `minimum`."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number >= {minimum}.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a number >= {minimum}.")
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a number >= {minimum}.") from exc
    if parsed < minimum:
        raise ValueError(f"`{field_name}` must be a number >= {minimum}.")
    return parsed

"""Identifier normalization for versioned AT ids.

Auckland Transport suffixes trip, route and stop ids with the GTFS version
they were published under, e.g. ``"1234-20240101"``. Schedule data is keyed
by the bare id, so callers strip everything from the separator onwards.
"""

from __future__ import annotations

DEFAULT_VERSION_SEPARATOR = "-"


def truncate_at(value: str, separator: str) -> str | None:
    """Return the part of ``value`` before the first ``separator``.

    Returns ``None`` when the separator does not occur: an id without a
    version suffix is not a usable AT identifier.

    Raises:
        ValueError: If ``separator`` is not a single character.
    """
    if len(separator) != 1:
        msg = f"Separator must be a single character, got {separator!r}"
        raise ValueError(msg)

    index = value.find(separator)
    if index < 0:
        return None
    return value[:index]


def strip_version(value: str | None, separator: str = DEFAULT_VERSION_SEPARATOR) -> str | None:
    """Strip the version suffix from an optional id."""
    if value is None:
        return None
    return truncate_at(value, separator)

"""Search ranking and multi-value field helpers for reference data."""
from __future__ import annotations
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from kada_connect.core.reference_data import normalize_text

T = TypeVar("T")

# Lower rank sorts first
EXACT_MATCH = 0
PREFIX_MATCH = 1
SUBSTRING_MATCH = 2


def match_rank(candidate: str, query: str) -> Optional[int]:
    """Rank a candidate against an already lower-cased query.

    Returns:
        EXACT_MATCH, PREFIX_MATCH or SUBSTRING_MATCH, or None when the
        candidate does not contain the query.
    """
    text = candidate.lower()
    if text == query:
        return EXACT_MATCH
    if text.startswith(query):
        return PREFIX_MATCH
    if query in text:
        return SUBSTRING_MATCH
    return None


def rank_matches(
    items: Sequence[T],
    query: str,
    limit: int,
    key: Optional[Callable[[T], str]] = None,
) -> list[T]:
    """Case-insensitive search: exact, then prefix, then substring matches.

    Ties keep the original collection order. An empty query matches nothing.
    """
    needle = normalize_text(query).lower()
    if not needle:
        return []

    ranked = []
    for position, item in enumerate(items):
        rank = match_rank(key(item) if key else item, needle)
        if rank is not None:
            ranked.append((rank, position, item))

    ranked.sort(key=lambda entry: (entry[0], entry[1]))
    return [item for _, _, item in ranked[:limit]]


def split_multi_value(value) -> list[str]:
    """Split a list or comma-separated string field into normalized values.

    Separator-only fragments such as "/" are dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: Iterable = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        parts = value
    else:
        return []

    values = []
    for part in parts:
        normalized = normalize_text(part)
        if normalized and normalized.strip("/\\"):
            values.append(normalized)
    return values

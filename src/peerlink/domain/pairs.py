"""Canonical keys for unordered user pairs.

The pair key is what makes "at most one pending request per pair" a
storage-level constraint: ``pair_key(a, b) == pair_key(b, a)`` and the
``pending_pair_index`` table uses it as its primary key.
"""

from __future__ import annotations


def pair_key(a: str, b: str) -> str:
    """Return the order-independent key for the pair ``{a, b}``.

    Each id is length-prefixed so ids containing the separator cannot
    collide with a different pair.

    Examples:
        >>> pair_key("u2", "u1")
        '2:u1|2:u2'
        >>> pair_key("u1", "u2") == pair_key("u2", "u1")
        True
    """
    lo, hi = sorted((a, b))
    return f"{len(lo)}:{lo}|{len(hi)}:{hi}"


def validate_pair(a: str, b: str) -> list[str]:
    """Return validation errors for a prospective pair (empty list if valid)."""
    errors: list[str] = []
    if not a or not a.strip():
        errors.append("from user id must be a non-empty string")
    if not b or not b.strip():
        errors.append("to user id must be a non-empty string")
    if not errors and a == b:
        errors.append("cannot connect a user with themselves")
    return errors

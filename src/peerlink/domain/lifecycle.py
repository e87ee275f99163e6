"""Connection request lifecycle.

A request is created ``pending`` and resolved exactly once, to either
``accepted`` or ``rejected``. Resolved requests are never mutated again
and never deleted; they remain as the audit trail for the pair.
"""

from __future__ import annotations

from enum import StrEnum


class RequestStatus(StrEnum):
    """Lifecycle status of a connection request."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


REQUEST_TRANSITIONS: dict[str, list[str]] = {
    "pending": ["accepted", "rejected"],
    "accepted": [],
    "rejected": [],
}


def is_valid_transition(current: str, target: str) -> bool:
    """Check if moving a request from *current* to *target* is allowed."""
    return target in REQUEST_TRANSITIONS.get(current, [])


def is_terminal(status: str) -> bool:
    """A status with no outgoing transitions is terminal."""
    return not REQUEST_TRANSITIONS.get(status, [])

"""ID patterns and generation.

Requests and connections get random, prefixed IDs. User ids are opaque
strings owned by the identity provider and are never generated here.

INVARIANT: IDs are permanent. A rejected request's id is never reused by
a later request between the same pair.
"""

from __future__ import annotations

import re
import uuid

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "request": re.compile(r"^req_[0-9a-f]{16}$"),
    "connection": re.compile(r"^con_[0-9a-f]{16}$"),
}

ID_PREFIXES: dict[str, str] = {
    "request": "req_",
    "connection": "con_",
}


def _generate(kind: str) -> str:
    return f"{ID_PREFIXES[kind]}{uuid.uuid4().hex[:16]}"


def generate_request_id() -> str:
    """New connection request id, e.g. ``req_3f9a0c7be21d4a55``."""
    return _generate("request")


def generate_connection_id() -> str:
    """New directed connection row id, e.g. ``con_0b6e1d2f9a8c7b34``."""
    return _generate("connection")


def validate_id(value: str, kind: str) -> bool:
    """Check whether *value* matches the expected pattern for *kind*."""
    pattern = ID_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.match(value) is not None

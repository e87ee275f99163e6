"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult. Expected
failures travel as ``ok=False`` with a specific :class:`ErrorCode` so
callers can tell "already requested" from "not authorized" from
"store unavailable" without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Error kinds surfaced by the connection service."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    DUPLICATE_REQUEST = "DUPLICATE_REQUEST"
    ALREADY_CONNECTED = "ALREADY_CONNECTED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    NOT_CONNECTED = "NOT_CONNECTED"
    TRANSIENT_STORE = "TRANSIENT_STORE"
    USER_EXISTS = "USER_EXISTS"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"send_request"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (e.g. a notification that could not be queued).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        """Shorthand for an ``ok=False`` result."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code.value, message=message, detail=detail),
        )

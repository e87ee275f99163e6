"""Frozen domain records passed between the layers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from peerlink.domain.lifecycle import RequestStatus

PLACEHOLDER_NAME = "Unknown User"
PLACEHOLDER_ROLE = "user"


class NotificationKind(StrEnum):
    """Events delivered to the notifier."""

    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"


class ConnectionRequest(BaseModel):
    """One request between two users (row of ``connection_requests``)."""

    model_config = {"frozen": True}

    id: str
    from_user_id: str
    to_user_id: str
    status: RequestStatus
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Any) -> ConnectionRequest:
        return cls(
            id=row.id,
            from_user_id=row.from_user_id,
            to_user_id=row.to_user_id,
            status=RequestStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class Connection(BaseModel):
    """One directed half of an undirected edge (row of ``connections``)."""

    model_config = {"frozen": True}

    id: str
    user_id: str
    peer_id: str
    request_id: str | None = None
    created_at: str


class UserProfile(BaseModel):
    """Display attributes resolved by identity lookup."""

    model_config = {"frozen": True}

    id: str
    name: str
    role: str = PLACEHOLDER_ROLE
    department: str | None = None
    placeholder: bool = False

    @classmethod
    def make_placeholder(
        cls,
        user_id: str,
        *,
        name: str = PLACEHOLDER_NAME,
        role: str = PLACEHOLDER_ROLE,
    ) -> UserProfile:
        """Stand-in profile for an id that could not be resolved."""
        return cls(id=user_id, name=name, role=role, placeholder=True)

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "role": self.role}


class NotificationEvent(BaseModel):
    """Payload handed to the notifier."""

    model_config = {"frozen": True}

    kind: NotificationKind
    related_user_id: str
    related_user_name: str
    request_id: str | None = None

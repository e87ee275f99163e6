"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer, so a renamed key (``incoming`` vs ``received``) fails
fast in tests instead of silently breaking a renderer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class PartySummary(BaseModel):
    """Resolved identity of the other side of a request or connection."""

    id: str
    name: str
    role: str


class SendResultData(BaseModel):
    """Payload contract for ``ConnectionService.send``."""

    request_id: str
    status: str
    from_user_id: str
    to_user_id: str
    created_at: str


class ResolveResultData(BaseModel):
    """Payload contract for ``accept`` and ``reject``."""

    request_id: str
    status: str
    from_user_id: str
    to_user_id: str
    edges_written: int = 0


class ConnectionItem(BaseModel):
    """One peer in ``list_connections``."""

    model_config = ConfigDict(extra="allow")

    peer_id: str
    created_at: str
    name: str
    role: str


class ListConnectionsResultData(BaseModel):
    """Payload contract for ``ConnectionService.list_connections``."""

    user_id: str
    count: int
    items: list[ConnectionItem]


class RequestItem(BaseModel):
    """One request row in pending listings and history."""

    model_config = ConfigDict(extra="allow")

    id: str
    from_user_id: str
    to_user_id: str
    status: str
    created_at: str
    updated_at: str


class IncomingRequestItem(RequestItem):
    sender: PartySummary


class OutgoingRequestItem(RequestItem):
    recipient: PartySummary


class PendingRequestsResultData(BaseModel):
    """Payload contract for ``ConnectionService.list_pending_requests``."""

    user_id: str
    incoming: list[IncomingRequestItem]
    outgoing: list[OutgoingRequestItem]


class RequestHistoryResultData(BaseModel):
    """Payload contract for ``ConnectionService.request_history``."""

    user_id: str
    count: int
    items: list[RequestItem]

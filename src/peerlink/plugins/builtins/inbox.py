"""Built-in inbox plugin — persists notifications to the ``notifications`` table.

This is the default notification sink: each ``notify_user`` hook call
becomes one unread row addressed to the recipient. Delivery to devices,
email, or queues belongs to third-party plugins implementing the same hook.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pluggy
from sqlalchemy import insert, select, update

from peerlink.domain.models import NotificationKind
from peerlink.infrastructure.database.engine import READ_ONLY_OPTION
from peerlink.infrastructure.database.schema import notifications
from peerlink.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

hookimpl = pluggy.HookimplMarker("peerlink")

logger = logging.getLogger(__name__)

_MESSAGES: dict[str, str] = {
    NotificationKind.CONNECTION_REQUEST: "{name} sent you a connection request",
    NotificationKind.CONNECTION_ACCEPTED: "{name} accepted your connection request",
}


def render_message(kind: str, related_user_name: str) -> str:
    """Human-readable notification text for *kind*."""
    template = _MESSAGES.get(kind, "{name}: " + kind)
    return template.format(name=related_user_name or "A user")


class InboxPlugin:
    """Stores notifications for later retrieval by the recipient."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @hookimpl
    def notify_user(
        self,
        user_id: str,
        kind: str,
        related_user_id: str,
        related_user_name: str,
        request_id: str | None,
    ) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(notifications).values(
                    user_id=user_id,
                    kind=kind,
                    related_user_id=related_user_id,
                    related_user_name=related_user_name,
                    request_id=request_id,
                    message=render_message(kind, related_user_name),
                    read=0,
                    created_at=now_iso(),
                )
            )
        logger.debug("Stored %s notification for %s", kind, user_id)

    def list_for_user(self, user_id: str, *, unread_only: bool = False) -> list[dict[str, Any]]:
        """Notifications addressed to *user_id*, newest first."""
        stmt = select(notifications).where(notifications.c.user_id == user_id)
        if unread_only:
            stmt = stmt.where(notifications.c.read == 0)
        stmt = stmt.order_by(notifications.c.id.desc())

        with self._engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
            rows = conn.execute(stmt).mappings().all()
        return [{**dict(row), "read": bool(row["read"])} for row in rows]

    def mark_read(self, notification_id: int, user_id: str) -> bool:
        """Mark one notification read. False if it does not belong to *user_id*."""
        with self._engine.begin() as conn:
            result = conn.execute(
                update(notifications)
                .where(notifications.c.id == notification_id, notifications.c.user_id == user_id)
                .values(read=1)
            )
        return result.rowcount == 1

"""InboxService — read side of the built-in notification sink."""

from __future__ import annotations

from typing import TYPE_CHECKING

from peerlink.plugins.builtins.inbox import InboxPlugin
from peerlink.services.base import BaseService
from peerlink.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from peerlink.infrastructure.store import Store

INBOX_PLUGIN_NAME = "inbox-builtin"


class InboxService(BaseService):
    """List and acknowledge notifications stored by :class:`InboxPlugin`."""

    def __init__(self, store: Store) -> None:
        super().__init__(store)
        plugin = None
        if store.plugin_manager is not None:
            plugin = store.plugin_manager.get_plugin(INBOX_PLUGIN_NAME)
        self._inbox: InboxPlugin = (
            plugin if isinstance(plugin, InboxPlugin) else InboxPlugin(store.engine)
        )

    def list_notifications(self, user_id: str, *, unread_only: bool = False) -> ServiceResult:
        op = "list_notifications"
        if not user_id or not user_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "user id is required")

        items = self._inbox.list_for_user(user_id, unread_only=unread_only)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "user_id": user_id,
                "count": len(items),
                "unread": sum(1 for item in items if not item["read"]),
                "items": items,
            },
        )

    def mark_read(self, user_id: str, notification_id: int) -> ServiceResult:
        op = "mark_read"
        if not self._inbox.mark_read(notification_id, user_id):
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"No notification {notification_id} for {user_id}",
                notification_id=notification_id,
            )
        return ServiceResult(
            ok=True, op=op, data={"user_id": user_id, "notification_id": notification_id}
        )

"""Pluggy hook specifications for peerlink notifications and lifecycle events.

All hooks are dispatched through the WAL-backed EventBus after the
originating transaction has committed. Implementations run off the
caller's path; a failing hook never affects the operation that fired it.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("peerlink")


class PeerlinkHookSpec:
    """Hook specifications for the peerlink plugin system."""

    @hookspec
    def notify_user(
        self,
        user_id: str,
        kind: str,
        related_user_id: str,
        related_user_name: str,
        request_id: str | None,
    ) -> None:
        """Deliver a notification addressed to *user_id*."""

    @hookspec
    def post_request_resolved(
        self,
        request_id: str,
        status: str,
        from_user_id: str,
        to_user_id: str,
    ) -> None:
        """Called after a request is accepted or rejected."""

    @hookspec
    def post_connection_removed(self, user_id: str, peer_id: str) -> None:
        """Called after both directions of a connection are removed."""

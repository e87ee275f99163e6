"""Tests for UserService."""

from __future__ import annotations

from peerlink.infrastructure.store import Store
from peerlink.services.result import ErrorCode
from peerlink.services.users import UserService


class TestUserService:
    def test_add_and_get(self, store: Store) -> None:
        svc = UserService(store)
        added = svc.add_user("alice", "  Alice Moreau ", role="mentor", department="CS")
        assert added.ok
        assert added.data == {
            "id": "alice",
            "name": "Alice Moreau",
            "role": "mentor",
            "department": "CS",
        }
        assert svc.get_user("alice").data["name"] == "Alice Moreau"

    def test_duplicate(self, store: Store) -> None:
        svc = UserService(store)
        svc.add_user("alice", "Alice")
        result = svc.add_user("alice", "Alice")
        assert result.error is not None
        assert result.error.code == ErrorCode.USER_EXISTS

    def test_validation(self, store: Store) -> None:
        svc = UserService(store)
        assert svc.add_user("", "Alice").error is not None
        result = svc.add_user("alice", " ")
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED

    def test_get_unknown(self, store: Store) -> None:
        result = UserService(store).get_user("ghost")
        assert result.error is not None
        assert result.error.code == ErrorCode.NOT_FOUND

    def test_list(self, store: Store) -> None:
        svc = UserService(store)
        svc.add_user("bob", "Bob")
        svc.add_user("alice", "Alice")
        data = svc.list_users().data
        assert data["count"] == 2
        assert [u["id"] for u in data["items"]] == ["alice", "bob"]

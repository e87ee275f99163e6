"""UserService — seeding and inspecting the identity directory."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError

from peerlink.services._helpers import now_iso
from peerlink.services.base import BaseService
from peerlink.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Register and look up user profiles.

    The connection service only ever reads profiles; this service is the
    write side so a deployment without an external directory can still be
    exercised end to end.
    """

    def add_user(
        self,
        user_id: str,
        name: str,
        *,
        role: str = "user",
        department: str | None = None,
    ) -> ServiceResult:
        op = "add_user"
        if not user_id or not user_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "user id is required")
        if not name or not name.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "name is required")

        try:
            profile = self._store.directory.add_user(
                user_id, name.strip(), role=role, department=department, now=now_iso()
            )
        except IntegrityError:
            return ServiceResult.failure(
                op, ErrorCode.USER_EXISTS, f"User already exists: {user_id}", user_id=user_id
            )
        except OperationalError as exc:
            logger.warning("Store unavailable during %s: %s", op, exc.orig)
            return ServiceResult.failure(
                op,
                ErrorCode.TRANSIENT_STORE,
                "The connection store is temporarily unavailable; retry the operation",
                retryable=True,
            )

        logger.info("User %s registered", user_id)
        return ServiceResult(ok=True, op=op, data=profile.model_dump(exclude={"placeholder"}))

    def get_user(self, user_id: str) -> ServiceResult:
        op = "get_user"
        if not self._store.directory.exists(user_id):
            return ServiceResult.failure(
                op, ErrorCode.NOT_FOUND, f"No such user: {user_id}", user_id=user_id
            )
        profile = self._store.directory.get_user(user_id)
        return ServiceResult(ok=True, op=op, data=profile.model_dump(exclude={"placeholder"}))

    def list_users(self) -> ServiceResult:
        profiles = self._store.directory.list_users()
        return ServiceResult(
            ok=True,
            op="list_users",
            data={
                "count": len(profiles),
                "items": [p.model_dump(exclude={"placeholder"}) for p in profiles],
            },
        )

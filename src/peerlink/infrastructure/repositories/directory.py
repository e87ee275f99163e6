"""Identity lookup — resolves user ids to display attributes.

The connection service consumes profiles read-only through the
:class:`IdentityLookup` protocol. ``get_user`` never raises: an unknown
id or a store failure degrades to a placeholder profile so a request is
never dropped from a listing because its counterpart could not be resolved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from peerlink.domain.models import PLACEHOLDER_NAME, PLACEHOLDER_ROLE, UserProfile
from peerlink.infrastructure.database.engine import READ_ONLY_OPTION
from peerlink.infrastructure.database.schema import users

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class IdentityLookup(Protocol):
    """Anything that can resolve a user id to a profile without raising."""

    def get_user(self, user_id: str) -> UserProfile: ...


class UserDirectory:
    """SQL-backed :class:`IdentityLookup` over the ``users`` table."""

    def __init__(
        self,
        engine: Engine,
        *,
        placeholder_name: str = PLACEHOLDER_NAME,
        placeholder_role: str = PLACEHOLDER_ROLE,
    ) -> None:
        self._engine = engine
        self._placeholder_name = placeholder_name
        self._placeholder_role = placeholder_role

    def get_user(self, user_id: str) -> UserProfile:
        try:
            with self._engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
                row = conn.execute(select(users).where(users.c.id == user_id)).first()
        except SQLAlchemyError:
            logger.warning("Identity lookup failed for %s", user_id, exc_info=True)
            row = None

        if row is None:
            return UserProfile.make_placeholder(
                user_id,
                name=self._placeholder_name,
                role=self._placeholder_role,
            )
        return UserProfile(
            id=row.id,
            name=row.name,
            role=row.role,
            department=row.department,
        )

    def add_user(
        self,
        user_id: str,
        name: str,
        *,
        role: str = "user",
        department: str | None = None,
        now: str,
    ) -> UserProfile:
        """Register a profile. Raises ``IntegrityError`` if *user_id* exists."""
        with self._engine.begin() as conn:
            conn.execute(
                insert(users).values(
                    id=user_id,
                    name=name,
                    role=role,
                    department=department,
                    created_at=now,
                )
            )
        return UserProfile(id=user_id, name=name, role=role, department=department)

    def exists(self, user_id: str) -> bool:
        with self._engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
            return conn.execute(select(users.c.id).where(users.c.id == user_id)).first() is not None

    def list_users(self) -> list[UserProfile]:
        with self._engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
            rows = conn.execute(select(users).order_by(users.c.id)).all()
        return [
            UserProfile(id=r.id, name=r.name, role=r.role, department=r.department) for r in rows
        ]

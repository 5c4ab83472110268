"""User repository for principal lookups and login bookkeeping."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.orm import selectinload

from algoshield.models.role import Group
from algoshield.models.user import User
from algoshield.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Principal rows with their direct and group roles.

    Password hashing and token handling live elsewhere; this class only
    reads and writes ``users`` rows.
    """

    model = User

    def _with_relations(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.options(
            selectinload(User.roles),
            selectinload(User.groups).selectinload(Group.roles),
        )

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email, ignoring case and surrounding blanks."""
        return self._first(select(User).where(User.email == normalize_email(email)))

    def get_with_roles(self, user_id: UUID) -> User | None:
        return self._first(select(User).where(User.id == user_id))

    def update_last_login(self, user_id: UUID, at: datetime) -> int:
        """Stamp ``last_login_at`` without loading the row.

        :returns: Rows touched; ``0`` when the user no longer exists.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(last_login_at=at)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

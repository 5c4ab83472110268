"""User model definition for the AlgoShield identity store."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from algoshield.core.extensions import db

from .base import IdentityRecord
from .role import user_groups, user_roles

if TYPE_CHECKING:
    from .role import Group, Role


class User(IdentityRecord, db.Model):
    """
    Authentication identity (principal).

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed) so uniqueness is
        case-insensitive.
    name : str
        Display name.
    password_hash : str | None
        Password verifier. ``None`` for principals that cannot log in with a
        password.
    active : bool
        Inactive users are rejected at token validation.
    last_login_at : datetime | None
        Last successful authentication.
    """

    __tablename__ = "users"
    __repr_attrs__ = ("email",)

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # Relationships
    roles: Mapped[list[Role]] = relationship(
        "Role", secondary=user_roles, back_populates="users", lazy="selectin"
    )
    groups: Mapped[list[Group]] = relationship(
        "Group", secondary=user_groups, back_populates="users", lazy="selectin"
    )

    def effective_roles(self) -> set[Role]:
        """
        Return direct roles united with roles inherited through groups.

        :returns: Role instances de-duplicated by identity.
        :rtype: set[Role]
        """
        by_id = {role.id: role for role in self.roles}
        for group in self.groups:
            for role in group.roles:
                by_id.setdefault(role.id, role)
        return set(by_id.values())

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or has no ``@``.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()

"""Role and group models plus the association tables that link them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, String, Table, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from algoshield.core.extensions import db

from .base import IdentityRecord

if TYPE_CHECKING:
    from .user import User

# --- Association tables (no payload, composite primary keys) ---
user_roles = Table(
    "user_roles",
    db.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

user_groups = Table(
    "user_groups",
    db.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Uuid, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
)

group_roles = Table(
    "group_roles",
    db.metadata,
    Column("group_id", Uuid, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(IdentityRecord, db.Model):
    """
    Named permission bundle.

    Fields
    ------
    name : str
        Short textual name, compared case-sensitively by the access guard.
    description : str | None
        Optional operator-facing description.
    """

    __tablename__ = "roles"
    __repr_attrs__ = ("name",)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)

    users: Mapped[list[User]] = relationship(
        "User", secondary=user_roles, back_populates="roles"
    )
    groups: Mapped[list[Group]] = relationship(
        "Group", secondary=group_roles, back_populates="roles"
    )


class Group(IdentityRecord, db.Model):
    """Set of users that inherit the group's roles."""

    __tablename__ = "groups"
    __repr_attrs__ = ("name",)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_groups_name"),)

    roles: Mapped[list[Role]] = relationship(
        "Role", secondary=group_roles, back_populates="groups", lazy="selectin"
    )
    users: Mapped[list[User]] = relationship(
        "User", secondary=user_groups, back_populates="groups"
    )

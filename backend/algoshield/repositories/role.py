"""Role repository used by principal creation and the seed command."""

from __future__ import annotations

from sqlalchemy import select

from algoshield.models.role import Role
from algoshield.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Persistence-only repository for :class:`Role`."""

    model = Role

    def get_by_name(self, name: str) -> Role | None:
        """Fetch a role by exact (case-sensitive) name.

        :param name: Role name such as ``viewer``.
        :type name: str
        :returns: Role or ``None``.
        :rtype: Role | None
        """
        return self._first(select(Role).where(Role.name == name))

    def get_or_create(self, name: str, *, description: str | None = None) -> tuple[Role, bool]:
        """Return the named role, creating it when missing.

        :returns: ``(role, created)``.
        :rtype: tuple[Role, bool]
        """
        role = self.get_by_name(name)
        if role is not None:
            return role, False
        return self.add(Role(name=name, description=description)), True

"""Shared plumbing for the identity repositories.

Repositories only read and stage rows. Transactions belong to the unit of
work that handed them their session, so nothing here commits or rolls back.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.orm import Session

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Session-bound access to one mapped class.

    :param session: Session owned by the enclosing unit of work.
    """

    model: ClassVar[type[Any]]

    def __init__(self, session: Session) -> None:
        self.session = session

    def _with_relations(self, stmt: Select[Any]) -> Select[Any]:
        """Hook for eager-loading options; lookups pass through it."""
        return stmt

    def _first(self, stmt: Select[Any]) -> E | None:
        return self.session.execute(self._with_relations(stmt)).scalars().first()

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key and defaults exist."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        return self.session.get(self.model, entity_id)

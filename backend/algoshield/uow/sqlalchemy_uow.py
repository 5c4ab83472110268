"""SQLAlchemy units of work bound to ``db.session``."""

from __future__ import annotations

import logging
from contextlib import suppress
from types import TracebackType

from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from algoshield.core.extensions import db
from algoshield.repositories import RoleRepository, UserRepository
from algoshield.uow.base import UnitOfWork

LOGGER = logging.getLogger(__name__)

# Backends accepting ``SET TRANSACTION``; SQLite only gets the flush guard.
_SET_TRANSACTION_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})
_ISOLATION_LEVELS = frozenset({"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"})


class _SessionScope(UnitOfWork):
    """Attach the identity repositories to the current scoped session."""

    def __init__(self) -> None:
        self.session = db.session
        self.users = UserRepository(session=self.session)
        self.roles = RoleRepository(session=self.session)

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyUnitOfWork(_SessionScope):
    """Read-write scope: commit on clean exit, roll back otherwise."""

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def commit(self) -> None:
        self.session.commit()


class _FlushGuard:
    """``before_flush`` listener refusing any pending ORM change."""

    def __init__(self, target: Session) -> None:
        self.target = target
        self.active = False

    def _refuse(self, session: Session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked with pending changes.")

    def install(self) -> None:
        event.listen(self.target, "before_flush", self._refuse)
        self.active = True

    def remove(self) -> None:
        if not self.active:
            return
        with suppress(InvalidRequestError):
            event.remove(self.target, "before_flush", self._refuse)
        self.active = False


class SQLAlchemyReadOnlyUnitOfWork(_SessionScope):
    """Lookup scope that never writes.

    When the scope opens its own transaction it asks PostgreSQL and MySQL
    for ``READ ONLY`` at the requested isolation level. When the session is
    already inside a transaction the scope joins it and leaves it untouched
    on exit. In both cases ORM flushes with pending changes are refused.

    :param isolation_level: ``SET TRANSACTION ISOLATION LEVEL`` value, or
        ``None`` to keep the server default.
    """

    def __init__(self, *, isolation_level: str | None = "READ COMMITTED") -> None:
        super().__init__()
        self.isolation_level = isolation_level
        self._owned: SessionTransaction | None = None
        # Concrete session of this thread, not the scoped_session registry.
        self._guard = _FlushGuard(self.session())

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = None
        with suppress(InvalidRequestError):
            self._owned = self.session.begin()
        self._guard.install()
        if self._owned is not None:
            self._restrict_transaction()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            self._owned = None
            self._guard.remove()

    def commit(self) -> None:
        """Always raises: this scope does not allow commit()."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def _restrict_transaction(self) -> None:
        if self.session.connection().dialect.name not in _SET_TRANSACTION_DIALECTS:
            return
        statements = []
        if self.isolation_level:
            level = self.isolation_level.strip().upper()
            if level not in _ISOLATION_LEVELS:
                LOGGER.warning("uow.unknown_isolation_level", extra={"reason": level})
            statements.append(f"SET TRANSACTION ISOLATION LEVEL {level}")
        statements.append("SET TRANSACTION READ ONLY")
        try:
            for statement in statements:
                self.session.execute(text(statement))
        except SQLAlchemyError:
            LOGGER.warning("uow.read_only_directives_failed", exc_info=True)

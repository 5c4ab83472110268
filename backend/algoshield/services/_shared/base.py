"""Common base for the identity and auth services."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from algoshield.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BaseService:
    """Unit-of-work factories and a clock for application services.

    Services reach the database only through the scopes returned by
    :meth:`rw_uow` and :meth:`ro_uow`, and raise
    :class:`~algoshield.services._shared.errors.ServiceError` subclasses that
    :mod:`algoshield.core.errors` maps onto HTTP responses.

    :param clock: Callable returning an aware UTC ``datetime``.
    """

    READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=isolation or self.READ_ISOLATION)

    def now_utc(self) -> datetime:
        return self._clock()

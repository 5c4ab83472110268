"""Transaction boundary shared by the identity services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from algoshield.repositories import RoleRepository, UserRepository


class UnitOfWork(ABC):
    """One transaction around a group of repository calls.

    Leaving the ``with`` block normally commits; leaving it with an exception
    rolls back and lets the exception propagate. Subclasses that need a
    different exit policy (read-only scopes) override :meth:`__exit__`.
    """

    users: UserRepository
    roles: RoleRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except BaseException:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

"""Units of work over the Flask-scoped SQLAlchemy session.

Services open a :class:`SQLAlchemyUnitOfWork` for writes and a
:class:`SQLAlchemyReadOnlyUnitOfWork` for lookups.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyReadOnlyUnitOfWork", "SQLAlchemyUnitOfWork", "UnitOfWork"]

"""factory_boy factories persisting through the test app's session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session the ``app`` fixture binds per test."""

    current = None

    @classmethod
    def set(cls, session) -> None:
        cls.current = session

    @classmethod
    def get(cls):
        if cls.current is None:
            raise RuntimeError("No session bound for factories; request the 'app' fixture.")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Commit every built row.

    Services open their own units of work, which only see committed data.
    """

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"

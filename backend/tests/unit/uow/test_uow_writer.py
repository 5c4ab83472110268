"""Read-write unit of work: commit on success, roll back on error."""

from __future__ import annotations

import pytest

from algoshield.models import User
from algoshield.uow import SQLAlchemyUnitOfWork


def test_clean_exit_commits(app, session):
    with SQLAlchemyUnitOfWork() as uow:
        uow.users.add(User(email="writer@example.com", name="Writer"))

    session.expire_all()
    assert session.query(User).filter_by(email="writer@example.com").count() == 1


def test_exception_rolls_back_and_propagates(app, session):
    with pytest.raises(LookupError), SQLAlchemyUnitOfWork() as uow:
        uow.users.add(User(email="doomed@example.com", name="Doomed"))
        raise LookupError("abort")

    assert session.query(User).count() == 0


def test_failed_commit_rolls_back(app, session, monkeypatch):
    uow = SQLAlchemyUnitOfWork()

    def _fail() -> None:
        raise RuntimeError("commit failed")

    monkeypatch.setattr(uow, "commit", _fail)

    with pytest.raises(RuntimeError, match="commit failed"), uow:
        uow.users.add(User(email="half@example.com", name="Half"))

    assert session.query(User).count() == 0


def test_role_get_or_create_is_idempotent(app):
    with SQLAlchemyUnitOfWork() as uow:
        first, created = uow.roles.get_or_create("viewer")
    assert created is True

    with SQLAlchemyUnitOfWork() as uow:
        again, created = uow.roles.get_or_create("viewer")
        assert created is False
        assert again.id == first.id

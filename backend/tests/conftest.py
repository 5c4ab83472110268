"""Shared fixtures: one isolated application per test.

The app runs on in-memory SQLite and a fakeredis-backed revocation
registry, so nothing survives between tests.
"""

from __future__ import annotations

import fakeredis
import pytest

from algoshield.core.config import TestingConfig
from algoshield.core.extensions import db as _db
from algoshield.core.security import get_auth_service
from algoshield.factory import create_app
from algoshield.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from algoshield.infra.redis.redis_revocation_registry import RedisRevocationRegistry
from algoshield.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from factories import SQLAlchemySession


@pytest.fixture()
def fake_redis():
    return fakeredis.FakeRedis()


@pytest.fixture()
def registry(fake_redis):
    return RedisRevocationRegistry(fake_redis)


@pytest.fixture()
def app_config():
    """Config class for :func:`app`; modules override it to change settings."""
    return TestingConfig


@pytest.fixture()
def app(app_config, registry, monkeypatch):
    """Testing app inside an active app context with fresh tables."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    application = create_app(app_config, revocation_registry=registry, instance_relative_config=False)
    with application.app_context():
        _db.create_all()
        SQLAlchemySession.set(_db.session)
        try:
            yield application
        finally:
            SQLAlchemySession.set(None)
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def session(db):
    """The scoped session the units of work share."""
    return db.session


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_service(app):
    return get_auth_service()


@pytest.fixture()
def hasher():
    """Low-cost PBKDF2, same method as :class:`TestingConfig`."""
    return WerkzeugPasswordHasher(TestingConfig.PASSWORD_HASH_METHOD)


@pytest.fixture()
def codec():
    return PyJWTTokenCodec(TestingConfig.JWT_SECRET)


@pytest.fixture(scope="session")
def faker():
    """Deterministic :class:`faker.Faker`."""
    from faker import Faker

    Faker.seed(1337)
    return Faker()

"""Extension singletons shared by every application instance.

``db``, ``migrate`` and ``limiter`` are created at import time and bound in
:func:`init_app`. Redis connections are per application and live in
``app.extensions["redis"]``.
"""

from __future__ import annotations

from typing import NamedTuple

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_KEY = "redis"

# Constraint names must be stable for Alembic batch migrations on SQLite.
metadata = MetaData(
    naming_convention={
        "pk": "pk_%(table_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(metadata=metadata, session_options={"autoflush": False})
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)


class RedisClients(NamedTuple):
    """Connections to the revocation store.

    ``store`` carries the side-channel deadline used for revocation reads
    and writes; ``probe`` carries the shorter health-check deadline.
    """

    store: redis.Redis
    probe: redis.Redis


def _connect(url: str, timeout: float) -> redis.Redis:
    return redis.Redis.from_url(url, socket_timeout=timeout, socket_connect_timeout=timeout)


def init_app(app: Flask) -> None:
    """Bind the database, migrations and rate limiter, then open Redis.

    Redis is skipped when ``REDIS_URL`` is unset; the caller must then hand
    a revocation registry to the factory.

    :raises RuntimeError: If ``REDIS_URL`` is set but the server does not answer.
    """
    db.init_app(app)

    # Model import registers the tables on ``metadata`` for Alembic.
    from algoshield import models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    url = app.config.get("REDIS_URL")
    if not url:
        app.extensions.pop(REDIS_KEY, None)
        return

    clients = RedisClients(
        store=_connect(url, app.config.get("SIDE_CHANNEL_TIMEOUT_SECONDS", 5)),
        probe=_connect(url, app.config.get("HEALTH_TIMEOUT_SECONDS", 2)),
    )
    try:
        clients.store.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    app.extensions[REDIS_KEY] = clients


def get_redis(app: Flask | None = None) -> RedisClients | None:
    """Return the Redis connections of ``app`` (default: current app)."""
    target = app if app is not None else current_app
    return target.extensions.get(REDIS_KEY)

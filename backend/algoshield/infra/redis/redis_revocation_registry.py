# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from redis.exceptions import TimeoutError as RedisTimeoutError  # type: ignore[import-untyped]

from algoshield.services._shared.errors import DeadlineExceededError, StoreUnavailableError
from algoshield.services._shared.ports import RevocationRegistry, token_digest

KEY_PREFIX = "blacklist"
MARKER = "1"
STORE_NAME = "revocation registry"


@dataclass(slots=True)
class RedisRevocationRegistry(RevocationRegistry):
    """
    Redis-backed revocation registry.

    Keyspace
    --------
    - ``blacklist/<sha256-hex>``: one revoked token (raw token is never sent).
    - ``blacklist/principal/<id>``: every token of a principal is revoked.

    Values are a constant marker; presence is the signal and the Redis TTL is
    authoritative for expiry. Client-side socket timeouts act as the
    per-operation deadline.

    :param r: Redis client used for registry reads and writes.
    :param probe_client: Optional client with a shorter timeout for health probes.
    """

    r: redis.Redis
    probe_client: redis.Redis | None = None

    # -------------------- helpers --------------------

    @staticmethod
    def _k_single(digest: str) -> str:
        return f"{KEY_PREFIX}/{digest}"

    @staticmethod
    def _k_principal(principal_id: str) -> str:
        return f"{KEY_PREFIX}/principal/{principal_id}"

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        """Map redis-py failures onto the service error taxonomy."""
        try:
            yield
        except RedisTimeoutError as exc:
            raise DeadlineExceededError(operation) from exc
        except RedisError as exc:
            raise StoreUnavailableError(STORE_NAME, operation) from exc

    # -------------------- API ------------------------

    def record_single(self, token: str, *, expires_at: datetime) -> None:
        """
        Revoke one token until its own expiry instant.

        Nothing is written when the token is already past its expiry.
        """
        ttl_ms = int((expires_at - self._now()).total_seconds() * 1000)
        if ttl_ms <= 0:
            return
        with self._translate_errors("record_single"):
            self.r.set(self._k_single(token_digest(token)), MARKER, px=ttl_ms)

    def contains_single(self, token: str) -> bool:
        with self._translate_errors("contains_single"):
            return cast(int, self.r.exists(self._k_single(token_digest(token)))) == 1

    def record_all(self, principal_id: str, *, horizon: timedelta) -> None:
        """
        Revoke every token of a principal for ``horizon``.

        A later call overwrites the entry and so extends the window.
        """
        seconds = int(horizon.total_seconds())
        if seconds <= 0:
            return
        with self._translate_errors("record_all"):
            self.r.set(self._k_principal(principal_id), MARKER, ex=seconds)

    def contains_all(self, principal_id: str) -> bool:
        with self._translate_errors("contains_all"):
            return cast(int, self.r.exists(self._k_principal(principal_id))) == 1

    def probe(self) -> None:
        client = self.probe_client or self.r
        with self._translate_errors("probe"):
            client.ping()

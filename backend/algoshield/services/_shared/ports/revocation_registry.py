from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Protocol


def token_digest(token: str) -> str:
    """
    Return the SHA-256 hex digest (64 chars) used to key single-token entries.

    :param token: Encoded bearer token.
    :returns: Lower-case hex digest.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RevocationRegistry(Protocol):
    """
    Abstraction for the expiring revocation store.

    Two disjoint entry shapes are kept:

    * single-token entries keyed by :func:`token_digest`, expiring with the token;
    * principal-wide entries keyed by principal id, expiring after a horizon.

    Writes are idempotent; re-recording an entry only refreshes its TTL.
    """

    def record_single(self, token: str, *, expires_at: datetime) -> None: ...
    def contains_single(self, token: str) -> bool: ...
    def record_all(self, principal_id: str, *, horizon: timedelta) -> None: ...
    def contains_all(self, principal_id: str) -> bool: ...
    def probe(self) -> None: ...


class InMemoryRevocationRegistry(RevocationRegistry):
    """In-memory registry honouring expiry instants, for unit tests."""

    def __init__(self) -> None:
        self.singles: dict[str, datetime] = {}
        self.principals: dict[str, datetime] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def record_single(self, token: str, *, expires_at: datetime) -> None:
        if expires_at <= self._now():
            return
        self.singles[token_digest(token)] = expires_at

    def contains_single(self, token: str) -> bool:
        expires_at = self.singles.get(token_digest(token))
        return expires_at is not None and expires_at > self._now()

    def record_all(self, principal_id: str, *, horizon: timedelta) -> None:
        if horizon <= timedelta(0):
            return
        self.principals[principal_id] = self._now() + horizon

    def contains_all(self, principal_id: str) -> bool:
        expires_at = self.principals.get(principal_id)
        return expires_at is not None and expires_at > self._now()

    def probe(self) -> None:
        return None

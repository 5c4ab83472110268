"""Tests for the Redis-backed revocation registry using fakeredis."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from redis.exceptions import TimeoutError as RedisTimeoutError

from algoshield.infra.redis.redis_revocation_registry import RedisRevocationRegistry
from algoshield.services._shared.errors import DeadlineExceededError, StoreUnavailableError
from algoshield.services._shared.ports import token_digest

TOKEN = "header.payload.signature"


@pytest.fixture()
def server():
    return fakeredis.FakeServer()


@pytest.fixture()
def r(server):
    return fakeredis.FakeRedis(server=server)


@pytest.fixture()
def store(r) -> RedisRevocationRegistry:
    return RedisRevocationRegistry(r)


class SlowRedis:
    """Client whose every command exceeds its socket timeout."""

    def _timeout(self, *args, **kwargs):
        raise RedisTimeoutError("Timeout reading from socket")

    set = exists = ping = _timeout


def test_record_single_keys_by_digest_with_token_ttl(store, r):
    store.record_single(TOKEN, expires_at=datetime.now(UTC) + timedelta(minutes=10))

    key = f"blacklist/{token_digest(TOKEN)}"
    assert r.get(key) == b"1"
    assert 590_000 < r.pttl(key) <= 600_000
    assert not any(TOKEN.encode() in k for k in r.keys("*"))


def test_contains_single(store):
    assert store.contains_single(TOKEN) is False
    store.record_single(TOKEN, expires_at=datetime.now(UTC) + timedelta(minutes=1))
    assert store.contains_single(TOKEN) is True
    assert store.contains_single(TOKEN + "x") is False


def test_record_single_skips_already_expired_tokens(store, r):
    store.record_single(TOKEN, expires_at=datetime.now(UTC) - timedelta(seconds=1))
    assert r.keys("*") == []


def test_record_single_is_idempotent(store, r):
    expires_at = datetime.now(UTC) + timedelta(minutes=5)
    store.record_single(TOKEN, expires_at=expires_at)
    store.record_single(TOKEN, expires_at=expires_at)
    assert len(r.keys("blacklist/*")) == 1


def test_record_all_uses_horizon_and_extends(store, r):
    store.record_all("42", horizon=timedelta(hours=1))
    assert r.ttl("blacklist/principal/42") == 3600

    store.record_all("42", horizon=timedelta(hours=24))
    assert r.ttl("blacklist/principal/42") == 86400


def test_contains_all(store):
    assert store.contains_all("42") is False
    store.record_all("42", horizon=timedelta(hours=1))
    assert store.contains_all("42") is True
    assert store.contains_all("43") is False


def test_single_and_principal_keys_are_disjoint(store):
    store.record_all("abc", horizon=timedelta(hours=1))
    assert store.contains_single("abc") is False


def test_unreachable_store_maps_to_store_unavailable(store, server):
    server.connected = False

    with pytest.raises(StoreUnavailableError) as excinfo:
        store.contains_single(TOKEN)
    assert excinfo.value.operation == "contains_single"

    with pytest.raises(StoreUnavailableError):
        store.record_all("42", horizon=timedelta(hours=1))


def test_timeouts_map_to_deadline_exceeded():
    store = RedisRevocationRegistry(SlowRedis())

    with pytest.raises(DeadlineExceededError) as excinfo:
        store.contains_all("42")
    assert excinfo.value.operation == "contains_all"

    with pytest.raises(DeadlineExceededError):
        store.record_single(TOKEN, expires_at=datetime.now(UTC) + timedelta(minutes=1))


def test_probe_prefers_probe_client(r):
    store = RedisRevocationRegistry(SlowRedis(), probe_client=r)
    store.probe()

    with pytest.raises(DeadlineExceededError):
        RedisRevocationRegistry(SlowRedis()).probe()

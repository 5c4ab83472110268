# tests/unit/services/test_auth_service.py
from __future__ import annotations

import base64
import json
import logging
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from freezegun import freeze_time

from algoshield.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from algoshield.services._shared.errors import (
    ConflictError,
    InfrastructureError,
    InvalidCredentialsError,
    NotFoundError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    UserInactiveError,
)
from algoshield.services._shared.ports import (
    InMemoryPrincipalStore,
    InMemoryRevocationRegistry,
    token_digest,
)
from algoshield.services.auth.dto import AuthTokenConfig, LoginIn, RegisterIn
from algoshield.services.auth.service import AuthService
from algoshield.services.identity.dto import Principal


# ------------------------------ Doubles ----------------------------------- #
class CountingHasher:
    """Delegate to a real hasher while counting verifier checks."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.verifications = 0

    def hash(self, password: str) -> str:
        return self.inner.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        self.verifications += 1
        return self.inner.verify(password_hash, password)


class BrokenLastLoginStore(InMemoryPrincipalStore):
    def update_last_login(self, principal_id, at):
        raise InfrastructureError()


class BrokenLookupStore(InMemoryPrincipalStore):
    def get_by_id(self, principal_id):
        raise InfrastructureError()


class UnreachableRegistry(InMemoryRevocationRegistry):
    """Registry whose every call fails like a dropped connection."""

    def contains_single(self, token):
        raise StoreUnavailableError("revocation registry", "contains_single")

    def contains_all(self, principal_id):
        raise StoreUnavailableError("revocation registry", "contains_all")

    def record_single(self, token, *, expires_at):
        raise StoreUnavailableError("revocation registry", "record_single")


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def principals() -> InMemoryPrincipalStore:
    return InMemoryPrincipalStore()


@pytest.fixture()
def revocations() -> InMemoryRevocationRegistry:
    return InMemoryRevocationRegistry()


@pytest.fixture()
def counting_hasher(hasher) -> CountingHasher:
    return CountingHasher(hasher)


@pytest.fixture()
def service(principals, revocations, codec, counting_hasher) -> AuthService:
    """AuthService wired to in-memory doubles and the real codec/hasher."""
    return AuthService(
        principals=principals,
        revocations=revocations,
        tokens=codec,
        hasher=counting_hasher,
    )


@pytest.fixture()
def alice(service):
    return service.register(RegisterIn(email="alice@example.com", name="Alice", password="correct horse"))


# ------------------------------ Register ---------------------------------- #
def test_register_returns_principal_and_valid_token(service, alice):
    assert alice.principal.email == "alice@example.com"
    assert alice.principal.active is True
    assert service.validate(alice.token) == alice.principal


def test_register_stores_verifier_not_plaintext(service, principals, alice):
    record = principals.get_by_email_with_verifier("alice@example.com")
    assert record is not None
    assert record.password_hash != "correct horse"
    assert service.hasher.verify(record.password_hash, "correct horse")


def test_register_duplicate_email_is_conflict(service, alice):
    with pytest.raises(ConflictError) as excinfo:
        service.register(RegisterIn(email="ALICE@example.com", name="Other", password="whatever1"))
    assert excinfo.value.message == "User with this email already exists"


def test_issued_claims_are_exactly_identity_and_times(service, codec):
    with freeze_time("2026-01-01 12:00:00"):
        result = service.register(RegisterIn(email="bob@example.com", name="Bob", password="hunter22"))
        claims = codec.decode(result.token)

    assert set(claims) == {"user_id", "email", "name", "iat", "exp"}
    assert claims["user_id"] == str(result.principal.id)
    assert claims["email"] == "bob@example.com"
    assert claims["name"] == "Bob"
    assert claims["iat"] == int(datetime(2026, 1, 1, 12, tzinfo=UTC).timestamp())
    assert claims["exp"] - claims["iat"] == 24 * 3600


# ------------------------------ Authenticate ------------------------------ #
def test_authenticate_success_records_last_login(service, principals, alice):
    with freeze_time("2026-02-03 04:05:06"):
        result = service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))
        assert service.validate(result.token).id == alice.principal.id

    expected = datetime(2026, 2, 3, 4, 5, 6, tzinfo=UTC)
    assert result.principal.last_login_at == expected
    assert principals.get_by_id(alice.principal.id).last_login_at == expected


def test_authenticate_wrong_password_and_unknown_email_look_identical(service, alice):
    with pytest.raises(InvalidCredentialsError) as wrong:
        service.authenticate(LoginIn(email="alice@example.com", password="nope"))
    with pytest.raises(InvalidCredentialsError) as unknown:
        service.authenticate(LoginIn(email="ghost@example.com", password="nope"))

    assert wrong.value.message == unknown.value.message == "Invalid email or password"
    assert wrong.value.code == unknown.value.code


def test_authenticate_unknown_email_still_checks_a_verifier(service, counting_hasher):
    with pytest.raises(InvalidCredentialsError):
        service.authenticate(LoginIn(email="ghost@example.com", password="nope"))
    assert counting_hasher.verifications == 1


def test_authenticate_principal_without_password(service, principals, counting_hasher):
    principals.add(Principal(id=uuid4(), email="sso@example.com", name="SSO"), password_hash=None)

    with pytest.raises(InvalidCredentialsError):
        service.authenticate(LoginIn(email="sso@example.com", password="anything"))
    assert counting_hasher.verifications == 1


def test_authenticate_inactive_principal(service, principals, alice):
    principals.set_active(alice.principal.id, False)

    with pytest.raises(UserInactiveError):
        service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))


def test_authenticate_inactive_can_be_hidden(principals, revocations, codec, hasher):
    service = AuthService(
        principals=principals, revocations=revocations, tokens=codec, hasher=hasher, hide_inactive=True
    )
    created = service.register(RegisterIn(email="carol@example.com", name="Carol", password="pa55word"))
    principals.set_active(created.principal.id, False)

    with pytest.raises(InvalidCredentialsError):
        service.authenticate(LoginIn(email="carol@example.com", password="pa55word"))


def test_authenticate_survives_last_login_failure(revocations, codec, hasher, caplog):
    store = BrokenLastLoginStore()
    service = AuthService(principals=store, revocations=revocations, tokens=codec, hasher=hasher)
    service.register(RegisterIn(email="dave@example.com", name="Dave", password="pa55word"))

    with caplog.at_level(logging.WARNING, logger="algoshield.services.auth.service"):
        result = service.authenticate(LoginIn(email="dave@example.com", password="pa55word"))

    assert result.token
    assert result.principal.last_login_at is None
    assert "auth.last_login.update_failed" in caplog.messages


# ------------------------------ Validate ---------------------------------- #
def test_validate_expired_token(service, alice):
    with freeze_time("2026-03-01 00:00:00") as frozen:
        result = service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))
        frozen.tick(timedelta(hours=25))
        with pytest.raises(TokenExpiredError):
            service.validate(result.token)


def test_validate_rejects_foreign_signature(service, alice):
    forged = PyJWTTokenCodec("another-secret-with-enough-length!!").encode(
        {"user_id": str(alice.principal.id), "iat": 1, "exp": 4102444800}
    )
    with pytest.raises(TokenInvalidError):
        service.validate(forged)


def test_validate_rejects_alg_none(service, alice):
    header = _b64({"alg": "none", "typ": "JWT"})
    payload = _b64({"user_id": str(alice.principal.id), "iat": 1, "exp": 4102444800})
    with pytest.raises(TokenInvalidError):
        service.validate(f"{header}.{payload}.")


@pytest.mark.parametrize("user_id", [None, "", "not-a-uuid", 42])
def test_validate_rejects_bad_identity_claim(service, codec, user_id):
    claims = {"iat": 1, "exp": 4102444800}
    if user_id is not None:
        claims["user_id"] = user_id
    with pytest.raises(TokenInvalidError):
        service.validate(codec.encode(claims))


def test_validate_unknown_principal(service, codec):
    token = codec.encode({"user_id": str(uuid4()), "iat": 1, "exp": 4102444800})
    with pytest.raises(NotFoundError):
        service.validate(token)


def test_validate_inactive_principal(service, principals, alice):
    principals.set_active(alice.principal.id, False)
    with pytest.raises(UserInactiveError):
        service.validate(alice.token)


def test_validate_returns_fresh_principal(service, principals, alice):
    principals.assign_role(alice.principal.id, "admin")
    assert "admin" in service.validate(alice.token).role_names


def test_revocation_is_checked_before_principal_state(service, principals, alice):
    service.logout(alice.token)
    principals.set_active(alice.principal.id, False)
    with pytest.raises(TokenRevokedError):
        service.validate(alice.token)


def test_validate_lookup_failure_is_not_found(revocations, codec, hasher):
    store = BrokenLookupStore()
    service = AuthService(principals=store, revocations=revocations, tokens=codec, hasher=hasher)
    result = service.register(RegisterIn(email="erin@example.com", name="Erin", password="pa55word"))

    with pytest.raises(NotFoundError) as excinfo:
        service.validate(result.token)
    assert isinstance(excinfo.value.__cause__, InfrastructureError)


def test_registry_read_failure_fails_open_by_default(principals, codec, hasher, caplog):
    service = AuthService(
        principals=principals, revocations=UnreachableRegistry(), tokens=codec, hasher=hasher
    )
    result = service.register(RegisterIn(email="finn@example.com", name="Finn", password="pa55word"))

    with caplog.at_level(logging.WARNING, logger="algoshield.services.auth.service"):
        assert service.validate(result.token).id == result.principal.id
    assert caplog.messages.count("auth.revocation.check_failed") == 2


def test_registry_read_failure_fails_closed_when_configured(principals, codec, hasher):
    service = AuthService(
        principals=principals,
        revocations=UnreachableRegistry(),
        tokens=codec,
        hasher=hasher,
        fail_closed=True,
    )
    result = service.register(RegisterIn(email="gail@example.com", name="Gail", password="pa55word"))

    with pytest.raises(StoreUnavailableError):
        service.validate(result.token)


# ------------------------------ Logout / revoke --------------------------- #
def test_logout_revokes_only_that_token(service, revocations, alice):
    with freeze_time("2026-04-01 00:00:00") as frozen:
        second = service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))
        frozen.tick(timedelta(seconds=1))
        service.logout(second.token)

        with pytest.raises(TokenRevokedError):
            service.validate(second.token)
        assert token_digest(second.token) in revocations.singles

    assert service.validate(alice.token).id == alice.principal.id


def test_logout_entry_expires_with_token(service, revocations, codec, alice):
    service.logout(alice.token)
    exp = codec.decode(alice.token)["exp"]
    assert revocations.singles[token_digest(alice.token)] == datetime.fromtimestamp(exp, tz=UTC)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_logout_ignores_unparsable_tokens(service, revocations, token):
    service.logout(token)
    assert revocations.singles == {}


def test_logout_ignores_tokens_without_expiry(service, revocations, codec):
    service.logout(codec.encode({"user_id": str(uuid4()), "iat": 1}))
    assert revocations.singles == {}


def test_logout_write_failure_propagates(principals, codec, hasher):
    service = AuthService(
        principals=principals, revocations=UnreachableRegistry(), tokens=codec, hasher=hasher
    )
    result = service.register(RegisterIn(email="hank@example.com", name="Hank", password="pa55word"))

    with pytest.raises(StoreUnavailableError):
        service.logout(result.token)


def test_invalidate_all_revokes_every_token_of_principal(service, alice):
    other = service.register(RegisterIn(email="ivy@example.com", name="Ivy", password="pa55word"))
    second = service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))

    service.invalidate_all_for(alice.principal.id)

    for token in (alice.token, second.token):
        with pytest.raises(TokenRevokedError):
            service.validate(token)
    assert service.validate(other.token).id == other.principal.id


def test_principal_revocation_lasts_the_horizon(service, alice):
    with freeze_time("2026-05-01 00:00:00") as frozen:
        result = service.authenticate(LoginIn(email="alice@example.com", password="correct horse"))
        service.invalidate_all_for(alice.principal.id)
        frozen.tick(timedelta(hours=23))
        with pytest.raises(TokenRevokedError):
            service.validate(result.token)


def test_revoke_sessions_unknown_principal(service):
    with pytest.raises(NotFoundError):
        service.revoke_sessions(uuid4())


def test_revoke_sessions_records_principal_entry(service, revocations, alice):
    service.revoke_sessions(alice.principal.id)
    assert str(alice.principal.id) in revocations.principals


# ------------------------------ Config ------------------------------------ #
def test_horizon_is_never_shorter_than_lifetime(principals, revocations, codec, hasher):
    cfg = AuthTokenConfig(lifetime=timedelta(hours=24), revocation_horizon=timedelta(hours=1))
    service = AuthService(
        principals=principals, revocations=revocations, tokens=codec, hasher=hasher, token_cfg=cfg
    )
    assert service.revocation_horizon == timedelta(hours=24)


def test_token_config_from_hours():
    assert AuthTokenConfig.from_hours(24).revocation_horizon == timedelta(hours=24)
    assert AuthTokenConfig.from_hours(24, 48).revocation_horizon == timedelta(hours=48)
    assert AuthTokenConfig.from_hours(24, 2).revocation_horizon == timedelta(hours=24)

# algoshield/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from algoshield.services._shared.base import BaseService
from algoshield.services._shared.errors import (
    ConflictError,
    InfrastructureError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
    TokenRevokedError,
    UserInactiveError,
)
from algoshield.services._shared.ports import (
    PasswordHasher,
    PrincipalStore,
    RevocationRegistry,
    TokenCodec,
)
from algoshield.services.auth.dto import AuthResultOut, AuthTokenConfig, LoginIn, RegisterIn
from algoshield.services.identity.dto import Principal, PrincipalCreateIn
from algoshield.services.identity.service import EMAIL_TAKEN

log = logging.getLogger(__name__)

# Fixed plaintext for the verifier checked when the email is unknown.
_DUMMY_PASSWORD = "algoshield-timing-equalizer"


class AuthService(BaseService):
    """
    Credential authority (register / login / validate / logout / revoke).

    Bearer tokens are stateless HMAC JWTs issued through a :class:`TokenCodec`.
    Revocation is recorded in a :class:`RevocationRegistry` under two
    independent shapes (single token, whole principal); a token is rejected
    when either matches.

    Failure policy
    --------------
    - Registry *reads* during validation: log and treat as "not revoked",
      unless ``fail_closed`` is set.
    - Registry *writes* (logout, revoke-all): errors propagate.
    - Principal store errors during validation: ``NotFoundError``.
    - Last-login update errors during login: logged, login proceeds.
    """

    def __init__(
        self,
        *,
        principals: PrincipalStore,
        revocations: RevocationRegistry,
        tokens: TokenCodec,
        hasher: PasswordHasher,
        token_cfg: AuthTokenConfig | None = None,
        fail_closed: bool = False,
        hide_inactive: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param principals: Principal store (lookup/create/last-login).
        :param revocations: Expiring revocation registry.
        :param tokens: Codec for signing/parsing bearer tokens.
        :param hasher: Password verifier derivation.
        :param token_cfg: Token lifetime and revocation horizon (24h default).
        :param fail_closed: Propagate registry read failures instead of ignoring them.
        :param hide_inactive: Report inactive principals as invalid credentials at login.
        :param clock: UTC clock used for issue and revocation timestamps.
        """
        super().__init__(clock=clock)
        self.principals = principals
        self.revocations = revocations
        self.tokens = tokens
        self.hasher = hasher
        cfg = token_cfg or AuthTokenConfig.from_hours(24)
        self.cfg = replace(cfg, revocation_horizon=max(cfg.revocation_horizon, cfg.lifetime))
        self.fail_closed = fail_closed
        self.hide_inactive = hide_inactive
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a principal and issue its first token.

        :param dto: Registration input.
        :returns: Created principal and token.
        :raises ConflictError: If the email is already registered.
        :raises PasswordHashingError: If the verifier cannot be derived.
        """
        if self.principals.get_by_email(dto.email) is not None:
            raise ConflictError("User", EMAIL_TAKEN)

        password_hash = self.hasher.hash(dto.password)
        principal = self.principals.create(
            PrincipalCreateIn(email=dto.email, name=dto.name, password_hash=password_hash)
        )
        log.info(
            "auth.register",
            extra={"event": "auth.register", "user_id": str(principal.id)},
        )
        return AuthResultOut(principal=principal, token=self.issue(principal))

    def authenticate(self, dto: LoginIn) -> AuthResultOut:
        """
        Verify credentials and issue a token.

        Unknown email, principal without password and wrong password all raise
        the same :class:`InvalidCredentialsError`, after one verifier check each.

        :param dto: Login input.
        :returns: Principal and token.
        :raises InvalidCredentialsError: On any credential mismatch.
        :raises UserInactiveError: If the principal is inactive.
        """
        record = self.principals.get_by_email_with_verifier(dto.email)
        if record is None:
            self.hasher.verify(self._dummy_verifier(), dto.password)
            log.info("auth.login.failed", extra={"event": "auth.login.failed", "reason": "unknown"})
            raise InvalidCredentialsError()

        principal = record.principal
        if not self.hasher.verify(record.password_hash, dto.password):
            log.info(
                "auth.login.failed",
                extra={"event": "auth.login.failed", "reason": "mismatch", "user_id": str(principal.id)},
            )
            raise InvalidCredentialsError()

        if not principal.active:
            log.info(
                "auth.login.inactive",
                extra={"event": "auth.login.inactive", "user_id": str(principal.id)},
            )
            if self.hide_inactive:
                raise InvalidCredentialsError()
            raise UserInactiveError()

        now = self.now_utc()
        try:
            self.principals.update_last_login(principal.id, now)
            principal = replace(principal, last_login_at=now)
        except InfrastructureError:
            log.warning(
                "auth.last_login.update_failed",
                extra={"event": "auth.last_login.update_failed", "user_id": str(principal.id)},
                exc_info=True,
            )

        return AuthResultOut(principal=principal, token=self.issue(principal))

    # ------------------------------------------------------------------ #
    # Issue / Validate
    # ------------------------------------------------------------------ #

    def issue(self, principal: Principal) -> str:
        """Sign a token carrying identity, email, name, ``iat`` and ``exp``."""
        now = self.now_utc()
        claims: dict[str, Any] = {
            "user_id": str(principal.id),
            "email": principal.email,
            "name": principal.name,
            "iat": int(now.timestamp()),
            "exp": int((now + self.cfg.lifetime).timestamp()),
        }
        return self.tokens.encode(claims)

    def validate(self, token: str) -> Principal:
        """
        Resolve a bearer token to an active principal.

        The steps run in a fixed order and stop at the first failure:
        signature/expiry, identity claim, single-token revocation,
        principal-wide revocation, principal lookup, active flag.

        :param token: Encoded bearer token.
        :returns: Freshly loaded principal.
        :raises TokenExpiredError: If the token is past ``exp``.
        :raises TokenInvalidError: On signature, algorithm or claim problems.
        :raises TokenRevokedError: If a revocation entry matches.
        :raises NotFoundError: If the principal is missing or cannot be loaded.
        :raises UserInactiveError: If the principal is inactive.
        """
        claims = self.tokens.decode(token)
        principal_id = self._principal_id(claims)

        if self._revocation_hit("single", lambda: self.revocations.contains_single(token)):
            raise TokenRevokedError()
        if self._revocation_hit("principal", lambda: self.revocations.contains_all(str(principal_id))):
            raise TokenRevokedError()

        try:
            principal = self.principals.get_by_id(principal_id)
        except InfrastructureError as exc:
            log.error(
                "auth.principal.lookup_failed",
                extra={"event": "auth.principal.lookup_failed", "user_id": str(principal_id)},
                exc_info=True,
            )
            raise NotFoundError("User", str(principal_id)) from exc
        if principal is None:
            raise NotFoundError("User", str(principal_id))
        if not principal.active:
            raise UserInactiveError()
        return principal

    # ------------------------------------------------------------------ #
    # Logout / Revoke
    # ------------------------------------------------------------------ #

    def logout(self, token: str) -> None:
        """
        Revoke one token until its own expiry.

        Tokens that cannot be parsed, or carry no usable ``exp``, are ignored
        so logout stays idempotent. Registry write failures propagate.
        """
        try:
            claims = self.tokens.decode_unverified(token)
        except TokenInvalidError:
            return
        expires_at = self._expiry(claims)
        if expires_at is None:
            return
        self.revocations.record_single(token, expires_at=expires_at)

    def invalidate_all_for(self, principal_id: UUID | str) -> None:
        """Revoke every token of a principal for the revocation horizon."""
        self.revocations.record_all(str(principal_id), horizon=self.cfg.revocation_horizon)
        log.info(
            "auth.sessions.revoked",
            extra={"event": "auth.sessions.revoked", "user_id": str(principal_id)},
        )

    def revoke_sessions(self, principal_id: UUID) -> None:
        """
        Revoke every token of an existing principal.

        :raises NotFoundError: If no such principal exists.
        """
        if self.principals.get_by_id(principal_id) is None:
            raise NotFoundError("User", str(principal_id))
        self.invalidate_all_for(principal_id)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @property
    def revocation_horizon(self) -> timedelta:
        return self.cfg.revocation_horizon

    def _dummy_verifier(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash

    def _revocation_hit(self, check: str, query: Callable[[], bool]) -> bool:
        try:
            return query()
        except InfrastructureError:
            if self.fail_closed:
                raise
            log.warning(
                "auth.revocation.check_failed",
                extra={"event": "auth.revocation.check_failed", "check": check},
                exc_info=True,
            )
            return False

    @staticmethod
    def _principal_id(claims: dict[str, Any]) -> UUID:
        raw = claims.get("user_id")
        if not isinstance(raw, str) or not raw:
            raise TokenInvalidError()
        try:
            return UUID(raw)
        except ValueError as exc:
            raise TokenInvalidError() from exc

    @staticmethod
    def _expiry(claims: dict[str, Any]) -> datetime | None:
        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            return None
        try:
            return datetime.fromtimestamp(exp, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None

"""Wiring of the authentication core onto the Flask application.

Builds the credential authority once per app from configuration and stores
it in ``app.extensions`` so request handlers and CLI commands share the same
instances. The signing secret is read here and never changes afterwards.
"""

from __future__ import annotations

from typing import cast

from flask import Flask, current_app, g

from algoshield.core import extensions
from algoshield.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from algoshield.infra.redis.redis_revocation_registry import RedisRevocationRegistry
from algoshield.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from algoshield.services._shared.ports import RevocationRegistry
from algoshield.services.auth.dto import AuthTokenConfig
from algoshield.services.auth.service import AuthService
from algoshield.services.identity.service import IdentityService

AUTH_SERVICE_KEY = "auth_service"
REGISTRY_KEY = "revocation_registry"


def init_app(app: Flask, *, registry: RevocationRegistry | None = None) -> None:
    """Build the auth components for ``app``.

    :param app: Configured application (extensions already initialised).
    :param registry: Optional revocation registry; defaults to the Redis one.
    :raises RuntimeError: If no registry is given and Redis is not configured.
    """
    if registry is None:
        clients = extensions.get_redis(app)
        if clients is None:
            raise RuntimeError("REDIS_URL is not configured and no revocation registry was given.")
        registry = RedisRevocationRegistry(clients.store, probe_client=clients.probe)

    token_cfg = AuthTokenConfig.from_hours(
        int(app.config["JWT_EXPIRATION_HOURS"]),
        app.config.get("JWT_REVOCATION_HORIZON_HOURS"),
    )
    service = AuthService(
        principals=IdentityService(),
        revocations=registry,
        tokens=PyJWTTokenCodec(app.config["JWT_SECRET"], app.config.get("JWT_ALGORITHM", "HS256")),
        hasher=WerkzeugPasswordHasher(app.config.get("PASSWORD_HASH_METHOD", "scrypt")),
        token_cfg=token_cfg,
        fail_closed=bool(app.config.get("REVOCATION_FAIL_CLOSED", False)),
        hide_inactive=bool(app.config.get("AUTH_HIDE_INACTIVE_ON_LOGIN", False)),
    )
    app.extensions[AUTH_SERVICE_KEY] = service
    app.extensions[REGISTRY_KEY] = registry

    @app.before_request
    def _reset_principal() -> None:
        # ``g`` outlives a request when the caller holds the app context.
        g.pop("principal", None)
        g.pop("principal_id", None)
        g.pop("token", None)


def get_auth_service() -> AuthService:
    """Return the credential authority bound to the current app."""
    return cast(AuthService, current_app.extensions[AUTH_SERVICE_KEY])


def get_revocation_registry() -> RevocationRegistry:
    """Return the revocation registry bound to the current app."""
    return cast(RevocationRegistry, current_app.extensions[REGISTRY_KEY])

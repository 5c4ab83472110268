"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from algoshield.api.deps import current_principal, json_response, require_auth, timing
from algoshield.core.extensions import limiter
from algoshield.core.security import get_auth_service
from algoshield.schemas import (
    AuthResponseSchema,
    LoginSchema,
    PrincipalSchema,
    RegisterSchema,
)
from algoshield.services.auth.dto import LoginIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
auth_response_schema = AuthResponseSchema()
principal_schema = PrincipalSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/register")
@timing
def register():
    """Register a new principal and return it with its first token."""

    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().register(
        RegisterIn(email=data["email"], name=data["name"], password=data["password"])
    )
    body = auth_response_schema.dump({"token": result.token, "user": result.principal})
    return json_response(body)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a bearer token."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().authenticate(LoginIn(email=data["email"], password=data["password"]))
    body = auth_response_schema.dump({"token": result.token, "user": result.principal})
    return json_response(body)


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated principal as freshly loaded by validation."""

    return json_response(principal_schema.dump(current_principal()))


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke only the presented token; other sessions stay valid."""

    get_auth_service().logout(g.token)
    return json_response({"message": "Logged out successfully"})

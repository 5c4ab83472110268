"""Principal administration endpoints."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint

from algoshield.api.deps import require_auth, require_role, timing
from algoshield.core.security import get_auth_service

bp = Blueprint("users", __name__, url_prefix="/users")

ADMIN_ROLE = "admin"


@bp.post("/<uuid:user_id>/sessions/revoke")
@require_auth
@require_role(ADMIN_ROLE)
@timing
def revoke_sessions(user_id: UUID):
    """Revoke every outstanding token of ``user_id`` (password change, compromise)."""

    get_auth_service().revoke_sessions(user_id)
    return "", 204

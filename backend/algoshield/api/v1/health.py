"""Health and readiness endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from algoshield.api.deps import json_response, timing
from algoshield.core.extensions import db
from algoshield.core.security import get_revocation_registry
from algoshield.services._shared.errors import InfrastructureError

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Probe the database and the revocation store; 503 when either fails."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error", extra={"event": "health.db_error"})
        db_status = "unavailable"
        db.session.rollback()

    store_status = "ok"
    try:
        get_revocation_registry().probe()
    except InfrastructureError:
        current_app.logger.exception(
            "healthcheck.revocation_store_error", extra={"event": "health.revocation_store_error"}
        )
        store_status = "unavailable"

    healthy = db_status == "ok" and store_status == "ok"
    payload = {
        "status": "ok" if healthy else "degraded",
        "database": db_status,
        "revocation_store": store_status,
    }
    return json_response(payload, status=200 if healthy else 503)


@bp.get("/ready")
def readiness():
    """Report that the process accepts traffic."""

    return json_response({"status": "ready"})

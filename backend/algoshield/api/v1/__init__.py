"""Version 1 of the HTTP API: health, auth and user administration."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp
from .users import bp as users_bp

API_VERSION = "v1"

# Mounted in order, each under its own ``url_prefix`` (health sits at the version root).
RESOURCES: tuple[Blueprint, ...] = (health_bp, auth_bp, users_bp)


def build_blueprint(api_base: str) -> Blueprint:
    """Return a new ``api_v1`` blueprint nesting every v1 resource.

    A fresh parent is built per application because Flask records nested
    registrations on the parent object itself.
    """
    parent = Blueprint(
        f"api_{API_VERSION}",
        __name__,
        url_prefix=f"{api_base.rstrip('/')}/{API_VERSION}",
    )
    for resource in RESOURCES:
        parent.register_blueprint(resource)
    return parent

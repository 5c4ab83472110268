"""HTTP surface of the auth service.

Routes live under ``API_BASE_PREFIX`` (``/api`` by default) followed by the
version segment, e.g. ``/api/v1/auth/login``.
"""

from __future__ import annotations

from flask import Flask


def init_app(app: Flask) -> None:
    """Mount every supported API version on ``app``."""
    from algoshield.api import v1

    app.register_blueprint(v1.build_blueprint(app.config.get("API_BASE_PREFIX", "/api")))


__all__ = ["init_app"]

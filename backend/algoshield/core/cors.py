"""Cross-origin policy and baseline security headers for ``/api``."""

from __future__ import annotations

from flask import Flask, Response
from flask_cors import CORS

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

ALLOWED_REQUEST_HEADERS = ("Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID")


def parse_origins(raw: str | None) -> list[str] | None:
    """Split a comma-separated ``CORS_ORIGINS`` value.

    :returns: Explicit origins, or ``None`` when any origin is allowed
        (blank value or ``*``).
    """
    origins = [item.strip() for item in (raw or "").split(",") if item.strip()]
    if not origins or origins == ["*"]:
        return None
    return origins


def init_app(app: Flask) -> None:
    """Apply the CORS policy and security headers to ``app``.

    Credentials are only allowed towards an explicit origin list.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        allow_headers=list(ALLOWED_REQUEST_HEADERS),
        expose_headers=["X-Request-ID"],
        supports_credentials=origins is not None,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )

    @app.after_request
    def _security_headers(response: Response) -> Response:
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

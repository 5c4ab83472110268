"""JSON logging for the auth service.

Every record leaving the process is a single JSON object on stdout. Records
emitted while a request is active carry that request's correlation id, which
is taken from ``X-Request-ID`` (or ``X-Correlation-ID``) when the caller sends
one and minted otherwise. The id is echoed back on the response so callers
can match log lines to their own traces.

Only a fixed set of ``extra=`` keys is copied into the payload. Anything else
attached to a record (tokens, passwords, raw bodies) never reaches the output.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

ACCESS_LOGGER = "algoshield.access"

EXTRA_KEYS = frozenset(
    {
        "event",
        "endpoint",
        "elapsed_ms",
        "user_id",
        "reason",
        "check",
        "role",
        "status",
        "method",
        "path",
    }
)


class JSONFormatter(logging.Formatter):
    """Serialize a record and its whitelisted extras as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` onto records; ``None`` outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = current_request_id() if has_request_context() else None
        return True


def current_request_id() -> str:
    """Return the correlation id bound to the active request.

    Outside a request a fresh id is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        inbound = next(
            (request.headers[name] for name in INBOUND_ID_HEADERS if request.headers.get(name)),
            None,
        )
        g.request_id = inbound or str(uuid4())
    return g.request_id


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Bind correlation ids and a debug-level access line to each request."""
    app.logger.addFilter(RequestIdFilter())
    access = logging.getLogger(ACCESS_LOGGER)

    @app.before_request
    def _start_request() -> None:
        g.pop("request_id", None)
        g.request_started = time.perf_counter()
        current_request_id()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, current_request_id())
        started = g.get("request_started")
        if started is not None and access.isEnabledFor(logging.DEBUG):
            access.debug(
                "http.request",
                extra={
                    "event": "http.request",
                    "request_id": current_request_id(),
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = [
    "JSONFormatter",
    "RequestIdFilter",
    "configure_logging",
    "current_request_id",
    "init_app",
]

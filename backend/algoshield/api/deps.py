"""Shared API helpers: access guard decorators and response utilities."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from algoshield.core.errors import Forbidden, Unauthorized
from algoshield.core.security import get_auth_service
from algoshield.services.identity.dto import Principal

F = TypeVar("F", bound=Callable[..., Any])

BEARER_SCHEME = "Bearer"


def bearer_token() -> str:
    """Extract the bearer token from the ``Authorization`` header.

    The header must split on a single space into exactly two parts, the first
    being the literal ``Bearer``.

    :returns: The raw token.
    :raises Unauthorized: If the header is missing or malformed.
    """
    header = request.headers.get("Authorization")
    if not header:
        raise Unauthorized("Authorization header required")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
        raise Unauthorized("Invalid authorization header format")
    return parts[1]


def authorize() -> Principal:
    """Validate the request's bearer token and attach the principal to ``g``.

    Service errors (expired, revoked, inactive, ...) propagate to the JSON
    error handlers unchanged.
    """
    token = bearer_token()
    principal = get_auth_service().validate(token)
    g.principal = principal
    g.principal_id = principal.id
    g.token = token
    return principal


def current_principal() -> Principal:
    """Return the principal attached by :func:`authorize`.

    :raises Unauthorized: If no principal is attached to this request.
    """
    principal = g.get("principal")
    if principal is None:
        raise Unauthorized("User not found in context")
    return cast(Principal, principal)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, unrevoked bearer token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        authorize()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(name: str) -> Callable[[F], F]:
    """Ensure the authenticated principal has the role ``name`` (case-sensitive).

    Must be applied below :func:`require_auth`.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            principal = current_principal()
            if name not in principal.role_names:
                raise Forbidden()
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_any_role(*names: str) -> Callable[[F], F]:
    """Ensure the authenticated principal holds at least one of ``names``."""

    wanted = frozenset(names)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            principal = current_principal()
            if not wanted & principal.role_names:
                raise Forbidden()
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]

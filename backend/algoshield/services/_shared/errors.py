"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. Each one carries the language-agnostic wire code (``ErrorCode``)
and a safe English message; ``algoshield/core/errors.py`` is the single place
that turns them into the JSON envelope and an HTTP status.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from sqlalchemy.exc import IntegrityError


class ErrorCode(StrEnum):
    """Wire enum shared by every error envelope."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    TOKEN_INVALID = "TOKEN_INVALID"
    UNAUTHORIZED = "UNAUTHORIZED"
    USER_INACTIVE = "USER_INACTIVE"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name in the message; SQLite reports the
    offending ``table.column`` instead, so callers may pass either form.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint (``uq_users_email``) or column (``users.email``).
    :returns: ``True`` if the IntegrityError matches.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``code`` and ``message`` are safe to show to clients; anything else
      (the ``__cause__`` chain) stays in the logs.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


# --------------------------------------------------------------------------- #
# Lookup / state errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key (logged, never sent to clients).
    :type key: str
    """

    entity: str
    key: str

    code = ErrorCode.NOT_FOUND

    def __post_init__(self) -> None:
        ServiceError.__init__(self, f"{self.entity} not found")


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    code = ErrorCode.CONFLICT

    def __post_init__(self) -> None:
        ServiceError.__init__(self, f"{self.entity} {self.detail}")


# --------------------------------------------------------------------------- #
# Authentication / authorization
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Unknown email and wrong password share this error, message included."""

    code = ErrorCode.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class UserInactiveError(ServiceError):
    code = ErrorCode.USER_INACTIVE
    default_message = "User account is inactive"


class TokenExpiredError(ServiceError):
    code = ErrorCode.TOKEN_EXPIRED
    default_message = "Token has expired"


class TokenRevokedError(ServiceError):
    code = ErrorCode.TOKEN_REVOKED
    default_message = "Token has been revoked"


class TokenInvalidError(ServiceError):
    code = ErrorCode.TOKEN_INVALID
    default_message = "Invalid or malformed token"


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class InfrastructureError(ServiceError):
    """
    A collaborator (database, key/value store, hashing backend) failed.

    Always raised ``from`` the original exception so the cause is logged
    while the client only sees ``INTERNAL_ERROR``.
    """


class DeadlineExceededError(InfrastructureError):
    """
    A per-operation deadline expired before the collaborator answered.

    This is the cancellation category: callers can tell it apart from
    validation outcomes and from plain connectivity failures.
    """

    def __init__(self, operation: str) -> None:
        super().__init__()
        self.operation = operation


class StoreUnavailableError(InfrastructureError):
    """A store could not be reached or rejected the command."""

    def __init__(self, store: str, operation: str | None = None) -> None:
        super().__init__()
        self.store = store
        self.operation = operation


class PasswordHashingError(InfrastructureError):
    """Deriving a password verifier failed; nothing was persisted."""

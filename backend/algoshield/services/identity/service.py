"""
IdentityService
===============

SQLAlchemy-backed Principal Store:
- Lookup by email (with or without the password verifier) and by id
- Principal creation with the default role
- Last-login bookkeeping

Every method converts ORM rows into frozen DTOs before its unit of work
closes, and every database failure leaves as an ``InfrastructureError``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from algoshield.models.user import User
from algoshield.services._shared.base import BaseService
from algoshield.services._shared.errors import ConflictError, InfrastructureError, violates
from algoshield.services._shared.ports import PrincipalStore
from algoshield.services.identity.dto import (
    Principal,
    PrincipalCreateIn,
    PrincipalWithVerifier,
    Role,
)

log = logging.getLogger(__name__)

DEFAULT_ROLE = "viewer"
EMAIL_TAKEN = "with this email already exists"


def to_principal(user: User) -> Principal:
    """
    Build the public principal DTO from an ORM user.

    :param user: User with roles and groups loaded.
    :type user: User
    :returns: Frozen principal with the effective role set.
    :rtype: Principal
    """
    return Principal(
        id=user.id,
        email=user.email,
        name=user.name,
        active=bool(user.active),
        roles=frozenset(Role(id=r.id, name=r.name) for r in user.effective_roles()),
        last_login_at=user.last_login_at,
        created_at=user.created_at,
    )


class IdentityService(BaseService, PrincipalStore):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Resolve principals for the credential authority.
    - Create principals ensuring email uniqueness.
    - Record successful logins.
    """

    def __init__(self, *, default_role: str = DEFAULT_ROLE, **kwargs) -> None:
        super().__init__(**kwargs)
        self.default_role = default_role

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_by_email(self, email: str) -> Principal | None:
        try:
            with self.ro_uow() as uow:
                user = uow.users.get_by_email(email)
                return to_principal(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise InfrastructureError() from exc

    def get_by_email_with_verifier(self, email: str) -> PrincipalWithVerifier | None:
        """
        Fetch a principal together with its password verifier.

        :param email: Login email (case-insensitive).
        :type email: str
        :returns: Principal and verifier, or ``None`` when the user is unknown
            or has no password.
        :rtype: PrincipalWithVerifier | None
        :raises InfrastructureError: On database failure.
        """
        try:
            with self.ro_uow() as uow:
                user = uow.users.get_by_email(email)
                if user is None or not user.password_hash:
                    return None
                return PrincipalWithVerifier(
                    principal=to_principal(user),
                    password_hash=user.password_hash,
                )
        except SQLAlchemyError as exc:
            raise InfrastructureError() from exc

    def get_by_id(self, principal_id: UUID) -> Principal | None:
        """
        Retrieve a principal by identifier.

        :param principal_id: Principal identifier.
        :type principal_id: UUID
        :returns: Principal or ``None``.
        :rtype: Principal | None
        :raises InfrastructureError: On database failure.
        """
        try:
            with self.ro_uow() as uow:
                user = uow.users.get_with_roles(principal_id)
                return to_principal(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise InfrastructureError() from exc

    # --------------------------------------------------------------------- #
    # Creation
    # --------------------------------------------------------------------- #

    def create(self, dto: PrincipalCreateIn) -> Principal:
        """
        Create a principal and attach the default role when it exists.

        :param dto: Creation input with an already-derived verifier.
        :type dto: PrincipalCreateIn
        :returns: The created principal.
        :rtype: Principal
        :raises ConflictError: If the email is already taken.
        :raises InfrastructureError: On any other database failure.
        """
        try:
            with self.rw_uow() as uow:
                user = User(email=dto.email, name=dto.name, password_hash=dto.password_hash)

                role = uow.roles.get_by_name(self.default_role)
                if role is not None:
                    user.roles.append(role)
                else:
                    log.warning(
                        "identity.default_role_missing",
                        extra={"event": "identity.default_role_missing", "role": self.default_role},
                    )

                try:
                    uow.users.add(user)
                except IntegrityError as exc:
                    if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                        raise ConflictError("User", EMAIL_TAKEN) from exc
                    raise

                return to_principal(user)
        except SQLAlchemyError as exc:
            raise InfrastructureError() from exc

    # --------------------------------------------------------------------- #
    # Login bookkeeping
    # --------------------------------------------------------------------- #

    def update_last_login(self, principal_id: UUID, at: datetime) -> None:
        try:
            with self.rw_uow() as uow:
                uow.users.update_last_login(principal_id, at)
        except SQLAlchemyError as exc:
            raise InfrastructureError() from exc

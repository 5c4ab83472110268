"""
DTOs for the Principal Store.

Principals leave the persistence layer as frozen dataclasses so the rest of
the service never holds an ORM instance outside its unit of work. The
password verifier only travels inside :class:`PrincipalWithVerifier`, which
is returned by a dedicated lookup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Role:
    """
    A named role assignment.

    :param id: Role identifier.
    :type id: UUID
    :param name: Short textual name compared case-sensitively (e.g. ``admin``).
    :type name: str
    """

    id: UUID
    name: str


@dataclass(frozen=True, slots=True)
class Principal:
    """
    The identified subject on whose behalf requests are made.

    :param id: Stable, non-sequential identity.
    :type id: UUID
    :param email: Login email (stored lower-cased).
    :type email: str
    :param name: Display name.
    :type name: str
    :param active: Inactive principals fail credential validation.
    :type active: bool
    :param roles: Role set (direct and group-inherited, de-duplicated).
    :type roles: frozenset[Role]
    :param last_login_at: Last successful authentication instant.
    :type last_login_at: datetime | None
    :param created_at: Creation instant.
    :type created_at: datetime | None
    """

    id: UUID
    email: str
    name: str
    active: bool = True
    roles: frozenset[Role] = field(default_factory=frozenset)
    last_login_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def role_names(self) -> frozenset[str]:
        return frozenset(role.name for role in self.roles)

@dataclass(frozen=True, slots=True)
class PrincipalWithVerifier:
    """
    A principal together with its stored password verifier.

    :param principal: The public principal record.
    :type principal: Principal
    :param password_hash: Encoded verifier produced by the password hasher.
    :type password_hash: str
    """

    principal: Principal
    password_hash: str


# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PrincipalCreateIn:
    """
    Input DTO for principal creation.

    :param email: Login email (normalized by the model).
    :type email: str
    :param name: Display name.
    :type name: str
    :param password_hash: Already-derived password verifier.
    :type password_hash: str
    """

    email: str
    name: str
    password_hash: str

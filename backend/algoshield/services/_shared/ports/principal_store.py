from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from algoshield.services._shared.errors import ConflictError
from algoshield.services.identity.dto import (
    Principal,
    PrincipalCreateIn,
    PrincipalWithVerifier,
    Role,
)


class PrincipalStore(Protocol):
    """
    Port for principal lookup and lifecycle.

    Two lookups by email exist on purpose: only
    :meth:`get_by_email_with_verifier` ever returns the password verifier.
    """

    def get_by_email(self, email: str) -> Principal | None: ...
    def get_by_email_with_verifier(self, email: str) -> PrincipalWithVerifier | None: ...
    def get_by_id(self, principal_id: UUID) -> Principal | None: ...
    def create(self, dto: PrincipalCreateIn) -> Principal: ...
    def update_last_login(self, principal_id: UUID, at: datetime) -> None: ...


class InMemoryPrincipalStore(PrincipalStore):
    """Dictionary-backed principal store used in unit tests."""

    def __init__(self) -> None:
        self._principals: dict[UUID, Principal] = {}
        self._hashes: dict[UUID, str | None] = {}
        self._roles: dict[str, Role] = {}

    # ------------------------------ Port API ------------------------------

    def get_by_email(self, email: str) -> Principal | None:
        key = email.strip().lower()
        for principal in self._principals.values():
            if principal.email == key:
                return principal
        return None

    def get_by_email_with_verifier(self, email: str) -> PrincipalWithVerifier | None:
        principal = self.get_by_email(email)
        if principal is None:
            return None
        password_hash = self._hashes.get(principal.id)
        if not password_hash:
            return None
        return PrincipalWithVerifier(principal=principal, password_hash=password_hash)

    def get_by_id(self, principal_id: UUID) -> Principal | None:
        return self._principals.get(principal_id)

    def create(self, dto: PrincipalCreateIn) -> Principal:
        if self.get_by_email(dto.email) is not None:
            raise ConflictError("User", "with this email already exists")
        principal = Principal(
            id=uuid4(),
            email=dto.email.strip().lower(),
            name=dto.name,
            active=True,
            created_at=datetime.now(UTC),
        )
        self._principals[principal.id] = principal
        self._hashes[principal.id] = dto.password_hash
        return principal

    def update_last_login(self, principal_id: UUID, at: datetime) -> None:
        principal = self._principals.get(principal_id)
        if principal is not None:
            self._principals[principal_id] = replace(principal, last_login_at=at)

    # ---------------------------- Test helpers ----------------------------

    def add(self, principal: Principal, *, password_hash: str | None = None) -> Principal:
        self._principals[principal.id] = principal
        self._hashes[principal.id] = password_hash
        return principal

    def set_active(self, principal_id: UUID, active: bool) -> None:
        self._principals[principal_id] = replace(self._principals[principal_id], active=active)

    def assign_role(self, principal_id: UUID, name: str) -> None:
        role = self._roles.setdefault(name, Role(id=uuid4(), name=name))
        principal = self._principals[principal_id]
        self._principals[principal_id] = replace(principal, roles=principal.roles | {role})

"""Value objects exchanged with :class:`~algoshield.services.auth.service.AuthService`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from algoshield.services.identity.dto import Principal


@dataclass(frozen=True, slots=True)
class LoginIn:
    """Credentials presented at login. ``password`` is the raw secret."""

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RegisterIn(LoginIn):
    """Sign-up request; the password is hashed before it reaches the store."""

    name: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """Principal plus the bearer token just issued for it."""

    principal: Principal
    token: str


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """Lifetimes used when issuing and revoking tokens.

    Attributes
    ----------
    lifetime:
        Validity of each bearer token.
    revocation_horizon:
        How long a principal-wide revocation marker is kept. Never shorter
        than ``lifetime``, otherwise tokens issued just before a revoke-all
        would outlive their marker.
    """

    lifetime: timedelta
    revocation_horizon: timedelta

    @classmethod
    def from_hours(cls, lifetime_hours: int, horizon_hours: int | None = None) -> AuthTokenConfig:
        lifetime = timedelta(hours=lifetime_hours)
        horizon = lifetime if horizon_hours is None else timedelta(hours=horizon_hours)
        return cls(lifetime=lifetime, revocation_horizon=max(lifetime, horizon))

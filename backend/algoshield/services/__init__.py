"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`algoshield.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``algoshield.services._shared.base``)
    * :class:`BaseService`

- Principal store (from ``algoshield.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`Principal`, :class:`PrincipalWithVerifier`, :class:`Role`,
      :class:`PrincipalCreateIn`

- Credential authority (from ``algoshield.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`AuthResultOut`,
      :class:`AuthTokenConfig`
"""

from __future__ import annotations

from ._shared.base import BaseService

# Credential authority + DTOs
from .auth.dto import AuthResultOut, AuthTokenConfig, LoginIn, RegisterIn
from .auth.service import AuthService

# Principal store + DTOs
from .identity.dto import Principal, PrincipalCreateIn, PrincipalWithVerifier, Role
from .identity.service import IdentityService

__all__ = [
    # Base
    "BaseService",
    # Identity
    "IdentityService",
    "Principal",
    "PrincipalCreateIn",
    "PrincipalWithVerifier",
    "Role",
    # Auth
    "AuthService",
    "AuthResultOut",
    "AuthTokenConfig",
    "LoginIn",
    "RegisterIn",
]

"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthResponseSchema, LoginSchema, RegisterSchema
from .user import PrincipalSchema, RoleSchema

__all__ = [
    "AuthResponseSchema",
    "LoginSchema",
    "RegisterSchema",
    "PrincipalSchema",
    "RoleSchema",
]

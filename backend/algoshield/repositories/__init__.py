"""Repository package exposing persistence-layer access for identity models."""

from __future__ import annotations

from algoshield.repositories.base import BaseRepository
from algoshield.repositories.role import RoleRepository
from algoshield.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RoleRepository",
    "UserRepository",
]

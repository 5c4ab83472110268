from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for deriving and checking password verifiers."""

    def hash(self, password: str) -> str: ...
    def verify(self, password_hash: str, password: str) -> bool: ...

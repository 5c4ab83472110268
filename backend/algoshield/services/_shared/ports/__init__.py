"""
algoshield.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
the authentication core depends on.

Modules
-------
- :mod:`principal_store`:
    Defines :class:`~.PrincipalStore`: lookup/create/last-login of principals.

- :mod:`revocation_registry`:
    Defines :class:`~.RevocationRegistry`: expiring single-token and
    principal-wide revocation entries, plus :func:`~.token_digest`.

- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`: signing and parsing of bearer tokens.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: password verifier derivation.

Design Notes
------------
Concrete adapters (Redis, PyJWT, werkzeug, SQLAlchemy) live under
``algoshield.infra`` and ``algoshield.services.identity``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .principal_store import InMemoryPrincipalStore, PrincipalStore
from .revocation_registry import (
    InMemoryRevocationRegistry,
    RevocationRegistry,
    token_digest,
)
from .token_codec import TokenCodec

__all__ = [
    "PasswordHasher",
    "PrincipalStore",
    "InMemoryPrincipalStore",
    "RevocationRegistry",
    "InMemoryRevocationRegistry",
    "TokenCodec",
    "token_digest",
]

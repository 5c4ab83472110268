from __future__ import annotations

from typing import Any, Protocol


class TokenCodec(Protocol):
    """
    Port for encoding and decoding signed bearer tokens.

    ``decode`` verifies the signature and the registered time claims and
    raises :class:`~algoshield.services._shared.errors.TokenExpiredError` or
    :class:`~algoshield.services._shared.errors.TokenInvalidError`.
    ``decode_unverified`` only parses the claims and raises
    ``TokenInvalidError`` when the carrier is not even structurally a token.
    """

    def encode(self, claims: dict[str, Any]) -> str: ...
    def decode(self, token: str) -> dict[str, Any]: ...
    def decode_unverified(self, token: str) -> dict[str, Any]: ...

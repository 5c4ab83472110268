# algoshield/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

import jwt

from algoshield.services._shared.errors import TokenExpiredError, TokenInvalidError
from algoshield.services._shared.ports import TokenCodec

SUPPORTED_ALGORITHMS = frozenset({"HS256"})
REQUIRED_CLAIMS = ["exp", "iat"]


@dataclass(slots=True)
class PyJWTTokenCodec(TokenCodec):
    """
    HMAC JWT codec built on PyJWT.

    The header ``alg`` is checked *before* PyJWT verifies the signature, so a
    token advertising ``none`` or an asymmetric algorithm is rejected by type
    and the shared secret is never used as a public key.

    :param secret: Process-wide signing secret (read-only after startup).
    :param algorithm: Pinned MAC algorithm; only ``HS256`` is accepted.
    """

    secret: str
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm: {self.algorithm}")

    def encode(self, claims: dict[str, Any]) -> str:
        return jwt.encode(
            claims,
            self.secret,
            algorithm=self.algorithm,
            headers={"typ": "JWT"},
        )

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify and parse a token.

        :param token: Encoded JWT.
        :returns: Claims dictionary.
        :raises TokenExpiredError: If ``exp`` is in the past.
        :raises TokenInvalidError: On any other structural, algorithm or signature failure.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc
        if header.get("alg") != self.algorithm:
            raise TokenInvalidError()

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc
        return cast(dict[str, Any], payload)

    def decode_unverified(self, token: str) -> dict[str, Any]:
        """Parse claims without verifying signature or expiry."""
        try:
            payload = jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc
        return cast(dict[str, Any], payload)

from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from algoshield.services._shared.errors import PasswordHashingError
from algoshield.services._shared.ports import PasswordHasher

DEFAULT_METHOD = "scrypt"


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Password hasher backed by :mod:`werkzeug.security`.

    :param method: werkzeug method string carrying the work factor, e.g.
        ``scrypt``, ``scrypt:32768:8:1`` or ``pbkdf2:sha256:600000``.
    """

    method: str = DEFAULT_METHOD

    def hash(self, password: str) -> str:
        try:
            return generate_password_hash(password, method=self.method)
        except (ValueError, TypeError) as exc:
            raise PasswordHashingError() from exc

    def verify(self, password_hash: str, password: str) -> bool:
        # ``check_password_hash`` compares digests with ``hmac.compare_digest``.
        try:
            return bool(check_password_hash(password_hash, password))
        except (ValueError, TypeError):
            return False

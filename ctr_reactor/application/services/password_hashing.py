"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from ctr_reactor.domain.users.exceptions import InvalidInputError
from ctr_reactor.domain.users.repositories import PasswordHasher
from ctr_reactor.shared.logging import logger

# scrypt N=2**15, r=8, p=1 (~32 MiB per derivation)
SCRYPT_METHOD = "scrypt:32768:8:1"
# 22 chars from werkzeug's 62-symbol alphabet, >128 bits
SALT_LENGTH = 22


class ScryptPasswordHasher(PasswordHasher):
    """Stores ``scrypt:N:r:p$salt$hex`` so cost and salt travel with the row."""

    def __init__(self, method: str = SCRYPT_METHOD, salt_length: int = SALT_LENGTH) -> None:
        self._method = method
        self._salt_length = salt_length

    def hash(self, password: str) -> str:
        if not password:
            raise InvalidInputError(message="password required", context={"field": "password"})
        return str(
            generate_password_hash(password, method=self._method, salt_length=self._salt_length)
        )

    def verify(self, password: str, hashed: str) -> bool:
        if not password:
            return False
        if not hashed or hashed.count("$") < 2:
            logger.warning("password_hash: stored hash is malformed")
            return False
        try:
            return bool(check_password_hash(hashed, password))
        except ValueError:
            logger.warning("password_hash: stored hash uses an unsupported method")
            return False

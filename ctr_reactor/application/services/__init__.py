from .password_hashing import ScryptPasswordHasher
from .tokens import SessionTokenService, token_fingerprint

__all__ = ["ScryptPasswordHasher", "SessionTokenService", "token_fingerprint"]

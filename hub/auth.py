"""Admin secret verification against a bcrypt hash."""

import logging
import os

import bcrypt

# bcrypt hash of the secret "password".
DEFAULT_ADMIN_PASSWORD_HASH = "$2b$10$92IXUNpkjO0rOQ5byMi.Ye4oKoEa3Ro9llC/.og/at2.uheWG/igi"

logger = logging.getLogger(__name__)


class CredentialVerifier:
    def __init__(self, password_hash: str = DEFAULT_ADMIN_PASSWORD_HASH):
        self.password_hash = password_hash

    @classmethod
    def from_secret(cls, secret: str, rounds: int = 10) -> "CredentialVerifier":
        hashed = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds))
        return cls(hashed.decode("utf-8"))

    @classmethod
    def from_env(cls) -> "CredentialVerifier":
        """Use ADMIN_PASSWORD when set, else the default secret."""
        secret = os.getenv("ADMIN_PASSWORD")
        if secret:
            logger.info("Admin password configured from environment variable")
            return cls.from_secret(secret)
        logger.warning('Using default admin password: "password"')
        return cls()

    def verify(self, secret: str) -> bool:
        return bcrypt.checkpw(secret.encode("utf-8"), self.password_hash.encode("utf-8"))

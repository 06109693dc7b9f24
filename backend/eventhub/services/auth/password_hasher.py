"""Password hashing with bcrypt."""

import logging
from functools import cached_property

import bcrypt

from eventhub.services.auth.exceptions import PasswordTooLongError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted one-way password hashing."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Raises:
            PasswordTooLongError: If the encoded password exceeds 72 bytes.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise PasswordTooLongError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a password against a hash.

        The salt and cost are read from the hash itself, so hashes made with
        other settings still verify.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """Hash of a throwaway value at this hasher's cost.

        Verified against when a login names an unknown email so that both
        failure paths do the same bcrypt work.
        """
        return bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

"""Salted one-way hashing for passwords and one-time codes."""

from functools import cached_property

import bcrypt

from warden.errors import HashingError

# bcrypt only looks at the first 72 bytes of a secret.
BCRYPT_MAX_BYTES = 72


class CredentialHasher:
    """bcrypt hashing, used alike for passwords, recovery codes and resetting codes."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _encode(secret: str) -> bytes:
        return secret.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, secret: str) -> str:
        """Return a salted bcrypt hash of ``secret``."""
        try:
            return bcrypt.hashpw(self._encode(secret), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")
        except (ValueError, TypeError, AttributeError) as e:
            raise HashingError(str(e)) from e

    def verify(self, secret: str, hashed: str | None) -> bool:
        """Check ``secret`` against ``hashed``. False on mismatch or a missing/malformed hash."""
        if not secret or not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(secret), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """A hash to verify against when there is no real one, so lookups of unknown users cost the same."""
        return self.hash("warden-dummy-secret")

"""JWT Token Service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError

from warden.errors import InvalidCredentials, InvalidToken, SigningError
from warden.services.hasher import CredentialHasher
from warden.store.base import Identity, IdentityStore

ALGORITHM = "RS256"
ACCESS_TOKEN_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _one_year_after(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:  # Feb 29
        return moment.replace(year=moment.year + 1, day=28)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Issues and validates RS256 tokens.

    Tokens are stateless: a token is valid when its signature checks out
    against the public key and it has not expired. Access tokens last an hour
    and carry ``userId``; refresh tokens last a year and only carry ``sub``.
    Every successful validation re-resolves the subject in the store.
    """

    def __init__(
        self,
        store: IdentityStore,
        hasher: CredentialHasher,
        private_key_path: str,
        public_key_path: str,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self.private_key_path = private_key_path
        self.public_key_path = public_key_path
        self._logger = logger or logging.getLogger("warden")
        self._clock = clock

    def issue(self, username: str, password: str) -> TokenPair:
        """Exchange username and password for an access and a refresh token."""
        user = self._store.get_by_username(username)
        if user is None:
            self._hasher.verify(password, self._hasher.dummy_hash)
            self._logger.warning("Token requested for unknown username")
            raise InvalidCredentials()
        if not self._hasher.verify(password, user.password_hash):
            self._logger.warning("Wrong password for user %d", user.id)
            raise InvalidCredentials()

        pair = TokenPair(access_token=self.create_access_token(user), refresh_token=self.create_refresh_token(user))
        self._logger.info("Issued tokens for user %d", user.id)
        return pair

    def refresh(self, refresh_token: str) -> str:
        """Return a new access token. Refresh tokens are not rotated."""
        user = self.validate(refresh_token)
        return self.create_access_token(user)

    def validate(self, token: str) -> Identity:
        """Verify ``token`` and return the current record of its subject."""
        payload = self.decode_token(token)
        subject = payload.get("sub")
        user = self._store.get_by_username(subject) if isinstance(subject, str) else None
        if user is None:
            self._logger.warning("Token subject no longer resolves")
            raise InvalidToken()
        return user

    def create_access_token(self, user: Identity) -> str:
        payload = {
            "sub": user.username,
            "userId": user.id,
            "exp": self._clock() + ACCESS_TOKEN_TTL,
        }
        return self._sign(payload)

    def create_refresh_token(self, user: Identity) -> str:
        payload = {
            "sub": user.username,
            "exp": _one_year_after(self._clock()),
        }
        return self._sign(payload)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Check signature and expiry. Raises InvalidToken."""
        try:
            public_key = Path(self.public_key_path).read_text()
        except OSError as e:
            self._logger.warning("Cannot load public key: %s", e)
            raise InvalidToken() from e
        try:
            return jwt.decode(token, public_key, algorithms=[ALGORITHM])
        except JOSEError as e:
            self._logger.warning("Rejected token: %s", e)
            raise InvalidToken() from e

    def _sign(self, payload: dict[str, Any]) -> str:
        try:
            private_key = Path(self.private_key_path).read_text()
            return jwt.encode(payload, private_key, algorithm=ALGORITHM)
        except (OSError, JOSEError) as e:
            self._logger.error("Cannot sign token: %s", e)
            raise SigningError(str(e)) from e

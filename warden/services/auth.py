"""User registration and management."""

import logging
import secrets
from dataclasses import dataclass

from warden.errors import Conflict, InvalidPayload, InvalidToken, NotFound, Unauthorized
from warden.services.allocator import IdentityAllocator
from warden.services.hasher import CredentialHasher
from warden.services.jwt import TokenService
from warden.store.base import Identity, IdentityStore, normalize


def _codes_match(expected: str, presented: str) -> bool:
    return secrets.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


@dataclass
class Registration:
    """Payload of a sign-up request."""

    username: str
    password: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    invite_code: str | None = None


@dataclass
class UserUpdate:
    """Profile changes. ``username`` and ``password`` are rejected if present."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None


@dataclass
class UserInfo:
    """Public view of an identity."""

    id: int
    username: str | None
    first_name: str | None
    last_name: str | None
    email: str | None

    @classmethod
    def from_identity(cls, user: Identity) -> "UserInfo":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )


class AuthService:
    """Handles user registration, lookup, update and deletion."""

    def __init__(
        self,
        store: IdentityStore,
        allocator: IdentityAllocator,
        hasher: CredentialHasher,
        tokens: TokenService,
        admin_id: int,
        private_signup: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._allocator = allocator
        self._hasher = hasher
        self._tokens = tokens
        self.admin_id = admin_id
        self.private_signup = private_signup
        self._logger = logger or logging.getLogger("warden")

    def create_user(self, registration: Registration) -> int:
        """Register a new user and return its id.

        With private signup on, the email must carry a pending invite whose
        code matches; the invite placeholder is then completed in place and
        keeps its id.
        """
        self._logger.debug("Creating user")
        if not normalize(registration.username) or not registration.password:
            raise InvalidPayload("Username and password are required")

        if self._store.get_by_username(registration.username) is not None:
            self._logger.warning("Username %s already exists", registration.username)
            raise Conflict()

        placeholder = None
        if self.private_signup:
            placeholder = self._store.get_by_email(registration.email) if registration.email else None
            if (
                placeholder is None
                or not placeholder.is_pending_invite
                or not registration.invite_code
                or not _codes_match(placeholder.invite_code, registration.invite_code)
            ):
                raise Unauthorized()

        identity = Identity(
            username=registration.username,
            first_name=registration.first_name,
            last_name=registration.last_name,
            email=registration.email,
            password_hash=self._hasher.hash(registration.password),
        )

        if placeholder is not None:
            if not self._store.consume_invite(placeholder.id, registration.invite_code, identity):
                raise Unauthorized()
            self._logger.info("Invited user %d completed registration", placeholder.id)
            return placeholder.id

        user_id = self._allocator.save(identity)
        self._logger.info("Created user %d", user_id)
        return user_id

    def update_user(self, user_id: int, changes: UserUpdate, token: str) -> None:
        """Update the caller's own profile."""
        self._logger.debug("Updating user with id %d", user_id)
        caller = self._tokens.validate(token)
        if caller.id != user_id:
            raise InvalidToken()

        if user_id <= 0 or changes.username or changes.password:
            raise InvalidPayload()

        if self._store.get(user_id) is None:
            raise NotFound()

        self._store.update(
            Identity(id=user_id, first_name=changes.first_name, last_name=changes.last_name, email=changes.email)
        )

    def delete_user(self, user_id: int, token: str) -> None:
        """Delete a user. Allowed for the user itself and the admin."""
        caller = self._tokens.validate(token)
        if caller.id != user_id and caller.id != self.admin_id:
            raise InvalidToken()

        self._store.delete_by_id(user_id)
        self._logger.info("User %d deleted by user %d", user_id, caller.id)

    def get_user_by_token(self, token: str) -> UserInfo:
        return UserInfo.from_identity(self._tokens.validate(token))

    def get_user_by_id(self, user_id: int) -> UserInfo | None:
        user = self._store.get(user_id)
        if user is None or user.username is None:
            return None
        return UserInfo.from_identity(user)

    def get_user_by_username(self, username: str) -> UserInfo | None:
        user = self._store.get_by_username(username)
        return UserInfo.from_identity(user) if user else None

    def get_users(self, token: str) -> list[UserInfo]:
        """All registered users; pending invites are left out."""
        self._tokens.validate(token)
        return [UserInfo.from_identity(u) for u in self._store.get_all() if u.username is not None]

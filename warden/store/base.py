"""Identity record and the store capability the services depend on."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class Identity:
    """A registered identity, or a pending invite placeholder when ``username`` is None."""

    id: int | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password_hash: str | None = None
    invite_code: str | None = None
    recovery_code_hash: str | None = None
    resetting_code_hash: str | None = None

    @property
    def is_pending_invite(self) -> bool:
        return self.username is None and self.invite_code is not None


def normalize(value: str | None) -> str | None:
    """Usernames and emails are compared case-insensitively."""
    if value is None:
        return None
    return value.strip().lower()


class IdentityStore(ABC):
    """Persistence capability for identity records.

    Lookups return None for unknown identities. Implementations raise
    ``StoreError`` on persistence failures and ``DuplicateIdError`` from
    ``insert`` when the id is already taken; ``insert`` must enforce id
    uniqueness atomically.
    """

    @abstractmethod
    def max_id(self) -> int:
        """Largest allocated id, or 0 when the store is empty."""

    @abstractmethod
    def insert(self, identity: Identity) -> None:
        """Insert a record whose ``id`` is already set."""

    @abstractmethod
    def get(self, identity_id: int) -> Identity | None: ...

    @abstractmethod
    def get_by_username(self, username: str) -> Identity | None: ...

    @abstractmethod
    def get_by_email(self, email: str) -> Identity | None: ...

    @abstractmethod
    def get_all(self) -> list[Identity]: ...

    @abstractmethod
    def update(self, identity: Identity) -> None:
        """Overwrite first/last name, email and password hash where set on ``identity``."""

    @abstractmethod
    def delete_by_id(self, identity_id: int) -> None: ...

    @abstractmethod
    def set_recovery_code(self, identity_id: int, code_hash: str) -> None:
        """Store the recovery code hash and clear the resetting code hash."""

    @abstractmethod
    def get_recovery_code(self, identity_id: int) -> str | None: ...

    @abstractmethod
    def set_resetting_code(self, identity_id: int, code_hash: str) -> None:
        """Store the resetting code hash and clear the recovery code hash."""

    @abstractmethod
    def get_resetting_code(self, identity_id: int) -> str | None: ...

    @abstractmethod
    def reset_password(self, identity_id: int, password_hash: str) -> None:
        """Store the new password hash and clear the resetting code hash."""

    @abstractmethod
    def set_invite_code(self, identity_id: int, invite_code: str) -> None: ...

    @abstractmethod
    def consume_invite(self, identity_id: int, invite_code: str, registration: Identity) -> bool:
        """Fill in a placeholder and clear its invite code.

        Only succeeds while ``invite_code`` still matches the stored one, so a
        code can be consumed once. Returns False when it no longer matches.
        """

"""In-memory identity store, for tests and single-process development runs."""

import threading
from dataclasses import replace

from warden.errors import Conflict, DuplicateIdError
from warden.store.base import Identity, IdentityStore, normalize


class MemoryIdentityStore(IdentityStore):
    """Dict-backed store. Records are copied in and out, never shared."""

    def __init__(self) -> None:
        self._users: dict[int, Identity] = {}
        self._lock = threading.Lock()

    def max_id(self) -> int:
        with self._lock:
            return max(self._users, default=0)

    def insert(self, identity: Identity) -> None:
        record = replace(identity, username=normalize(identity.username), email=normalize(identity.email))
        with self._lock:
            if record.id in self._users:
                raise DuplicateIdError(record.id)
            if record.username is not None and self._find_username(record.username) is not None:
                raise Conflict()
            self._users[record.id] = record

    def get(self, identity_id: int) -> Identity | None:
        with self._lock:
            record = self._users.get(identity_id)
            return replace(record) if record else None

    def get_by_username(self, username: str) -> Identity | None:
        with self._lock:
            record = self._find_username(normalize(username))
            return replace(record) if record else None

    def get_by_email(self, email: str) -> Identity | None:
        email = normalize(email)
        with self._lock:
            for record in self._users.values():
                if record.email == email:
                    return replace(record)
        return None

    def get_all(self) -> list[Identity]:
        with self._lock:
            return [replace(self._users[key]) for key in sorted(self._users)]

    def update(self, identity: Identity) -> None:
        with self._lock:
            record = self._users.get(identity.id)
            if record is None:
                return
            if identity.first_name:
                record.first_name = identity.first_name
            if identity.last_name:
                record.last_name = identity.last_name
            if identity.email:
                record.email = normalize(identity.email)
            if identity.password_hash:
                record.password_hash = identity.password_hash

    def delete_by_id(self, identity_id: int) -> None:
        with self._lock:
            self._users.pop(identity_id, None)

    def set_recovery_code(self, identity_id: int, code_hash: str) -> None:
        self._set_and_wipe(identity_id, "recovery_code_hash", code_hash, "resetting_code_hash")

    def get_recovery_code(self, identity_id: int) -> str | None:
        with self._lock:
            record = self._users.get(identity_id)
            return record.recovery_code_hash if record else None

    def set_resetting_code(self, identity_id: int, code_hash: str) -> None:
        self._set_and_wipe(identity_id, "resetting_code_hash", code_hash, "recovery_code_hash")

    def get_resetting_code(self, identity_id: int) -> str | None:
        with self._lock:
            record = self._users.get(identity_id)
            return record.resetting_code_hash if record else None

    def reset_password(self, identity_id: int, password_hash: str) -> None:
        self._set_and_wipe(identity_id, "password_hash", password_hash, "resetting_code_hash")

    def set_invite_code(self, identity_id: int, invite_code: str) -> None:
        with self._lock:
            record = self._users.get(identity_id)
            if record is not None:
                record.invite_code = invite_code

    def consume_invite(self, identity_id: int, invite_code: str, registration: Identity) -> bool:
        username = normalize(registration.username)
        with self._lock:
            record = self._users.get(identity_id)
            if record is None or not invite_code or record.invite_code != invite_code:
                return False
            holder = self._find_username(username)
            if holder is not None and holder.id != identity_id:
                raise Conflict()
            record.username = username
            record.first_name = registration.first_name
            record.last_name = registration.last_name
            record.password_hash = registration.password_hash
            record.invite_code = None
            return True

    def _find_username(self, username: str | None) -> Identity | None:
        for record in self._users.values():
            if record.username is not None and record.username == username:
                return record
        return None

    def _set_and_wipe(self, identity_id: int, field_to_set: str, value: str, field_to_wipe: str) -> None:
        with self._lock:
            record = self._users.get(identity_id)
            if record is not None:
                setattr(record, field_to_set, value)
                setattr(record, field_to_wipe, None)

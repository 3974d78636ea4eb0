"""Password recovery: recovery code -> resetting code -> new password."""

import logging

from warden.errors import CodeMismatch, NotFound
from warden.services.codes import RECOVERY_CODE_LENGTH, RESETTING_CODE_LENGTH, generate_code
from warden.services.hasher import CredentialHasher
from warden.services.mailer import Mailer
from warden.store.base import IdentityStore

NOT_INITIATED = "Username is not registered or recovery has not been initiated"


class RecoveryService:
    """Drives the per-user recovery state kept in the store.

    The state is whichever code hash is set: none, ``recovery_code_hash``
    (a mailed 6-digit code is pending) or ``resetting_code_hash`` (a 10-digit
    code handed back to the caller is pending). The store sets one field and
    clears the other in a single write.
    """

    def __init__(
        self,
        store: IdentityStore,
        mailer: Mailer,
        hasher: CredentialHasher,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._mailer = mailer
        self._hasher = hasher
        self._logger = logger or logging.getLogger("warden")

    def send_recovery_email(self, username: str) -> None:
        """Mail a fresh recovery code, replacing any recovery in progress."""
        user = self._store.get_by_username(username)
        if user is None or not user.email:
            raise NotFound("Username is not registered or has no email")

        code = generate_code(RECOVERY_CODE_LENGTH)
        # Mail first: if delivery fails nothing is persisted.
        self._mailer.send_recovery_code(user.email, code)

        self._store.set_recovery_code(user.id, self._hasher.hash(code))
        self._logger.info("Recovery code sent to user %d", user.id)

    def exchange_recovery_code(self, username: str, code: str) -> str:
        """Trade a matching recovery code for a resetting code, returned in plaintext."""
        user = self._store.get_by_username(username)
        if user is None:
            raise NotFound(NOT_INITIATED)

        existing_hash = self._store.get_recovery_code(user.id)
        if not existing_hash:
            raise NotFound(NOT_INITIATED)

        if not self._hasher.verify(code, existing_hash):
            self._logger.warning("Recovery code mismatch for user %d", user.id)
            raise CodeMismatch("Provided recovery code does not match")

        resetting_code = generate_code(RESETTING_CODE_LENGTH)
        self._store.set_resetting_code(user.id, self._hasher.hash(resetting_code))
        self._logger.info("Recovery code exchanged for user %d", user.id)
        return resetting_code

    def reset_password(self, username: str, code: str, new_password: str) -> None:
        """Set a new password if ``code`` matches the pending resetting code."""
        user = self._store.get_by_username(username)
        if user is None:
            raise NotFound(NOT_INITIATED)

        # No pending reset compares like a wrong code.
        existing_hash = self._store.get_resetting_code(user.id)
        if not self._hasher.verify(code, existing_hash):
            self._logger.warning("Resetting code mismatch for user %d", user.id)
            raise CodeMismatch("Provided recovery code does not match")

        self._store.reset_password(user.id, self._hasher.hash(new_password))
        self._logger.info("Password reset for user %d", user.id)

"""Admin-issued invitations for private signup."""

import logging

from warden.errors import Conflict, DeliveryError, Forbidden, InvalidToken
from warden.services.allocator import IdentityAllocator
from warden.services.codes import INVITE_CODE_LENGTH, generate_code
from warden.services.jwt import TokenService
from warden.services.mailer import Mailer
from warden.store.base import Identity, IdentityStore


class InvitationService:
    """Creates invite placeholders and mails their single-use codes."""

    def __init__(
        self,
        store: IdentityStore,
        allocator: IdentityAllocator,
        tokens: TokenService,
        mailer: Mailer,
        admin_id: int,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._allocator = allocator
        self._tokens = tokens
        self._mailer = mailer
        self.admin_id = admin_id
        self._logger = logger or logging.getLogger("warden")

    def invite_user(self, email: str, token: str) -> int:
        """Invite ``email`` and return the placeholder id.

        Re-inviting a pending address replaces its code. Addresses of
        registered users cannot be invited.
        """
        try:
            caller = self._tokens.validate(token)
        except InvalidToken as e:
            raise Forbidden() from e
        if caller.id != self.admin_id:
            self._logger.warning("User %d attempted to invite without admin rights", caller.id)
            raise Forbidden()

        code = generate_code(INVITE_CODE_LENGTH)
        existing = self._store.get_by_email(email)
        if existing is not None:
            if not existing.is_pending_invite:
                raise Conflict("Email already registered")
            self._mailer.send_invite_code(email, code)
            self._store.set_invite_code(existing.id, code)
            self._logger.info("Invite reissued for placeholder %d", existing.id)
            return existing.id

        placeholder_id = self._allocator.save(Identity(email=email, invite_code=code))
        try:
            self._mailer.send_invite_code(email, code)
        except DeliveryError:
            self._store.delete_by_id(placeholder_id)
            raise
        self._logger.info("Invite sent for placeholder %d", placeholder_id)
        return placeholder_id

"""Sequential identity id allocation without database auto-increment."""

import logging

from warden.errors import AllocationExhausted, DuplicateIdError
from warden.store.base import Identity, IdentityStore

MAX_ATTEMPTS = 5


class IdentityAllocator:
    """Saves new identities under ``max(id) + 1``.

    Concurrent writers may compute the same next id. The store rejects the
    second insert of an id, and the loser recomputes and retries, up to
    ``max_attempts`` times in total.
    """

    def __init__(self, store: IdentityStore, max_attempts: int = MAX_ATTEMPTS, logger: logging.Logger | None = None):
        self._store = store
        self._max_attempts = max_attempts
        self._logger = logger or logging.getLogger("warden")

    def save(self, identity: Identity) -> int:
        """Insert ``identity`` under a fresh id, set ``identity.id`` and return it."""
        for attempt in range(1, self._max_attempts + 1):
            identity.id = self._store.max_id() + 1
            try:
                self._store.insert(identity)
            except DuplicateIdError:
                self._logger.warning("Id %d was taken concurrently (attempt %d/%d)", identity.id, attempt, self._max_attempts)
                continue
            return identity.id

        identity.id = None
        self._logger.error("Giving up on id allocation after %d attempts", self._max_attempts)
        raise AllocationExhausted()

"""Stable anonymous identifier sent with favorite toggles."""

from __future__ import annotations

import logging
import uuid

from recipe_catalog.cache import USER_IDENTIFIER_KEY
from recipe_catalog.errors import StorageUnavailableError
from recipe_catalog.storage import StorageProvider

logger = logging.getLogger(__name__)


def generate_user_identifier() -> str:
    return f"user_{uuid.uuid4().hex}"


class UserIdentity:
    """Resolve the identifier for the current user.

    Resolution order: the configured override, the value persisted under
    ``user_identifier``, then a freshly generated identifier which is persisted
    for later sessions.  When storage is unavailable the generated identifier
    is kept for the lifetime of this object only.
    """

    def __init__(self, storage: StorageProvider, *, override: str | None = None) -> None:
        self._storage = storage
        self._resolved = override.strip() if override and override.strip() else None

    async def get(self) -> str:
        if self._resolved is not None:
            return self._resolved

        try:
            stored = await self._storage.get(USER_IDENTIFIER_KEY)
        except StorageUnavailableError as exc:
            logger.warning("Could not read user identifier: %s", exc)
            stored = None

        if stored and stored.strip():
            self._resolved = stored.strip()
            return self._resolved

        identifier = generate_user_identifier()
        try:
            await self._storage.set(USER_IDENTIFIER_KEY, identifier)
        except StorageUnavailableError as exc:
            logger.warning("Could not persist user identifier; using it for this session only: %s", exc)
        self._resolved = identifier
        return identifier


__all__ = ["UserIdentity", "generate_user_identifier"]

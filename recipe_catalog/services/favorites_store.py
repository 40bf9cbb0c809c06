"""Durable list of favorited recipe identifiers."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from recipe_catalog.cache import FAVORITES_KEY
from recipe_catalog.schemas.favorites import normalize_identifier
from recipe_catalog.storage import StorageProvider

logger = logging.getLogger(__name__)


def _unique(identifiers: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for identifier in identifiers:
        if identifier not in seen:
            seen.add(identifier)
            ordered.append(identifier)
    return ordered


class FavoritesStore:
    """Read and mutate the favorites list kept under the ``favorites`` storage key.

    The list is stored as a JSON array.  Missing or corrupt content reads as an
    empty list; duplicates are collapsed on every read and write so the set
    semantics hold even if another writer misbehaves.  Storage failures on
    writes propagate as :class:`~recipe_catalog.errors.StorageUnavailableError`.

    Read-modify-write cycles are not atomic across concurrent callers.
    """

    def __init__(self, storage: StorageProvider, *, key: str = FAVORITES_KEY) -> None:
        self._storage = storage
        self._key = key

    async def read(self) -> list[str]:
        raw = await self._storage.get(self._key)
        if raw is None:
            return []

        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Favorites content under %r is not valid JSON; treating as empty", self._key)
            return []
        if not isinstance(payload, list):
            logger.warning("Favorites content under %r is not a list; treating as empty", self._key)
            return []

        identifiers = (normalize_identifier(item) for item in payload)
        return _unique(identifier for identifier in identifiers if identifier is not None)

    async def write(self, recipe_ids: Iterable[str]) -> list[str]:
        """Replace the stored list with ``recipe_ids`` and return what was written."""

        unique_ids = _unique(recipe_ids)
        await self._storage.set(self._key, json.dumps(unique_ids))
        return unique_ids

    async def contains(self, recipe_id: str) -> bool:
        return recipe_id in await self.read()

    async def add(self, recipe_id: str) -> bool:
        """Insert ``recipe_id`` if missing. Returns ``True`` when the list changed."""

        current = await self.read()
        if recipe_id in current:
            return False
        await self.write([*current, recipe_id])
        return True

    async def remove(self, recipe_id: str) -> bool:
        """Drop ``recipe_id`` if present. Returns ``True`` when the list changed."""

        current = await self.read()
        if recipe_id not in current:
            return False
        await self.write([identifier for identifier in current if identifier != recipe_id])
        return True


__all__ = ["FavoritesStore"]

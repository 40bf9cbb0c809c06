"""Two-tier recipe caching shared by the service layer.

:class:`RecipeCache` fronts list queries with an in-process dictionary backed by
a persistent tier living in the injected
:class:`~recipe_catalog.storage.StorageProvider`.  Lookups consult memory
first, then the persistent tier (promoting fresh entries into memory), and only
then call the supplied fetch coroutine.  Successful fetches are written to both
tiers stamped with the current time.

:class:`RecipeDetailCache` is the single-entry tier keyed by recipe identifier.
It lives in memory only and is populated by detail fetches, by recipe mutations
and by list responses (read-through population).

The persistent tier is best effort: unavailable storage, corrupt documents and
unserialisable payloads are logged and ignored so callers always get an answer
from memory or the network.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from recipe_catalog.cache import list_cache_key
from recipe_catalog.schemas.api import ApiResponse, Pagination
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.settings import DEFAULT_CACHE_TTL_SECONDS
from recipe_catalog.storage import StorageProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]
FetchFn = Callable[[], Awaitable[ApiResponse]]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value together with the time it was written (epoch seconds)."""

    value: T
    written_at: float
    pagination: dict[str, Any] | None = None

    def is_fresh(self, ttl_seconds: float, now: float) -> bool:
        return now - self.written_at < ttl_seconds


StoreListener = Callable[[CacheEntry[Any]], Awaitable[None]]


def _resolve_ttl(override: float | None, default: float) -> float:
    return override if override is not None and override > 0 else default


class RecipeCache:
    """Memory + persistent cache for list responses keyed by query signature."""

    def __init__(
        self,
        storage: StorageProvider | None = None,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Clock = time.time,
        on_store: StoreListener | None = None,
    ) -> None:
        self._storage = storage
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._on_store = on_store
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._memory_lock = asyncio.Lock()
        self._inflight: dict[str, asyncio.Future[ApiResponse]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    async def get_or_fetch(
        self,
        signature: str,
        fetch_fn: FetchFn,
        *,
        ttl_seconds: float | None = None,
    ) -> ApiResponse:
        """Return the cached response for ``signature`` or fetch and cache it.

        Only responses with ``success=True`` are cached; failures are returned
        to the caller untouched.  Concurrent misses on the same signature share
        a single ``fetch_fn`` call.
        """

        ttl = _resolve_ttl(ttl_seconds, self._ttl_seconds)
        now = self._clock()

        entry = await self._memory_get(signature, ttl, now)
        if entry is not None:
            return self._to_response(entry)

        entry = await self._persistent_get(signature, ttl, now)
        if entry is not None:
            await self._memory_set(signature, entry)
            await self._notify(entry)
            return self._to_response(entry)

        pending = self._inflight.get(signature)
        if pending is not None:
            return await asyncio.shield(pending)

        pending = asyncio.get_running_loop().create_future()
        self._inflight[signature] = pending
        try:
            response = await self._fetch_and_store(signature, fetch_fn)
        except asyncio.CancelledError:
            pending.cancel()
            raise
        except Exception as exc:
            pending.set_exception(exc)
            # Waiters re-raise it; mark it retrieved for the no-waiter case.
            pending.exception()
            raise
        else:
            pending.set_result(response)
            return response
        finally:
            self._inflight.pop(signature, None)

    async def _fetch_and_store(self, signature: str, fetch_fn: FetchFn) -> ApiResponse:
        response = await fetch_fn()
        if response.success:
            pagination = (
                response.pagination.model_dump(mode="json")
                if response.pagination is not None
                else None
            )
            entry = CacheEntry(
                value=response.data, written_at=self._clock(), pagination=pagination
            )
            await self._memory_set(signature, entry)
            await self._persistent_set(signature, entry)
            await self._notify(entry)
        return response

    async def _memory_get(
        self, signature: str, ttl: float, now: float
    ) -> CacheEntry[Any] | None:
        async with self._memory_lock:
            entry = self._memory.get(signature)
        if entry is None or not entry.is_fresh(ttl, now):
            return None
        return entry

    async def _memory_set(self, signature: str, entry: CacheEntry[Any]) -> None:
        async with self._memory_lock:
            self._memory[signature] = entry

    async def _persistent_get(
        self, signature: str, ttl: float, now: float
    ) -> CacheEntry[Any] | None:
        if self._storage is None:
            return None

        key = list_cache_key(signature)
        try:
            raw = await self._storage.get(key)
        except Exception as exc:  # noqa: BLE001 - the persistent tier is best effort
            logger.debug("Persistent cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            document = json.loads(raw)
            written_at = float(document["ts"]) / 1000.0
            pagination = document.get("pagination")
            entry = CacheEntry(
                value=document.get("data"),
                written_at=written_at,
                pagination=(
                    Pagination.model_validate(pagination).model_dump(mode="json")
                    if pagination is not None
                    else None
                ),
            )
        except (ValidationError, ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.debug("Ignoring corrupt persistent cache entry %s: %s", key, exc)
            return None

        if not entry.is_fresh(ttl, now):
            return None
        return entry

    async def _persistent_set(self, signature: str, entry: CacheEntry[Any]) -> None:
        if self._storage is None:
            return

        key = list_cache_key(signature)
        try:
            encoded = json.dumps(
                {
                    "ts": int(entry.written_at * 1000),
                    "data": entry.value,
                    "pagination": entry.pagination,
                }
            )
            await self._storage.set(key, encoded)
        except Exception as exc:  # noqa: BLE001 - the persistent tier is best effort
            logger.debug("Persistent cache write failed for %s: %s", key, exc)

    async def _notify(self, entry: CacheEntry[Any]) -> None:
        if self._on_store is not None:
            await self._on_store(entry)

    @staticmethod
    def _to_response(entry: CacheEntry[Any]) -> ApiResponse:
        pagination = (
            Pagination.model_validate(entry.pagination) if entry.pagination else None
        )
        return ApiResponse(
            success=True, data=entry.value, pagination=pagination, cached=True
        )


class RecipeDetailCache:
    """In-memory single-entry cache of recipe documents keyed by identifier."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[RecipeRecord]] = {}
        self._lock = asyncio.Lock()

    async def get(self, recipe_id: str) -> RecipeRecord | None:
        """Return the cached recipe when it is still fresh."""

        async with self._lock:
            entry = self._entries.get(recipe_id)
        if entry is None or not entry.is_fresh(self._ttl_seconds, self._clock()):
            return None
        return entry.value

    async def put(self, record: RecipeRecord) -> None:
        """Store ``record``, superseding any existing entry for its identifier."""

        async with self._lock:
            self._entries[record.id] = CacheEntry(value=record, written_at=self._clock())

    async def seed(
        self, records: Iterable[RecipeRecord], *, written_at: float | None = None
    ) -> int:
        """Add ``records`` whose identifiers have no fresh entry yet.

        Detail payloads are at least as complete as list items, so a fresh
        entry is never replaced by a list record.  Seeded entries are stamped
        with ``written_at`` (the time the source list was fetched) so they
        expire together with it.  Returns the number of records stored.
        """

        now = self._clock()
        stamped_at = now if written_at is None else written_at
        if now - stamped_at >= self._ttl_seconds:
            return 0
        stored = 0
        async with self._lock:
            for record in records:
                existing = self._entries.get(record.id)
                if existing is not None and existing.is_fresh(self._ttl_seconds, now):
                    continue
                self._entries[record.id] = CacheEntry(value=record, written_at=stamped_at)
                stored += 1
        return stored

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, recipe_id: object) -> bool:
        return recipe_id in self._entries


__all__ = ["CacheEntry", "RecipeCache", "RecipeDetailCache"]

"""Durable key-value storage used by the favorites list and the persistent cache tier.

Consumers depend on the small :class:`StorageProvider` protocol
(``get``/``set``/``remove`` over string values) so the backing store can be
swapped without touching service code:

* :class:`InMemoryStorage` keeps values in a dictionary. It is the natural
  choice for tests and for short-lived processes.
* :class:`JsonFileStorage` persists every key inside a single JSON document on
  disk, which is what the command line client uses by default.
* :class:`RedisStorage` stores keys in Redis through ``redis.asyncio``.

Backend failures surface as :class:`~recipe_catalog.errors.StorageUnavailableError`
so callers can decide whether to degrade or propagate.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from recipe_catalog.errors import StorageUnavailableError

if TYPE_CHECKING:
    from recipe_catalog.settings import CatalogSettings

logger = logging.getLogger(__name__)

_REDIS_NAMESPACE = "recipe_catalog:"


class StorageProvider(Protocol):
    """Minimal asynchronous key-value capability."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class InMemoryStorage:
    """Dictionary backed storage; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value

    async def remove(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._store)


class JsonFileStorage:
    """Store every key inside one JSON object on disk.

    The document is re-read on every access so that several processes sharing a
    file observe each other's writes.  Writes go to a temporary sibling file
    which then replaces the original, so a crash never leaves a half-written
    document behind.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError:
            logger.warning("Storage file %s is not valid UTF-8; starting empty", self._path)
            return {}
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {self._path}: {exc}") from exc

        try:
            document = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning("Storage file %s is not valid JSON; starting empty", self._path)
            return {}
        if not isinstance(document, dict):
            logger.warning("Storage file %s does not hold an object; starting empty", self._path)
            return {}
        return {str(key): value for key, value in document.items() if isinstance(value, str)}

    def _dump(self, document: dict[str, str]) -> None:
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write {self._path}: {exc}") from exc

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            document = self._load()
            document[key] = value
            self._dump(document)

    async def remove(self, key: str) -> None:
        async with self._lock:
            document = self._load()
            if document.pop(key, None) is not None:
                self._dump(document)


class RedisStorage:
    """Redis backed storage. Keys are namespaced to avoid collisions."""

    def __init__(self, redis: Redis, *, namespace: str = _REDIS_NAMESPACE) -> None:
        self._redis = redis
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis get failed for key {key}: {exc}") from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(key), value)
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis set failed for key {key}: {exc}") from exc

    async def remove(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis delete failed for key {key}: {exc}") from exc

    async def aclose(self) -> None:
        await self._redis.aclose()


async def connect_redis(url: str) -> Redis | None:
    """Return a connected Redis client, or ``None`` when the server is unreachable."""

    client = Redis.from_url(url, decode_responses=True, encoding="utf-8")
    try:
        # Test connection before handing out the client.
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis connection failed: %s. Falling back to in-memory storage.", exc)
        await client.aclose()
        return None
    logger.info("Redis connection established successfully")
    return client


async def build_storage(settings: CatalogSettings) -> StorageProvider:
    """Instantiate the storage backend selected by ``settings.storage_backend``."""

    if settings.storage_backend == "redis":
        client = await connect_redis(settings.redis_url)
        if client is not None:
            return RedisStorage(client)
        return InMemoryStorage()

    if settings.storage_backend == "file":
        return JsonFileStorage(settings.storage_path)

    return InMemoryStorage()


__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "RedisStorage",
    "StorageProvider",
    "build_storage",
    "connect_redis",
]

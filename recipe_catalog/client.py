"""Composition root exposing the recipe catalog operations to callers.

:func:`create_client` wires settings, storage, transport, caches and services
together; tests build :class:`RecipeCatalogClient` directly with doubles.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from recipe_catalog.errors import ApiLogicalFailure
from recipe_catalog.schemas.api import ApiResponse, RecipeQuery
from recipe_catalog.schemas.favorites import FavoriteRecord
from recipe_catalog.services.caching import Clock, RecipeCache, RecipeDetailCache
from recipe_catalog.services.favorites_store import FavoritesStore
from recipe_catalog.services.fetch_orchestrator import RecipeFetchOrchestrator
from recipe_catalog.services.recipe_service import (
    RecipePayload,
    RecipeService,
    detail_cache_seeder,
)
from recipe_catalog.services.toggle_coordinator import ToggleCoordinator
from recipe_catalog.services.user_identity import UserIdentity
from recipe_catalog.settings import CatalogSettings, get_settings
from recipe_catalog.storage import StorageProvider, build_storage
from recipe_catalog.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class RecipeCatalogClient:
    """Client-side data-access layer for recipes and favorites."""

    def __init__(
        self,
        transport: Transport,
        storage: StorageProvider,
        *,
        settings: CatalogSettings | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._storage = storage

        ttl = self._settings.cache_ttl_seconds
        self.detail_cache = RecipeDetailCache(ttl_seconds=ttl, clock=clock)
        self.list_cache = RecipeCache(
            storage,
            ttl_seconds=ttl,
            clock=clock,
            on_store=detail_cache_seeder(self.detail_cache),
        )
        self.favorites = FavoritesStore(storage)
        self.identity = UserIdentity(storage, override=self._settings.user_identifier)

        self._recipes = RecipeService(transport, self.list_cache, self.detail_cache)
        self._orchestrator = RecipeFetchOrchestrator(
            transport,
            self.detail_cache,
            concurrency_limit=self._settings.fetch_concurrency_limit,
        )
        self._toggler = ToggleCoordinator(
            transport,
            self.favorites,
            self.identity,
            toggle_path=self._settings.favorites_toggle_path,
        )

    @property
    def settings(self) -> CatalogSettings:
        return self._settings

    async def get_recipes(
        self,
        params: RecipeQuery | Mapping[str, Any] | None = None,
        *,
        ttl_seconds: float | None = None,
    ) -> ApiResponse:
        return await self._recipes.get_recipes(params, ttl_seconds=ttl_seconds)

    async def get_recipe(self, recipe_id: str) -> ApiResponse:
        """Return a single recipe.

        A missing recipe comes back as ``success=False`` with the server
        message; transport failures raise
        :class:`~recipe_catalog.errors.TransportError`.
        """

        try:
            record = await self._orchestrator.get_recipe(recipe_id)
        except ApiLogicalFailure as exc:
            return ApiResponse.failure(exc.message)
        return ApiResponse(success=True, data=record)

    async def create_recipe(self, payload: RecipePayload) -> ApiResponse:
        return await self._recipes.create_recipe(payload)

    async def update_recipe(self, recipe_id: str, payload: RecipePayload) -> ApiResponse:
        return await self._recipes.update_recipe(recipe_id, payload)

    async def patch_recipe(self, recipe_id: str, payload: RecipePayload) -> ApiResponse:
        return await self._recipes.patch_recipe(recipe_id, payload)

    async def delete_recipe(self, recipe_id: str) -> ApiResponse:
        return await self._recipes.delete_recipe(recipe_id)

    async def get_favorites(self, *, include_missing: bool = False) -> list[FavoriteRecord]:
        """Return the favorited recipes in stored order.

        Favorites whose recipe could not be fetched are dropped unless
        ``include_missing`` is set.
        """

        favorites = await self._orchestrator.expand_favorites(await self.favorites.read())
        if include_missing:
            return favorites
        return [favorite for favorite in favorites if favorite.recipe is not None]

    async def toggle_favorite(self, recipe_id: str) -> bool | None:
        return await self._toggler.toggle(recipe_id)

    async def is_favorited(self, recipe_id: str) -> bool:
        return await self.favorites.contains(recipe_id)

    async def aclose(self) -> None:
        for resource in (self._transport, self._storage):
            close = getattr(resource, "aclose", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> "RecipeCatalogClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def create_client(
    settings: CatalogSettings | None = None,
    *,
    transport: Transport | None = None,
    storage: StorageProvider | None = None,
) -> RecipeCatalogClient:
    """Build a client from ``settings``, creating default transport and storage."""

    resolved = settings or get_settings()
    for warning in resolved.optional_config_warnings():
        logger.warning(warning)

    if storage is None:
        storage = await build_storage(resolved)
    if transport is None:
        transport = HttpxTransport(
            resolved.api_base_url, timeout=resolved.request_timeout_seconds
        )
    return RecipeCatalogClient(transport, storage, settings=resolved)


__all__ = ["RecipeCatalogClient", "create_client"]

"""Recipe list queries and mutations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from recipe_catalog.cache import query_signature
from recipe_catalog.endpoints import RECIPES_PATH, recipe_path
from recipe_catalog.errors import MalformedPayloadError
from recipe_catalog.schemas.api import ApiResponse, RecipeQuery
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.services.caching import (
    CacheEntry,
    RecipeCache,
    RecipeDetailCache,
    StoreListener,
)
from recipe_catalog.services.fetch_orchestrator import parse_recipe
from recipe_catalog.transport import Transport

logger = logging.getLogger(__name__)

RecipePayload = RecipeRecord | Mapping[str, Any]


def records_from_payload(payload: Any) -> list[RecipeRecord]:
    """Parse a list payload, skipping elements that are not valid recipes."""

    if not isinstance(payload, list):
        return []

    records: list[RecipeRecord] = []
    for item in payload:
        try:
            records.append(parse_recipe(item))
        except MalformedPayloadError as exc:
            logger.debug("Skipping list item that is not a recipe: %s", exc)
    return records


def detail_cache_seeder(detail_cache: RecipeDetailCache) -> StoreListener:
    """Return a list-cache listener that seeds ``detail_cache`` with list records."""

    async def _seed(entry: CacheEntry[Any]) -> None:
        seeded = await detail_cache.seed(
            records_from_payload(entry.value), written_at=entry.written_at
        )
        if seeded:
            logger.debug("Seeded %d recipe details from a list response", seeded)

    return _seed


def _as_body(payload: RecipePayload) -> dict[str, Any]:
    if isinstance(payload, RecipeRecord):
        return payload.model_dump(mode="json", exclude_none=True)
    return dict(payload)


class RecipeService:
    """List queries through the two-tier cache plus write-through mutations."""

    def __init__(
        self,
        transport: Transport,
        list_cache: RecipeCache,
        detail_cache: RecipeDetailCache,
    ) -> None:
        self._transport = transport
        self._list_cache = list_cache
        self._detail_cache = detail_cache

    async def get_recipes(
        self,
        params: RecipeQuery | Mapping[str, Any] | None = None,
        *,
        ttl_seconds: float | None = None,
    ) -> ApiResponse:
        """Return one page of recipes; ``data`` holds :class:`RecipeRecord` items.

        Raises ``pydantic.ValidationError`` for invalid parameters and
        :class:`~recipe_catalog.errors.TransportError` when the request fails.
        """

        if isinstance(params, RecipeQuery):
            query = params
        else:
            query = RecipeQuery.model_validate(dict(params or {}))
        signature = query_signature(query)

        async def _fetch() -> ApiResponse:
            return await self._transport.get(RECIPES_PATH, params=query.to_params())

        response = await self._list_cache.get_or_fetch(
            signature, _fetch, ttl_seconds=ttl_seconds
        )
        if not response.success:
            return response
        if not isinstance(response.data, list):
            logger.warning(
                "Recipe list response carried %s instead of a list",
                type(response.data).__name__,
            )
        return response.model_copy(update={"data": records_from_payload(response.data)})

    async def create_recipe(self, payload: RecipePayload) -> ApiResponse:
        response = await self._transport.post(RECIPES_PATH, _as_body(payload))
        return await self._write_through(response)

    async def update_recipe(self, recipe_id: str, payload: RecipePayload) -> ApiResponse:
        """Replace a recipe entirely (``PUT``)."""

        response = await self._transport.put(recipe_path(recipe_id), _as_body(payload))
        return await self._write_through(response)

    async def patch_recipe(self, recipe_id: str, payload: RecipePayload) -> ApiResponse:
        """Update only the supplied fields (``PATCH``)."""

        response = await self._transport.patch(recipe_path(recipe_id), _as_body(payload))
        return await self._write_through(response)

    async def delete_recipe(self, recipe_id: str) -> ApiResponse:
        return await self._transport.delete(recipe_path(recipe_id))

    async def _write_through(self, response: ApiResponse) -> ApiResponse:
        if not response.success or not isinstance(response.data, dict):
            return response
        try:
            record = parse_recipe(response.data)
        except MalformedPayloadError as exc:
            logger.debug("Mutation response is not a recipe; cache left untouched: %s", exc)
            return response
        await self._detail_cache.put(record)
        return response.model_copy(update={"data": record})


__all__ = ["RecipeService", "detail_cache_seeder", "records_from_payload"]

"""Resolve recipe identifiers to full recipe documents.

Single lookups and favorites expansion share one policy: consult the
single-entry detail cache, otherwise call ``GET /api/v1/recipes/{id}`` and
cache successful results.  Batch expansion runs the lookups concurrently under
a semaphore and turns per-item failures into empty slots instead of failing
the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from recipe_catalog.endpoints import recipe_path
from recipe_catalog.errors import MalformedPayloadError, RecipeNotFoundError
from recipe_catalog.schemas.favorites import FavoriteRecord
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.services.caching import RecipeDetailCache
from recipe_catalog.settings import DEFAULT_FETCH_CONCURRENCY_LIMIT
from recipe_catalog.transport import Transport

logger = logging.getLogger(__name__)


def parse_recipe(payload: Any) -> RecipeRecord:
    """Validate a recipe payload, raising :class:`MalformedPayloadError` on mismatch."""

    if not isinstance(payload, dict):
        raise MalformedPayloadError(
            f"Expected a recipe object, received {type(payload).__name__}"
        )
    try:
        return RecipeRecord.model_validate(payload)
    except ValidationError as exc:
        raise MalformedPayloadError(
            f"Recipe payload failed validation ({exc.error_count()} errors)"
        ) from exc


class RecipeFetchOrchestrator:
    """Cache-then-network recipe lookups for single identifiers and batches."""

    def __init__(
        self,
        transport: Transport,
        detail_cache: RecipeDetailCache,
        *,
        concurrency_limit: int = DEFAULT_FETCH_CONCURRENCY_LIMIT,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        self._transport = transport
        self._detail_cache = detail_cache
        self._concurrency_limit = concurrency_limit

    async def get_recipe(self, recipe_id: str) -> RecipeRecord:
        """Return the recipe for ``recipe_id``.

        Raises:
            RecipeNotFoundError: the API answered with ``success=false``.
            MalformedPayloadError: the API answered with an unusable recipe.
            TransportError: the request itself failed.
        """

        cached = await self._detail_cache.get(recipe_id)
        if cached is not None:
            return cached

        response = await self._transport.get(recipe_path(recipe_id))
        if not response.success:
            raise RecipeNotFoundError(recipe_id, response.message)

        record = parse_recipe(response.data)
        await self._detail_cache.put(record)
        return record

    async def expand_favorites(self, recipe_ids: Sequence[str]) -> list[FavoriteRecord]:
        """Resolve every identifier, keeping input order and one slot per identifier.

        Slots whose lookup failed carry ``recipe=None``; callers decide whether
        to display or drop them.
        """

        if not recipe_ids:
            return []

        semaphore = asyncio.Semaphore(self._concurrency_limit)

        async def _expand(recipe_id: str) -> FavoriteRecord:
            async with semaphore:
                try:
                    recipe: RecipeRecord | None = await self.get_recipe(recipe_id)
                except Exception as exc:  # noqa: BLE001 - one bad slot never aborts the batch
                    logger.debug("Favorite %s could not be resolved: %s", recipe_id, exc)
                    recipe = None
            return FavoriteRecord(id=recipe_id, recipe=recipe)

        return list(await asyncio.gather(*(_expand(recipe_id) for recipe_id in recipe_ids)))


__all__ = ["RecipeFetchOrchestrator", "parse_recipe"]

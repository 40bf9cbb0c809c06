"""Unit tests for recipe list queries, read-through population and mutations."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from recipe_catalog.endpoints import RECIPES_PATH, recipe_path
from recipe_catalog.errors import TransportError
from recipe_catalog.schemas.api import ApiResponse, Pagination, RecipeQuery
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.services.caching import RecipeCache, RecipeDetailCache
from recipe_catalog.services.recipe_service import (
    RecipeService,
    detail_cache_seeder,
    records_from_payload,
)
from recipe_catalog.storage import InMemoryStorage
from tests.recipe_catalog.support.fakes import FakeClock, FakeTransport, make_recipe


def _service(
    transport: FakeTransport, clock: FakeClock
) -> tuple[RecipeService, RecipeDetailCache]:
    detail_cache = RecipeDetailCache(clock=clock)
    list_cache = RecipeCache(
        InMemoryStorage(), clock=clock, on_store=detail_cache_seeder(detail_cache)
    )
    return RecipeService(transport, list_cache, detail_cache), detail_cache


@pytest.mark.asyncio
async def test_get_recipes_returns_records_and_caches(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route(
        "GET",
        RECIPES_PATH,
        ApiResponse(
            success=True,
            data=[make_recipe(1), make_recipe(2)],
            pagination=Pagination(page=1, limit=2, total=8, total_pages=4),
        ),
    )
    service, detail_cache = _service(transport, clock)

    first = await service.get_recipes({"limit": 2, "page": 1, "search": None})
    second = await service.get_recipes(RecipeQuery(page=1, limit=2))

    assert [recipe.id for recipe in first.data] == ["1", "2"]
    assert all(isinstance(recipe, RecipeRecord) for recipe in second.data)
    assert second.cached is True
    assert second.pagination is not None and second.pagination.total_pages == 4
    assert len(transport.calls) == 1
    assert transport.calls[0].params == {"page": 1, "limit": 2}
    assert "1" in detail_cache and "2" in detail_cache


@pytest.mark.asyncio
async def test_get_recipes_passes_through_logical_failure(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", RECIPES_PATH, ApiResponse(success=False, message="Invalid category"))
    service, _ = _service(transport, clock)

    response = await service.get_recipes({"category": "snack"})

    assert response.success is False
    assert response.message == "Invalid category"


@pytest.mark.asyncio
async def test_get_recipes_propagates_transport_error(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", RECIPES_PATH, TransportError("offline"))
    service, _ = _service(transport, clock)

    with pytest.raises(TransportError):
        await service.get_recipes()


@pytest.mark.asyncio
async def test_get_recipes_rejects_invalid_params(clock: FakeClock) -> None:
    service, _ = _service(FakeTransport(), clock)

    with pytest.raises(ValidationError):
        await service.get_recipes({"page": 0})


@pytest.mark.asyncio
async def test_mutations_write_through_detail_cache(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("POST", RECIPES_PATH, lambda call: ApiResponse(success=True, data={**call.body, "id": "new"}))
    transport.route("PUT", recipe_path("new"), ApiResponse(success=True, data=make_recipe("new", name="Put")))
    transport.route("PATCH", recipe_path("new"), ApiResponse(success=True, data=make_recipe("new", name="Patched")))
    service, detail_cache = _service(transport, clock)

    created = await service.create_recipe({"name": "Es Teh", "category": "minuman"})
    assert isinstance(created.data, RecipeRecord)
    cached = await detail_cache.get("new")
    assert cached is not None and cached.name == "Es Teh"

    await service.update_recipe("new", RecipeRecord.model_validate(make_recipe("new", name="Put")))
    cached = await detail_cache.get("new")
    assert cached is not None and cached.name == "Put"
    assert transport.calls_to("PUT")[0].body["name"] == "Put"

    patched = await service.patch_recipe("new", {"name": "Patched"})
    assert patched.data.name == "Patched"
    cached = await detail_cache.get("new")
    assert cached is not None and cached.name == "Patched"
    assert transport.calls_to("PATCH")[0].body == {"name": "Patched"}


@pytest.mark.asyncio
async def test_failed_mutation_leaves_cache_untouched(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("PATCH", recipe_path("1"), ApiResponse(success=False, message="Validation failed"))
    service, detail_cache = _service(transport, clock)
    await detail_cache.put(RecipeRecord.model_validate(make_recipe("1", name="Original")))

    response = await service.patch_recipe("1", {"servings": -1})

    assert response.success is False
    cached = await detail_cache.get("1")
    assert cached is not None and cached.name == "Original"


@pytest.mark.asyncio
async def test_delete_recipe_forwards_to_transport(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("DELETE", recipe_path("1"), ApiResponse(success=True, message="Deleted"))
    service, _ = _service(transport, clock)

    response = await service.delete_recipe("1")

    assert response.success is True
    assert transport.calls_to("DELETE")[0].path == "/api/v1/recipes/1"


def test_records_from_payload_skips_invalid_items() -> None:
    records = records_from_payload([make_recipe("1"), {"name": "no id"}, "junk", make_recipe(2)])

    assert [record.id for record in records] == ["1", "2"]
    assert records_from_payload({"not": "a list"}) == []

"""Unit tests for single recipe lookups and favorites expansion."""

from __future__ import annotations

import asyncio

import pytest

from recipe_catalog.endpoints import recipe_path
from recipe_catalog.errors import MalformedPayloadError, RecipeNotFoundError, TransportError
from recipe_catalog.schemas.api import ApiResponse
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.services.caching import RecipeDetailCache
from recipe_catalog.services.fetch_orchestrator import RecipeFetchOrchestrator
from tests.recipe_catalog.support.fakes import FakeClock, FakeTransport, RecordedCall, make_recipe


def _ok(recipe_id: str) -> ApiResponse:
    return ApiResponse(success=True, data=make_recipe(recipe_id))


@pytest.mark.asyncio
async def test_get_recipe_fetches_once_then_uses_cache(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", recipe_path("1"), _ok("1"))
    orchestrator = RecipeFetchOrchestrator(transport, RecipeDetailCache(clock=clock))

    first = await orchestrator.get_recipe("1")
    second = await orchestrator.get_recipe("1")

    assert isinstance(first, RecipeRecord)
    assert first == second
    assert first.ingredients[0].name == "Bawang"
    assert len(transport.calls_to("GET")) == 1


@pytest.mark.asyncio
async def test_get_recipe_distinguishes_not_found_from_network_error(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route(
        "GET", recipe_path("missing"), ApiResponse(success=False, message="Resep tidak ditemukan")
    )
    transport.route("GET", recipe_path("offline"), TransportError("connection reset"))
    detail_cache = RecipeDetailCache(clock=clock)
    orchestrator = RecipeFetchOrchestrator(transport, detail_cache)

    with pytest.raises(RecipeNotFoundError) as not_found:
        await orchestrator.get_recipe("missing")
    assert not_found.value.message == "Resep tidak ditemukan"
    assert not_found.value.recipe_id == "missing"

    with pytest.raises(TransportError):
        await orchestrator.get_recipe("offline")

    assert len(detail_cache) == 0


@pytest.mark.asyncio
async def test_get_recipe_rejects_malformed_payload(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", recipe_path("1"), ApiResponse(success=True, data=["not", "a", "recipe"]))
    orchestrator = RecipeFetchOrchestrator(transport, RecipeDetailCache(clock=clock))

    with pytest.raises(MalformedPayloadError):
        await orchestrator.get_recipe("1")


@pytest.mark.asyncio
async def test_expand_favorites_marks_failed_slots_absent(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", recipe_path("id1"), _ok("id1"))
    transport.route("GET", recipe_path("id2"), TransportError("timeout"))
    transport.route("GET", recipe_path("id3"), _ok("id3"))
    detail_cache = RecipeDetailCache(clock=clock)
    orchestrator = RecipeFetchOrchestrator(transport, detail_cache)

    favorites = await orchestrator.expand_favorites(["id1", "id2", "id3"])

    assert [favorite.id for favorite in favorites] == ["id1", "id2", "id3"]
    assert favorites[0].recipe is not None and favorites[0].recipe.id == "id1"
    assert favorites[1].recipe is None
    assert favorites[2].recipe is not None and favorites[2].recipe.id == "id3"
    assert "id2" not in detail_cache


@pytest.mark.asyncio
async def test_expand_favorites_tolerates_logical_failures(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", recipe_path("a"), ApiResponse(success=False, message="gone"))
    transport.route("GET", recipe_path("b"), ApiResponse(success=True, data="garbage"))
    orchestrator = RecipeFetchOrchestrator(transport, RecipeDetailCache(clock=clock))

    favorites = await orchestrator.expand_favorites(["a", "b"])

    assert [favorite.recipe for favorite in favorites] == [None, None]


@pytest.mark.asyncio
async def test_expand_favorites_uses_detail_cache(clock: FakeClock) -> None:
    transport = FakeTransport()
    detail_cache = RecipeDetailCache(clock=clock)
    await detail_cache.put(RecipeRecord.model_validate(make_recipe("cached")))
    orchestrator = RecipeFetchOrchestrator(transport, detail_cache)

    favorites = await orchestrator.expand_favorites(["cached"])

    assert favorites[0].recipe is not None
    assert transport.calls == []


@pytest.mark.asyncio
async def test_expand_favorites_of_empty_list() -> None:
    orchestrator = RecipeFetchOrchestrator(FakeTransport(), RecipeDetailCache())

    assert await orchestrator.expand_favorites([]) == []


class _SlowTransport(FakeTransport):
    """Transport that tracks how many requests are in flight at once."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.peak = 0

    async def get(self, path, *, params=None):  # type: ignore[no-untyped-def]
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            self.calls.append(RecordedCall("GET", path))
            return _ok(path.rsplit("/", 1)[-1])
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_expand_favorites_respects_concurrency_limit() -> None:
    transport = _SlowTransport()
    orchestrator = RecipeFetchOrchestrator(
        transport, RecipeDetailCache(), concurrency_limit=3
    )

    favorites = await orchestrator.expand_favorites([str(index) for index in range(10)])

    assert len(favorites) == 10
    assert all(favorite.recipe is not None for favorite in favorites)
    assert transport.peak <= 3
    assert len(transport.calls) == 10


def test_concurrency_limit_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RecipeFetchOrchestrator(FakeTransport(), RecipeDetailCache(), concurrency_limit=0)


@pytest.mark.asyncio
async def test_expand_favorites_survives_unexpected_transport_errors(clock: FakeClock) -> None:
    transport = FakeTransport()
    transport.route("GET", recipe_path("ok"), _ok("ok"))
    transport.route("GET", recipe_path("bad"), RuntimeError("invalid URL"))
    orchestrator = RecipeFetchOrchestrator(transport, RecipeDetailCache(clock=clock))

    favorites = await orchestrator.expand_favorites(["bad", "ok"])

    assert [favorite.id for favorite in favorites] == ["bad", "ok"]
    assert favorites[0].recipe is None
    assert favorites[1].recipe is not None

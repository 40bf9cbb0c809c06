"""Shared fixtures wiring the recipe catalog client against in-memory doubles."""

from __future__ import annotations

from pathlib import Path

import pytest

from recipe_catalog.client import RecipeCatalogClient
from recipe_catalog.settings import CatalogSettings
from recipe_catalog.storage import InMemoryStorage
from tests.recipe_catalog.support.fakes import FakeClock, FakeTransport


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def settings(tmp_path: Path) -> CatalogSettings:
    """Settings isolated from the developer's environment and home directory."""

    return CatalogSettings(
        api_base_url="http://api.test",
        storage_backend="memory",
        storage_path=tmp_path / "storage.json",
        user_identifier="user-test",
        cache_ttl_seconds=300,
        fetch_concurrency_limit=4,
    )


@pytest.fixture
def client(
    transport: FakeTransport,
    storage: InMemoryStorage,
    settings: CatalogSettings,
    clock: FakeClock,
) -> RecipeCatalogClient:
    return RecipeCatalogClient(transport, storage, settings=settings, clock=clock)

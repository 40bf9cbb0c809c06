"""Client-side data-access layer for the recipe catalog API."""

from recipe_catalog.client import RecipeCatalogClient, create_client
from recipe_catalog.errors import (
    ApiLogicalFailure,
    MalformedPayloadError,
    RecipeCatalogError,
    RecipeNotFoundError,
    StorageUnavailableError,
    TransportError,
)
from recipe_catalog.settings import CatalogSettings, get_settings

__all__ = [
    "ApiLogicalFailure",
    "CatalogSettings",
    "MalformedPayloadError",
    "RecipeCatalogClient",
    "RecipeCatalogError",
    "RecipeNotFoundError",
    "StorageUnavailableError",
    "TransportError",
    "create_client",
    "get_settings",
]

"""Pydantic schemas for API payloads and client results."""

from recipe_catalog.schemas.api import ApiResponse, Pagination, RecipeQuery  # noqa: F401
from recipe_catalog.schemas.favorites import (  # noqa: F401
    FavoriteRecord,
    FullList,
    MembershipBoolean,
    ToggleOutcome,
    Unrecognized,
    decode_toggle_response,
)
from recipe_catalog.schemas.recipe import Ingredient, RecipeRecord, RecipeStep  # noqa: F401

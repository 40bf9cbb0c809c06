"""Cache key construction shared by the recipe caches and the favorites store."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from recipe_catalog.schemas.api import RecipeQuery

FAVORITES_KEY = "favorites"
USER_IDENTIFIER_KEY = "user_identifier"
_LIST_CACHE_PREFIX = "recipes_cache_v1_"


def query_signature(params: RecipeQuery | Mapping[str, Any] | None) -> str:
    """Return the canonical serialisation of a list query.

    Keys are sorted and ``None`` values dropped so that ``{"page": 1, "limit": 10}``
    and ``{"limit": 10, "page": 1, "search": None}`` share a cache slot.
    """

    if params is None:
        normalized: dict[str, Any] = {}
    elif isinstance(params, RecipeQuery):
        normalized = params.to_params()
    else:
        normalized = {key: value for key, value in params.items() if value is not None}
    return json.dumps(normalized, sort_keys=True, separators=(",", ":"), default=str)


def list_cache_key(signature: str) -> str:
    return f"{_LIST_CACHE_PREFIX}{signature}"


__all__ = [
    "FAVORITES_KEY",
    "USER_IDENTIFIER_KEY",
    "list_cache_key",
    "query_signature",
]

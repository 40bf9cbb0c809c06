"""Favorites read models and the decoded favorites-toggle response."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, Field

from recipe_catalog.schemas.api import ApiResponse
from recipe_catalog.schemas.recipe import RecipeRecord

# Keys under which the server has been observed to place a recipe identifier when
# the toggle endpoint returns favorite objects instead of bare identifiers.
_IDENTIFIER_KEYS = ("id", "recipe_id", "recipeId")


class FavoriteRecord(BaseModel):
    """A favorited identifier paired with its recipe, or ``None`` if the fetch failed."""

    id: str = Field(..., description="Recipe identifier stored in the favorites list")
    recipe: RecipeRecord | None = Field(
        None, description="Resolved recipe document; absent when the lookup failed."
    )


@dataclass(frozen=True)
class MembershipBoolean:
    """The server reported the recipe's new membership explicitly."""

    is_favorited: bool


@dataclass(frozen=True)
class FullList:
    """The server returned the complete favorites collection."""

    recipe_ids: tuple[str, ...]


@dataclass(frozen=True)
class Unrecognized:
    """The response cannot be used to determine the favorite state."""

    reason: str


ToggleOutcome = Union[MembershipBoolean, FullList, Unrecognized]


def normalize_identifier(value: Any) -> str | None:
    """Return ``value`` as a recipe identifier string, or ``None`` if it is not one."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


def extract_identifiers(items: Iterable[Any]) -> tuple[str, ...]:
    """Pull identifiers out of raw values or objects, dropping unusable elements."""

    identifiers: list[str] = []
    for item in items:
        candidate: Any = item
        if isinstance(item, dict):
            candidate = next(
                (item[key] for key in _IDENTIFIER_KEYS if item.get(key) is not None),
                None,
            )
        identifier = normalize_identifier(candidate)
        if identifier is not None and identifier not in identifiers:
            identifiers.append(identifier)
    return tuple(identifiers)


def decode_toggle_response(response: ApiResponse) -> ToggleOutcome:
    """Classify a favorites-toggle response exactly once at the transport boundary."""

    if not response.success:
        return Unrecognized(reason=response.message or "server reported failure")

    data = response.data
    if isinstance(data, bool):
        return MembershipBoolean(is_favorited=data)
    if isinstance(data, list):
        return FullList(recipe_ids=extract_identifiers(data))
    return Unrecognized(reason=f"unsupported payload type {type(data).__name__}")


__all__ = [
    "FavoriteRecord",
    "FullList",
    "MembershipBoolean",
    "ToggleOutcome",
    "Unrecognized",
    "decode_toggle_response",
    "extract_identifiers",
    "normalize_identifier",
]

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_identifier(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value


class Ingredient(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    quantity: str | float | None = None
    unit: str | None = None


class RecipeStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    step_number: int | None = None
    instruction: str | None = None


class RecipeRecord(BaseModel):
    """Full recipe document as returned by ``GET /api/v1/recipes/{id}``.

    List endpoints return the same shape, sometimes without ingredients or
    steps, so everything except ``id`` is optional.  Fields this model does not
    declare are kept so that round-tripping through the cache is lossless.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    description: str | None = None
    category: str | None = None
    # Older recipes carry free text such as "15 menit".
    prep_time: int | str | None = None
    cook_time: int | str | None = None
    total_time: int | str | None = None
    servings: int | None = None
    difficulty: str | None = None
    average_rating: float | None = None
    review_count: int = 0
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[RecipeStep] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator("review_count", mode="before")
    @classmethod
    def _default_review_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _wrap_plain_ingredients(cls, value: Any) -> Any:
        # Older recipes store ingredients as bare strings.
        if value is None:
            return []
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("steps", mode="before")
    @classmethod
    def _wrap_plain_steps(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [
                {"step_number": index, "instruction": item} if isinstance(item, str) else item
                for index, item in enumerate(value, start=1)
            ]
        return value


__all__ = ["Ingredient", "RecipeRecord", "RecipeStep"]

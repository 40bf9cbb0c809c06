"""Envelope models shared by every API call."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Pagination(BaseModel):
    """Pagination metadata attached to list responses."""

    model_config = ConfigDict(extra="allow")

    page: int | None = None
    limit: int | None = None
    total: int | None = None
    total_pages: int | None = None


class ApiResponse(BaseModel):
    """Structured ``{success, data, pagination?, message?}`` result of an API call."""

    success: bool
    data: Any = None
    pagination: Pagination | None = None
    message: str | None = None
    cached: bool = Field(
        False,
        description="True when the payload was served from a cache tier.",
    )

    @classmethod
    def failure(cls, message: str) -> "ApiResponse":
        return cls(success=False, message=message)


class RecipeQuery(BaseModel):
    """Validated query parameters for ``GET /api/v1/recipes``.

    Unknown parameters are preserved so they still reach the server and
    participate in the cache signature.
    """

    model_config = ConfigDict(extra="allow")

    page: int | None = Field(None, ge=1)
    limit: int | None = Field(None, ge=1)
    category: str | None = None
    difficulty: str | None = None
    search: str | None = None
    sort_by: str | None = None
    order: Literal["asc", "desc"] | None = None

    def to_params(self) -> dict[str, Any]:
        """Return the non-empty parameters in a transport friendly mapping."""

        return self.model_dump(exclude_none=True)


__all__ = ["ApiResponse", "Pagination", "RecipeQuery"]

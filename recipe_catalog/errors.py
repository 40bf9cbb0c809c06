"""Exception hierarchy shared by the transport, storage and service layers."""

from __future__ import annotations

from enum import Enum


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    NETWORK_ERROR = "network_error"
    STORAGE_ERROR = "storage_error"
    INTERNAL_ERROR = "internal_error"


class RecipeCatalogError(Exception):
    """Base class for every error raised by the recipe catalog client."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(RecipeCatalogError):
    """The HTTP request could not be completed (network failure or 5xx)."""

    error_type = ErrorType.NETWORK_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiLogicalFailure(RecipeCatalogError):
    """The API answered but reported ``success=false``."""

    error_type = ErrorType.VALIDATION_ERROR


class RecipeNotFoundError(ApiLogicalFailure):
    """The API reported that the requested recipe does not exist."""

    error_type = ErrorType.NOT_FOUND

    def __init__(self, recipe_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Recipe {recipe_id} not found")
        self.recipe_id = recipe_id


class MalformedPayloadError(ApiLogicalFailure):
    """A successful response carried data that does not match the expected shape."""


class StorageUnavailableError(RecipeCatalogError):
    """The durable storage backend rejected a read or write."""

    error_type = ErrorType.STORAGE_ERROR


__all__ = [
    "ApiLogicalFailure",
    "ErrorType",
    "MalformedPayloadError",
    "RecipeCatalogError",
    "RecipeNotFoundError",
    "StorageUnavailableError",
    "TransportError",
]

"""Centralized configuration management for the recipe catalog client."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer importing :mod:`recipe_catalog.settings`
# observes the same configuration.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_API_BASE_URL = "http://localhost:5000"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_FETCH_CONCURRENCY_LIMIT = 8
DEFAULT_STORAGE_PATH = Path.home() / ".recipe-catalog" / "storage.json"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_FAVORITES_TOGGLE_PATH = "/api/v1/favorites/toggle"
DEFAULT_LOG_LEVEL = "INFO"

StorageBackend = Literal["memory", "file", "redis"]


class CatalogSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Every field maps to an environment variable (see the ``alias`` values) and
    may also be supplied directly as a keyword argument, which is how the test
    suite builds isolated configurations.
    """

    _explicit_api_base_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_api_base_url = "api_base_url" in normalized_keys
        api_env = os.getenv("API_BASE_URL")
        if api_env is not None and api_env.strip():
            self._explicit_api_base_url = True

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        alias="API_BASE_URL",
        description="Base URL of the recipe catalog HTTP API.",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        alias="REQUEST_TIMEOUT_SECONDS",
        gt=0,
        description="Per-request timeout enforced by the HTTP transport.",
    )
    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        alias="CACHE_TTL_SECONDS",
        gt=0,
        description="Lifetime of cached recipe list and detail entries.",
    )
    fetch_concurrency_limit: int = Field(
        default=DEFAULT_FETCH_CONCURRENCY_LIMIT,
        alias="FETCH_CONCURRENCY_LIMIT",
        ge=1,
        le=64,
        description="Maximum number of concurrent recipe fetches while expanding favorites.",
    )
    storage_backend: StorageBackend = Field(
        default="file",
        alias="STORAGE_BACKEND",
        description="Durable storage used for favorites and the persistent cache tier.",
    )
    storage_path: Path = Field(
        default=DEFAULT_STORAGE_PATH,
        alias="STORAGE_PATH",
        description="JSON file backing the ``file`` storage backend.",
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string consumed by the ``redis`` storage backend.",
    )
    user_identifier: str | None = Field(
        default=None,
        alias="USER_IDENTIFIER",
        description=(
            "Fixed user identifier sent with favorite toggles. When unset a"
            " generated identifier is persisted in durable storage."
        ),
    )
    favorites_toggle_path: str = Field(
        default=DEFAULT_FAVORITES_TOGGLE_PATH,
        alias="FAVORITES_TOGGLE_PATH",
        description="API path of the favorites toggle endpoint.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        cleaned = value.strip().rstrip("/")
        if not cleaned:
            raise ValueError("API_BASE_URL must not be blank")
        return cleaned

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_api_base_url and self.api_base_url == DEFAULT_API_BASE_URL:
            warnings.append(
                "API_BASE_URL is not set - requests will target "
                f"{DEFAULT_API_BASE_URL}"
            )

        if self.storage_backend == "memory":
            warnings.append(
                "STORAGE_BACKEND is 'memory' - favorites and cached recipes "
                "will be lost when the process exits"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> CatalogSettings:
    """Return a cached instance of :class:`CatalogSettings`."""

    return CatalogSettings()


__all__ = [
    "CatalogSettings",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_FAVORITES_TOGGLE_PATH",
    "DEFAULT_FETCH_CONCURRENCY_LIMIT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_STORAGE_PATH",
    "StorageBackend",
    "get_settings",
]

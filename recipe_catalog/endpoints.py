"""Paths of the recipe catalog HTTP API."""

from __future__ import annotations

from urllib.parse import quote

RECIPES_PATH = "/api/v1/recipes"


def recipe_path(recipe_id: str) -> str:
    return f"{RECIPES_PATH}/{quote(str(recipe_id), safe='')}"


__all__ = ["RECIPES_PATH", "recipe_path"]

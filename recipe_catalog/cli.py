"""
Command line access to the recipe catalog.

Usage:
    recipe-catalog list --category makanan --limit 10
    recipe-catalog show 42
    recipe-catalog favorites
    recipe-catalog toggle 42
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, NoReturn, TypeVar

import click
from rich.console import Console
from rich.table import Table

from recipe_catalog.client import RecipeCatalogClient, create_client
from recipe_catalog.errors import RecipeCatalogError
from recipe_catalog.schemas.recipe import RecipeRecord
from recipe_catalog.settings import CatalogSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def configure_logging(settings: CatalogSettings) -> None:
    logging.basicConfig(
        level=settings.log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _run(
    settings: CatalogSettings,
    operation: Callable[[RecipeCatalogClient], Awaitable[T]],
) -> T:
    async def _session() -> T:
        client = await create_client(settings)
        async with client:
            return await operation(client)

    return asyncio.run(_session())


def _recipe_table(title: str, recipes: list[RecipeRecord]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Difficulty")
    table.add_column("Rating", justify="right")
    for recipe in recipes:
        rating = f"{recipe.average_rating:.1f}" if recipe.average_rating is not None else "-"
        table.add_row(recipe.id, recipe.name or "-", recipe.difficulty or "-", rating)
    return table


def _describe(exc: RecipeCatalogError) -> str:
    return f"{exc.message} ({exc.error_type.value})"


def _fail(console: Console, message: str) -> NoReturn:
    console.print(f"[red]✗ {message}[/red]")
    raise SystemExit(1)


@click.group()
@click.option("--api-url", default=None, help="Override API_BASE_URL for this invocation.")
@click.option(
    "--storage",
    type=click.Choice(["memory", "file", "redis"]),
    default=None,
    help="Override STORAGE_BACKEND for this invocation.",
)
@click.option("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG).")
@click.pass_context
def main(
    ctx: click.Context,
    api_url: str | None,
    storage: str | None,
    log_level: str | None,
) -> None:
    """Browse recipes and manage favorites."""

    overrides: dict[str, Any] = {}
    if api_url:
        overrides["api_base_url"] = api_url
    if storage:
        overrides["storage_backend"] = storage
    if log_level:
        overrides["log_level"] = log_level

    settings = CatalogSettings(**overrides)
    configure_logging(settings)
    ctx.obj = settings


@main.command("list")
@click.option("--page", type=click.IntRange(min=1), default=None)
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.option("--category", default=None, help="makanan | minuman")
@click.option("--difficulty", default=None, help="mudah | sedang | sulit")
@click.option("--search", default=None, help="Search in name/description.")
@click.option("--sort-by", "sort_by", default=None)
@click.option("--order", type=click.Choice(["asc", "desc"]), default=None)
@click.pass_obj
def list_recipes(settings: CatalogSettings, **params: Any) -> None:
    """List recipes matching the given filters."""

    console = Console()
    try:
        response = _run(settings, lambda client: client.get_recipes(params))
    except RecipeCatalogError as exc:
        _fail(console, _describe(exc))

    if not response.success:
        _fail(console, response.message or "Failed to fetch recipes")

    console.print(_recipe_table("Recipes", response.data))
    if response.pagination is not None and response.pagination.total is not None:
        console.print(
            f"Page {response.pagination.page or 1} of "
            f"{response.pagination.total_pages or 1} ({response.pagination.total} recipes)"
        )
    if response.cached:
        console.print("[dim]served from cache[/dim]")


@main.command("show")
@click.argument("recipe_id")
@click.pass_obj
def show_recipe(settings: CatalogSettings, recipe_id: str) -> None:
    """Show a single recipe with its ingredients and steps."""

    console = Console()
    try:
        response = _run(settings, lambda client: client.get_recipe(recipe_id))
    except RecipeCatalogError as exc:
        _fail(console, _describe(exc))

    if not response.success:
        _fail(console, response.message or f"Recipe {recipe_id} not found")

    recipe: RecipeRecord = response.data
    console.print(f"[bold]{recipe.name or recipe.id}[/bold]")
    if recipe.description:
        console.print(recipe.description)
    console.print(
        f"Difficulty: {recipe.difficulty or '-'}  Servings: {recipe.servings or '-'}  "
        f"Reviews: {recipe.review_count}"
    )
    if recipe.ingredients:
        console.print("\n[bold]Ingredients[/bold]")
        for ingredient in recipe.ingredients:
            amount = " ".join(
                str(part) for part in (ingredient.quantity, ingredient.unit) if part is not None
            )
            console.print(f"  • {ingredient.name or '-'}{f' ({amount})' if amount else ''}")
    if recipe.steps:
        console.print("\n[bold]Steps[/bold]")
        for position, step in enumerate(recipe.steps, start=1):
            console.print(f"  {step.step_number or position}. {step.instruction or ''}")


@main.command("favorites")
@click.pass_obj
def list_favorites(settings: CatalogSettings) -> None:
    """List favorited recipes."""

    console = Console()
    try:
        favorites = _run(settings, lambda client: client.get_favorites())
    except RecipeCatalogError as exc:
        _fail(console, _describe(exc))

    if not favorites:
        console.print("[yellow]No favorite recipes yet.[/yellow]")
        return
    recipes = [favorite.recipe for favorite in favorites if favorite.recipe is not None]
    console.print(_recipe_table(f"Favorite recipes ({len(recipes)})", recipes))


@main.command("toggle")
@click.argument("recipe_id")
@click.pass_obj
def toggle_favorite(settings: CatalogSettings, recipe_id: str) -> None:
    """Add or remove a recipe from favorites."""

    console = Console()
    result = _run(settings, lambda client: client.toggle_favorite(recipe_id))
    if result is None:
        _fail(console, f"Could not toggle favorite {recipe_id}")
    if result:
        console.print(f"[green]✓ Recipe {recipe_id} added to favorites[/green]")
    else:
        console.print(f"[green]✓ Recipe {recipe_id} removed from favorites[/green]")


if __name__ == "__main__":
    main()

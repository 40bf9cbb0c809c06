"""Recipe catalog services split by responsibility.

* :mod:`.caching`: two-tier list cache and single-entry detail cache.
* :mod:`.favorites_store`: durable favorites list.
* :mod:`.fetch_orchestrator`: cache-then-network recipe resolution.
* :mod:`.toggle_coordinator`: server-first favorite toggling with local fallback.
* :mod:`.recipe_service`: list queries and recipe mutations.
* :mod:`.user_identity`: anonymous user identifier provisioning.
"""

from .caching import CacheEntry, RecipeCache, RecipeDetailCache
from .favorites_store import FavoritesStore
from .fetch_orchestrator import RecipeFetchOrchestrator
from .recipe_service import RecipeService
from .toggle_coordinator import ToggleCoordinator
from .user_identity import UserIdentity

__all__ = [
    "CacheEntry",
    "FavoritesStore",
    "RecipeCache",
    "RecipeDetailCache",
    "RecipeFetchOrchestrator",
    "RecipeService",
    "ToggleCoordinator",
    "UserIdentity",
]

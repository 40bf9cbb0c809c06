"""Favorite toggling with the server as authority and local storage as fallback.

Each call asks the favorites toggle endpoint first and decodes its answer into
a :data:`~recipe_catalog.schemas.favorites.ToggleOutcome`:

* ``MembershipBoolean``: the stored list is reconciled to match and the
  boolean is returned.
* ``FullList``: the stored list is replaced wholesale and ``True`` is
  returned.
* ``Unrecognized`` (including ``success=false``) or a transport failure: the
  recipe is flipped locally and the new membership is returned.

Any other failure yields ``None`` and leaves storage at its last successful
write.
"""

from __future__ import annotations

import logging

from recipe_catalog.errors import StorageUnavailableError, TransportError
from recipe_catalog.schemas.favorites import (
    FullList,
    MembershipBoolean,
    ToggleOutcome,
    Unrecognized,
    decode_toggle_response,
)
from recipe_catalog.services.favorites_store import FavoritesStore
from recipe_catalog.services.user_identity import UserIdentity
from recipe_catalog.settings import DEFAULT_FAVORITES_TOGGLE_PATH
from recipe_catalog.transport import Transport

logger = logging.getLogger(__name__)


class ToggleCoordinator:
    """Sole writer of the favorites list."""

    def __init__(
        self,
        transport: Transport,
        store: FavoritesStore,
        identity: UserIdentity,
        *,
        toggle_path: str = DEFAULT_FAVORITES_TOGGLE_PATH,
    ) -> None:
        self._transport = transport
        self._store = store
        self._identity = identity
        self._toggle_path = toggle_path

    async def toggle(self, recipe_id: str) -> bool | None:
        """Flip the favorite state of ``recipe_id``.

        Returns ``True`` when the recipe is now a favorite, ``False`` when it no
        longer is, and ``None`` when the state could not be determined.
        """

        try:
            outcome = await self._request_server_toggle(recipe_id)

            if isinstance(outcome, MembershipBoolean):
                await self._reconcile(recipe_id, outcome.is_favorited)
                return outcome.is_favorited

            if isinstance(outcome, FullList):
                await self._replace(outcome.recipe_ids)
                return True

            logger.warning(
                "Server toggle for %s unusable (%s); toggling locally", recipe_id, outcome.reason
            )
            return await self._toggle_locally(recipe_id)
        except Exception:  # noqa: BLE001 - every failure maps to an unknown state
            logger.exception("Failed to toggle favorite %s", recipe_id)
            return None

    async def _request_server_toggle(self, recipe_id: str) -> ToggleOutcome:
        user_identifier = await self._identity.get()
        try:
            response = await self._transport.post(
                self._toggle_path,
                {"recipe_id": recipe_id, "user_identifier": user_identifier},
            )
        except TransportError as exc:
            return Unrecognized(reason=f"transport failure: {exc}")
        return decode_toggle_response(response)

    async def _reconcile(self, recipe_id: str, is_favorited: bool) -> None:
        # The server already applied the toggle; a local write failure only
        # leaves the fallback list stale.
        try:
            if is_favorited:
                await self._store.add(recipe_id)
            else:
                await self._store.remove(recipe_id)
        except StorageUnavailableError as exc:
            logger.warning("Could not reconcile favorites after server toggle: %s", exc)

    async def _replace(self, recipe_ids: tuple[str, ...]) -> None:
        try:
            await self._store.write(recipe_ids)
        except StorageUnavailableError as exc:
            logger.warning("Could not store favorites returned by the server: %s", exc)

    async def _toggle_locally(self, recipe_id: str) -> bool:
        if await self._store.contains(recipe_id):
            await self._store.remove(recipe_id)
            return False
        await self._store.add(recipe_id)
        return True


__all__ = ["ToggleCoordinator"]

"""
Favorites Store

Per-user favorite exercise ids backed by the remote store. Toggles are
applied optimistically to a tentative map, then confirmed or reverted once
the remote write settles. The remote store wins on conflict.
"""

from __future__ import annotations

from dailyfocus.core.exceptions import NotFoundError, PersistenceConflictError, ValidationError
from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import track_favorite_toggle
from dailyfocus.repositories.favorite_repository import FavoriteRepository
from dailyfocus.services.exercise_catalog import ExerciseCatalog


logger = get_logger(__name__)

FavoriteKey = tuple[str, str]


class FavoritesStore:
    def __init__(self, repository: FavoriteRepository, catalog: ExerciseCatalog | None = None):
        self._repository = repository
        self._catalog = catalog
        self._confirmed: dict[FavoriteKey, bool] = {}
        self._tentative: dict[FavoriteKey, bool] = {}
        # key -> write version of the latest toggle still awaiting the remote store
        self._pending: dict[FavoriteKey, int] = {}
        self._versions: dict[FavoriteKey, int] = {}

    async def get_favorite_ids(self, user_id: str) -> list[str]:
        """Return the user's favorite ids as confirmed by the remote store.

        A failed read degrades to the favorites confirmed so far in this
        process rather than raising.
        """
        if not user_id:
            return []
        try:
            favorite_ids = await self._repository.list_favorite_ids(user_id)
        except Exception as e:
            logger.warning("favorites_read_failed", user_id=user_id, error=str(e))
            return [
                exercise_id
                for (owner, exercise_id), is_favorite in self._confirmed.items()
                if owner == user_id and is_favorite
            ]

        for key in [k for k in self._confirmed if k[0] == user_id]:
            del self._confirmed[key]
        for exercise_id in favorite_ids:
            self._confirmed[(user_id, exercise_id)] = True
        logger.debug("favorites_loaded", user_id=user_id, count=len(favorite_ids))
        return favorite_ids

    def get_favorite_status(self, user_id: str, exercise_id: str, default: bool = False) -> bool:
        key = (user_id, exercise_id)
        if key in self._tentative:
            return self._tentative[key]
        return self._confirmed.get(key, default)

    def is_pending(self, user_id: str, exercise_id: str) -> bool:
        return (user_id, exercise_id) in self._pending

    def set_initial_status(self, user_id: str, exercise_id: str, is_favorite: bool) -> None:
        self._confirmed[(user_id, exercise_id)] = is_favorite

    def revert(self, user_id: str, exercise_id: str, state: bool) -> None:
        """Drop the tentative value and pin the confirmed one to `state`."""
        key = (user_id, exercise_id)
        self._tentative.pop(key, None)
        self._pending.pop(key, None)
        self._confirmed[key] = state

    async def toggle(self, user_id: str, exercise_id: str, current_state: bool) -> bool:
        """Flip the favorite flag and return the new state.

        Raises:
            PersistenceConflictError: the remote write failed; local state has
                been reverted to `current_state`.
        """
        if not user_id:
            raise ValidationError("user_id", "user id is required")
        if not exercise_id:
            raise ValidationError("exercise_id", "exercise id is required")
        if self._catalog is not None and exercise_id not in self._catalog:
            raise NotFoundError("exercise", details={"exercise_id": exercise_id})

        key = (user_id, exercise_id)
        new_state = not current_state
        version = self._versions.get(key, 0) + 1
        self._versions[key] = version
        self._tentative[key] = new_state
        self._pending[key] = version

        try:
            await self._repository.set_favorite(user_id, exercise_id, new_state)
        except Exception as e:
            # A newer toggle on the same key owns the tentative slot now
            if self._versions.get(key) == version:
                self.revert(user_id, exercise_id, current_state)
            track_favorite_toggle("reverted")
            logger.error(
                "favorite_write_failed",
                user_id=user_id,
                exercise_id=exercise_id,
                reverted_to=current_state,
                error=str(e),
            )
            raise PersistenceConflictError(exercise_id, current_state) from e

        if self._versions.get(key) == version:
            self._tentative.pop(key, None)
            self._pending.pop(key, None)
            self._confirmed[key] = new_state
        track_favorite_toggle("confirmed")
        logger.info("favorite_toggled", user_id=user_id, exercise_id=exercise_id, is_favorite=new_state)
        return new_state

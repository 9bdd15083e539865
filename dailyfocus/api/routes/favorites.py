"""API routes for favorite exercises."""
from fastapi import APIRouter, Depends

from dailyfocus.api.routes.dependencies import get_current_user_id, get_favorites_store
from dailyfocus.core.logging import get_logger
from dailyfocus.schemas.favorites import FavoriteListResponse, FavoriteToggleRequest, FavoriteToggleResponse
from dailyfocus.services.favorites import FavoritesStore

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=FavoriteListResponse)
async def list_favorites(
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    """List the current user's favorite exercise ids."""
    exercise_ids = await store.get_favorite_ids(user_id)
    return FavoriteListResponse(exercise_ids=exercise_ids)


@router.post("/{exercise_id}/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    exercise_id: str,
    body: FavoriteToggleRequest,
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    """Flip a favorite flag.

    A failed write answers 409 with the reverted state in the error details.
    """
    is_favorite = await store.toggle(user_id, exercise_id, body.current_state)
    return FavoriteToggleResponse(exercise_id=exercise_id, is_favorite=is_favorite)

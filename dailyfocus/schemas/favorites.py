"""Schemas for favorite exercises."""
from pydantic import BaseModel


class FavoriteListResponse(BaseModel):
    exercise_ids: list[str]


class FavoriteToggleRequest(BaseModel):
    current_state: bool


class FavoriteToggleResponse(BaseModel):
    exercise_id: str
    is_favorite: bool

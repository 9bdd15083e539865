"""Pydantic request and response schemas."""
from dailyfocus.schemas.daily_focus import (
    CompletionSourceErrorResponse,
    CompletionStatusResponse,
    DailyFocusResponse,
    ExerciseResponse,
    RecommendationResponse,
)
from dailyfocus.schemas.favorites import (
    FavoriteListResponse,
    FavoriteToggleRequest,
    FavoriteToggleResponse,
)

__all__ = [
    "CompletionSourceErrorResponse",
    "CompletionStatusResponse",
    "DailyFocusResponse",
    "ExerciseResponse",
    "RecommendationResponse",
    "FavoriteListResponse",
    "FavoriteToggleRequest",
    "FavoriteToggleResponse",
]

"""Shared dependencies for API routes."""
from fastapi import Header, Request

from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import ValidationError
from dailyfocus.services.completion_aggregator import CompletionAggregator
from dailyfocus.services.favorites import FavoritesStore
from dailyfocus.services.recommendation_cache import RecommendationCache


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-ID"),
) -> str:
    """Resolve the calling user.

    Falls back to default_user_id for header-less development calls.

    Raises:
        ValidationError: No header and no default user configured
    """
    user_id = x_user_id or get_settings().default_user_id
    if not user_id:
        raise ValidationError("user_id", "X-User-ID header is required")
    return user_id


async def get_timezone(
    x_timezone: str | None = Header(None, alias="X-Timezone"),
) -> str:
    return x_timezone or get_settings().default_timezone


def get_recommendation_cache(request: Request) -> RecommendationCache:
    return request.app.state.recommendation_cache


def get_completion_aggregator(request: Request) -> CompletionAggregator:
    return request.app.state.completion_aggregator


def get_favorites_store(request: Request) -> FavoritesStore:
    return request.app.state.favorites_store

"""API routes for daily focus recommendations and completion status."""
from fastapi import APIRouter, Depends, Query

from dailyfocus.api.routes.dependencies import (
    get_completion_aggregator,
    get_current_user_id,
    get_recommendation_cache,
    get_timezone,
)
from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import ValidationError
from dailyfocus.core.logging import get_logger
from dailyfocus.schemas.daily_focus import CompletionStatusResponse, DailyFocusResponse
from dailyfocus.services.completion_aggregator import CompletionAggregator
from dailyfocus.services.recommendation_cache import RecommendationCache

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=DailyFocusResponse)
async def get_daily_focus(
    count: int | None = Query(None, description="Number of recommendations"),
    force_refresh: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    tz_name: str = Depends(get_timezone),
    cache: RecommendationCache = Depends(get_recommendation_cache),
):
    """Today's recommendations, served from the per-day cache when valid."""
    max_count = get_settings().recommendation_max_count
    if count is not None and count > max_count:
        raise ValidationError("count", f"must be at most {max_count}", {"count": count, "max_count": max_count})
    result = await cache.get_or_generate(user_id, count=count, force_refresh=force_refresh, tz_name=tz_name)
    return DailyFocusResponse.from_result(result)


@router.post("/invalidate", status_code=204)
async def invalidate_daily_focus(
    user_id: str = Depends(get_current_user_id),
    cache: RecommendationCache = Depends(get_recommendation_cache),
):
    """Force the next daily focus request to regenerate, e.g. after an exercise is completed."""
    cache.invalidate(user_id)


@router.get("/completion", response_model=CompletionStatusResponse)
async def get_completion_status(
    ids: list[str] = Query([]),
    user_id: str = Depends(get_current_user_id),
    tz_name: str = Depends(get_timezone),
    aggregator: CompletionAggregator = Depends(get_completion_aggregator),
):
    """Completed-today flags for source ids, exercise ids or categories."""
    report = await aggregator.get_completion_status(user_id, ids, tz_name=tz_name)
    if report.errors:
        logger.info("completion_status_partial", user_id=user_id, failed_sources=sorted(report.errors))
    return CompletionStatusResponse.from_report(report)

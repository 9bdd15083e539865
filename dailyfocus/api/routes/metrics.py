from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import get_metrics


logger = get_logger(__name__)
router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    try:
        metrics_data = get_metrics()
    except Exception as e:
        logger.error("metrics_generation_failed", exc_info=e)
        raise HTTPException(status_code=500, detail="Failed to generate metrics")
    return Response(
        content=metrics_data,
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )

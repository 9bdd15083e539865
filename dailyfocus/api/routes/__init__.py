"""API routes module."""
from dailyfocus.api.routes.daily_focus import router as daily_focus_router
from dailyfocus.api.routes.favorites import router as favorites_router
from dailyfocus.api.routes.metrics import router as metrics_router

__all__ = [
    "daily_focus_router",
    "favorites_router",
    "metrics_router",
]

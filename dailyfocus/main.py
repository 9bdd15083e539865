"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dailyfocus import __version__
from dailyfocus.config.daily_focus_config_loader import get_daily_focus_config
from dailyfocus.config.settings import get_settings
from dailyfocus.core.error_handlers import domain_error_handler
from dailyfocus.core.exceptions import DomainError
from dailyfocus.core.logging import configure_logging, get_logger
from dailyfocus.core.metrics import set_app_info
from dailyfocus.db.database import async_session_maker, close_engine, init_db
from dailyfocus.middleware import MetricsMiddleware, RequestIDMiddleware
from dailyfocus.repositories import CompletionLogRepository, FavoriteRepository
from dailyfocus.services.ai_scoring import LLMRecommendationScorer, RecommendationScorer
from dailyfocus.services.completion_aggregator import CompletionAggregator
from dailyfocus.services.exercise_catalog import get_exercise_catalog
from dailyfocus.services.favorites import FavoritesStore
from dailyfocus.services.recommendation_cache import RecommendationCache
from dailyfocus.services.recommendation_generator import RecommendationGenerator

logger = get_logger(__name__)


def init_services(
    app: FastAPI,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    scorer: RecommendationScorer | None = None,
) -> None:
    """Build the daily focus services and attach them to app.state.

    Without an explicit scorer, the LLM scorer is used when an API key is
    configured; otherwise recommendations come from the fallback pool only.
    """
    settings = get_settings()
    session_maker = session_maker or async_session_maker
    catalog = get_exercise_catalog()
    config = get_daily_focus_config()

    if scorer is None and settings.openai_api_key:
        from dailyfocus.llm import get_llm_provider

        scorer = LLMRecommendationScorer(get_llm_provider(), catalog, model=settings.openai_model)

    favorites_store = FavoritesStore(FavoriteRepository(session_maker), catalog)
    aggregator = CompletionAggregator(CompletionLogRepository(session_maker), config, catalog)
    generator = RecommendationGenerator(
        catalog,
        config,
        scorer=scorer,
        favorites=favorites_store,
        activity=aggregator,
    )

    app.state.catalog = catalog
    app.state.favorites_store = favorites_store
    app.state.recommendation_generator = generator
    app.state.recommendation_cache = RecommendationCache(generator)
    app.state.completion_aggregator = aggregator
    logger.info("services_initialized", ai_scoring=scorer is not None, catalog_size=len(catalog))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging()
    set_app_info(__version__, "development" if settings.debug else "production")

    # Startup: Initialize database
    await init_db()
    init_services(app)

    yield
    # Shutdown: Cleanup resources
    from dailyfocus.llm import cleanup_llm_provider
    await cleanup_llm_provider()

    try:
        await close_engine()
    except Exception as e:
        logger.warning("engine_close_failed", error=str(e))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Daily focus recommendations and completion tracking",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)
    # Added last so it runs first and request_id is set for the metrics middleware
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    # LLM health check
    @app.get("/health/llm")
    async def llm_health_check():
        """Check LLM provider availability."""
        from dailyfocus.llm import get_llm_provider

        provider = get_llm_provider()
        is_healthy = await provider.health_check()

        return {
            "status": "healthy" if is_healthy else "unhealthy",
            "provider": settings.llm_provider,
            "model": settings.openai_model,
        }

    # Import and include routers
    from dailyfocus.api.routes import daily_focus_router, favorites_router, metrics_router

    app.include_router(daily_focus_router, prefix="/daily-focus", tags=["Daily Focus"])
    app.include_router(favorites_router, prefix="/favorites", tags=["Favorites"])
    app.include_router(metrics_router, tags=["Metrics"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dailyfocus.main:app", host="0.0.0.0", port=8000, reload=True)

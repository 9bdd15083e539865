"""Daily focus domain services."""
from dailyfocus.services.completion_aggregator import CompletionAggregator, CompletionReport
from dailyfocus.services.exercise_catalog import ExerciseCatalog, ExerciseDefinition, get_exercise_catalog
from dailyfocus.services.favorites import FavoritesStore
from dailyfocus.services.recommendation_cache import CacheState, RecommendationCache, RecommendationResult
from dailyfocus.services.recommendation_generator import (
    DailyFocusPlan,
    FallbackSource,
    Provenance,
    RecommendationEntry,
    RecommendationGenerator,
    explain,
)

__all__ = [
    "CompletionAggregator",
    "CompletionReport",
    "ExerciseCatalog",
    "ExerciseDefinition",
    "get_exercise_catalog",
    "FavoritesStore",
    "CacheState",
    "RecommendationCache",
    "RecommendationResult",
    "DailyFocusPlan",
    "FallbackSource",
    "Provenance",
    "RecommendationEntry",
    "RecommendationGenerator",
    "explain",
]

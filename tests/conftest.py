"""Shared fixtures for the daily focus test suite."""
import asyncio
import random
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dailyfocus.config.daily_focus_config_loader import (
    DailyFocusConfig,
    DailyFocusConfigLoader,
    TimeBucketConfig,
)
from dailyfocus.db.database import init_db
from dailyfocus.services.ai_scoring import ScoredExercise, ScoringResponse
from dailyfocus.services.exercise_catalog import ExerciseCatalog, ExerciseDefinition


MORNING = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


class MutableClock:
    """Injectable now_fn whose time can be moved forward by tests."""

    def __init__(self, now: datetime = MORNING):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeScorer:
    """RecommendationScorer returning canned responses or raising."""

    def __init__(self, response: ScoringResponse | None = None, error: Exception | None = None, delay: float = 0):
        self.response = response or ScoringResponse(recommendations=[])
        self.error = error
        self.delay = delay
        self.requests = []

    async def score(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


class FakeFavorites:
    def __init__(self, favorite_ids=None, error: Exception | None = None):
        self.favorite_ids = list(favorite_ids or [])
        self.error = error
        self.calls = 0

    async def get_favorite_ids(self, user_id: str) -> list[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.favorite_ids)


def scored(*exercise_ids: str, **kwargs) -> ScoringResponse:
    """Build a ScoringResponse ranking the given ids in order."""
    return ScoringResponse(
        recommendations=[
            ScoredExercise(exercise_id=exercise_id, priority_score=90 - i, reasoning=f"because {exercise_id}")
            for i, exercise_id in enumerate(exercise_ids)
        ],
        **kwargs,
    )


def make_exercise(exercise_id: str, category: str = "Mindfulness") -> ExerciseDefinition:
    return ExerciseDefinition(
        id=exercise_id,
        title=exercise_id.upper(),
        category=category,
        description=f"Exercise {exercise_id}",
    )


def make_config(morning=(), afternoon=(), evening=(), night=(), completion_sources=()) -> DailyFocusConfig:
    return DailyFocusConfig(
        version="test",
        time_buckets=(
            TimeBucketConfig("night", 0, 6, tuple(night)),
            TimeBucketConfig("morning", 6, 12, tuple(morning)),
            TimeBucketConfig("afternoon", 12, 18, tuple(afternoon)),
            TimeBucketConfig("evening", 18, 24, tuple(evening)),
        ),
        completion_sources=tuple(completion_sources),
    )


@pytest.fixture
def small_catalog():
    """Five-exercise catalog A..E."""
    return ExerciseCatalog([make_exercise(exercise_id) for exercise_id in "ABCDE"])


@pytest.fixture
def small_config():
    """Morning bucket lists B then A."""
    return make_config(morning=("B", "A"), afternoon=("D",), evening=("E",), night=("C",))


@pytest.fixture
def catalog():
    return ExerciseCatalog()


@pytest.fixture
def daily_focus_config():
    return DailyFocusConfigLoader().config


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'dailyfocus_test.db'}")
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

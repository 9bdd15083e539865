"""
Recommendation Generator

Produces today's ranked, de-duplicated list of exercises for a user. The AI
scorer is tried first; anything it cannot supply is filled from a
deterministic fallback pool of favorites, time-of-day picks and the rest of
the catalog. Generation never raises for scoring or favorites failures.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Protocol

from dailyfocus.config.daily_focus_config_loader import DailyFocusConfig, check_catalog_references
from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import CatalogMismatchError, ScoringUnavailableError, ValidationError
from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import track_catalog_mismatch, track_generation
from dailyfocus.services.ai_scoring import RecommendationScorer, ScoredExercise, ScoringRequest, ScoringResponse
from dailyfocus.services.exercise_catalog import ExerciseCatalog, ExerciseDefinition
from dailyfocus.utils.datetime_utils import local_now, utcnow
from dailyfocus.utils.selection import collect_unique, shuffled


logger = get_logger(__name__)

DEFAULT_PRIORITY_SCORE = 75.0
DEFAULT_AI_REASONING = "Recommended based on your current context"


class Provenance(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"


class FallbackSource(str, Enum):
    """Segment of the fallback pool an entry was taken from."""
    FAVORITE = "favorite"
    TIME_OF_DAY = "time_of_day"
    CATALOG = "catalog"


@dataclass
class RecommendationEntry:
    exercise: ExerciseDefinition
    provenance: Provenance
    priority_score: float | None = None
    reasoning: str | None = None
    personalization_note: str | None = None
    expected_benefit: str | None = None
    fallback_source: FallbackSource | None = None

    @property
    def exercise_id(self) -> str:
        return self.exercise.id


@dataclass
class DailyFocusPlan:
    """Entries plus the coaching text that came with an AI response."""
    entries: list[RecommendationEntry] = field(default_factory=list)
    focus_theme: str | None = None
    coach_note: str | None = None

    @property
    def ai_powered(self) -> bool:
        return any(entry.provenance == Provenance.AI for entry in self.entries)


def explain(entry: RecommendationEntry) -> str:
    """Human-readable reason for showing this entry."""
    if entry.reasoning:
        return entry.reasoning
    return f"{entry.exercise.description} - Perfect for your current focus needs."


class FavoritesSource(Protocol):
    async def get_favorite_ids(self, user_id: str) -> list[str]:
        ...


class ActivitySource(Protocol):
    async def get_recent_activity(self, user_id: str, days: int, tz_name: str | None = None) -> dict[str, int]:
        ...


class RecommendationGenerator:
    """
    Builds daily focus recommendations from the AI scorer and the fallback pool.

    AI entries keep the scorer's rank order. Fallback entries follow the pool
    order: favorites (shuffled), the current hour bucket (listed order), then
    the remaining catalog (shuffled).
    """

    def __init__(
        self,
        catalog: ExerciseCatalog,
        config: DailyFocusConfig,
        scorer: RecommendationScorer | None = None,
        favorites: FavoritesSource | None = None,
        activity: ActivitySource | None = None,
        timeout: float | None = None,
        history_days: int | None = None,
        default_tz: str | None = None,
        strict_catalog_validation: bool | None = None,
        now_fn: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
    ):
        settings = get_settings()
        self._catalog = catalog
        self._config = config
        self._scorer = scorer
        self._favorites = favorites
        self._activity = activity
        self._timeout = settings.recommendation_timeout if timeout is None else timeout
        self._history_days = settings.recommendation_history_days if history_days is None else history_days
        self._default_tz = default_tz or settings.default_timezone
        self._now_fn = now_fn
        self._rng = rng or random.Random()

        strict = settings.strict_catalog_validation if strict_catalog_validation is None else strict_catalog_validation
        self.unknown_bucket_ids = check_catalog_references(config, catalog, strict=strict)

    def _validate_count(self, count: int) -> int:
        if count < 1:
            raise ValidationError("count", "must be at least 1", {"count": count})
        return count

    async def generate(
        self,
        user_id: str | None,
        count: int,
        timeout: float | None = None,
        tz_name: str | None = None,
    ) -> list[RecommendationEntry]:
        plan = await self.generate_plan(user_id, count, timeout=timeout, tz_name=tz_name)
        return plan.entries

    async def generate_plan(
        self,
        user_id: str | None,
        count: int,
        timeout: float | None = None,
        tz_name: str | None = None,
    ) -> DailyFocusPlan:
        """
        Generate today's plan for a user.

        Args:
            user_id: User to personalize for. Without one, a shuffled catalog
                sample is returned and neither the scorer nor favorites are hit.
            count: Number of entries wanted.
            timeout: Seconds allowed for the AI scoring call.
            tz_name: IANA timezone used for the hour-of-day bucket and the
                recent activity window.

        Returns:
            DailyFocusPlan with exactly `count` distinct exercises, fewer only
            when the catalog itself is smaller.

        Raises:
            ValidationError: count is below 1.
        """
        count = self._validate_count(count)

        if not user_id:
            entries = self.fallback(count)
            track_generation("fallback")
            logger.debug("recommendations_generated_anonymous", count=len(entries))
            return DailyFocusPlan(entries=entries)

        tz_name = tz_name or self._default_tz
        local_hour = local_now(tz_name, self._now_fn()).hour
        response, favorite_ids = await asyncio.gather(
            self._score(user_id, count, local_hour, tz_name, self._timeout if timeout is None else timeout),
            self._load_favorites(user_id),
        )

        seen: set[str] = set()
        entries = self._entries_from_response(user_id, response, count, seen) if response else []
        ai_count = len(entries)
        if ai_count < count:
            entries.extend(
                self.fallback(count - ai_count, favorite_ids=favorite_ids, local_hour=local_hour, seen=seen)
            )

        if ai_count == 0:
            outcome = "fallback"
        elif ai_count < len(entries):
            outcome = "partial"
        else:
            outcome = "ai"
        track_generation(outcome)
        logger.info(
            "recommendations_generated",
            user_id=user_id,
            requested=count,
            returned=len(entries),
            ai_entries=ai_count,
            outcome=outcome,
        )

        if ai_count == 0:
            return DailyFocusPlan(entries=entries)
        return DailyFocusPlan(
            entries=entries,
            focus_theme=response.focus_theme,
            coach_note=response.coach_note,
        )

    def build_fallback_pool(
        self,
        favorite_ids: Iterable[str] = (),
        local_hour: int | None = None,
    ) -> list[tuple[str, FallbackSource]]:
        """Ordered candidate ids tagged with their pool segment.

        Ids may repeat across segments; the walk keeps the first occurrence.
        """
        pool = [(exercise_id, FallbackSource.FAVORITE) for exercise_id in shuffled(favorite_ids, self._rng)]
        if local_hour is not None:
            bucket = self._config.bucket_for_hour(local_hour)
            pool.extend((exercise_id, FallbackSource.TIME_OF_DAY) for exercise_id in bucket.exercise_ids)
        pool.extend(
            (exercise_id, FallbackSource.CATALOG) for exercise_id in shuffled(self._catalog.ids(), self._rng)
        )
        return pool

    def fallback(
        self,
        count: int,
        favorite_ids: Iterable[str] = (),
        local_hour: int | None = None,
        seen: set[str] | None = None,
    ) -> list[RecommendationEntry]:
        """Walk the fallback pool until `count` unseen, resolvable ids are picked."""
        pool = self.build_fallback_pool(favorite_ids, local_hour)
        segments: dict[str, FallbackSource] = {}
        for exercise_id, segment in pool:
            segments.setdefault(exercise_id, segment)

        reasoning = self._config.fallback_reasoning
        picked = collect_unique((exercise_id for exercise_id, _ in pool), self._catalog.get, count, seen)
        return [
            RecommendationEntry(
                exercise=exercise,
                provenance=Provenance.FALLBACK,
                reasoning=getattr(reasoning, segments[exercise_id].value),
                fallback_source=segments[exercise_id],
            )
            for exercise_id, exercise in picked
        ]

    async def _score(
        self,
        user_id: str,
        count: int,
        local_hour: int,
        tz_name: str,
        timeout: float,
    ) -> ScoringResponse | None:
        if self._scorer is None:
            return None

        try:
            response = await asyncio.wait_for(
                self._request_score(user_id, count, local_hour, tz_name),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("ai_scoring_timeout", user_id=user_id, timeout=timeout)
            return None
        except ScoringUnavailableError as e:
            logger.warning("ai_scoring_unavailable", user_id=user_id, code=e.code, error=e.message)
            return None
        except Exception as e:
            logger.warning("ai_scoring_failed", user_id=user_id, error=str(e), exc_info=True)
            return None

        if not response.success:
            logger.warning("ai_scoring_unsuccessful", user_id=user_id)
            return None
        return response

    async def _request_score(self, user_id: str, count: int, local_hour: int, tz_name: str) -> ScoringResponse:
        request = ScoringRequest(
            user_id=user_id,
            requested_count=count,
            local_hour=local_hour,
            recent_activity=await self._load_activity(user_id, tz_name),
            history_days=self._history_days,
        )
        return await self._scorer.score(request)

    async def _load_activity(self, user_id: str, tz_name: str) -> dict[str, int]:
        if self._activity is None:
            return {}
        try:
            return await self._activity.get_recent_activity(user_id, self._history_days, tz_name=tz_name)
        except Exception as e:
            logger.warning("recent_activity_unavailable", user_id=user_id, error=str(e))
            return {}

    async def _load_favorites(self, user_id: str) -> list[str]:
        if self._favorites is None:
            return []
        try:
            return await self._favorites.get_favorite_ids(user_id)
        except Exception as e:
            logger.warning("favorites_unavailable", user_id=user_id, error=str(e))
            return []

    def _resolve_scored(self, item: ScoredExercise) -> ExerciseDefinition:
        exercise = self._catalog.get(item.exercise_id)
        if exercise is None:
            raise CatalogMismatchError(item.exercise_id)
        return exercise

    def _entries_from_response(
        self,
        user_id: str,
        response: ScoringResponse,
        count: int,
        seen: set[str],
    ) -> list[RecommendationEntry]:
        entries: list[RecommendationEntry] = []
        for item in response.recommendations:
            if len(entries) >= count:
                break
            try:
                exercise = self._resolve_scored(item)
            except CatalogMismatchError as e:
                track_catalog_mismatch()
                logger.warning("catalog_mismatch", user_id=user_id, code=e.code, **e.details)
                continue
            if exercise.id in seen:
                continue
            seen.add(exercise.id)
            entries.append(
                RecommendationEntry(
                    exercise=exercise,
                    provenance=Provenance.AI,
                    priority_score=(
                        item.priority_score if item.priority_score is not None else DEFAULT_PRIORITY_SCORE
                    ),
                    reasoning=item.reasoning or DEFAULT_AI_REASONING,
                    personalization_note=item.personalization_note,
                    expected_benefit=item.expected_benefit,
                )
            )
        return entries

"""Tests for RecommendationGenerator: AI ranking, backfill and the fallback pool."""
from unittest.mock import AsyncMock, Mock

import pytest

from dailyfocus.config.daily_focus_config_loader import DailyFocusConfigValidationError
from dailyfocus.core.exceptions import ScoringUnavailableError, ValidationError
from dailyfocus.services.ai_scoring import ScoredExercise, ScoringResponse
from dailyfocus.services.recommendation_generator import (
    DEFAULT_AI_REASONING,
    DEFAULT_PRIORITY_SCORE,
    FallbackSource,
    Provenance,
    RecommendationEntry,
    RecommendationGenerator,
    explain,
)

from tests.conftest import FakeFavorites, FakeScorer, make_config, make_exercise, scored


def build_generator(catalog, config, clock, rng, scorer=None, favorites=None, **kwargs):
    return RecommendationGenerator(
        catalog,
        config,
        scorer=scorer,
        favorites=favorites,
        default_tz="UTC",
        now_fn=clock,
        rng=rng,
        **kwargs,
    )


def ids(entries):
    return [entry.exercise_id for entry in entries]


class TestFallbackOrdering:
    """Fallback pool: favorites, then the hour bucket, then the catalog."""

    @pytest.mark.asyncio
    async def test_favorite_then_bucket_when_ai_fails(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog,
            small_config,
            clock,
            rng,
            scorer=FakeScorer(error=ScoringUnavailableError()),
            favorites=FakeFavorites(["C"]),
        )

        entries = await generator.generate("user-1", 3)

        assert ids(entries) == ["C", "B", "A"]
        assert all(entry.provenance == Provenance.FALLBACK for entry in entries)
        assert [entry.fallback_source for entry in entries] == [
            FallbackSource.FAVORITE,
            FallbackSource.TIME_OF_DAY,
            FallbackSource.TIME_OF_DAY,
        ]
        assert entries[0].reasoning == small_config.fallback_reasoning.favorite
        assert entries[1].reasoning == small_config.fallback_reasoning.time_of_day

    @pytest.mark.asyncio
    async def test_catalog_fills_after_bucket(self, small_catalog, small_config, clock, rng):
        generator = build_generator(small_catalog, small_config, clock, rng, favorites=FakeFavorites(["C"]))

        entries = await generator.generate("user-1", 5)

        assert ids(entries)[:3] == ["C", "B", "A"]
        assert set(ids(entries)[3:]) == {"D", "E"}
        assert entries[3].fallback_source == FallbackSource.CATALOG
        assert entries[4].fallback_source == FallbackSource.CATALOG

    @pytest.mark.asyncio
    async def test_favorites_missing_from_catalog_are_skipped(self, small_catalog, small_config, clock, rng):
        generator = build_generator(small_catalog, small_config, clock, rng, favorites=FakeFavorites(["gone", "E"]))

        entries = await generator.generate("user-1", 3)

        assert ids(entries) == ["E", "B", "A"]

    @pytest.mark.asyncio
    async def test_bucket_follows_user_timezone(self, small_catalog, small_config, clock, rng):
        scorer = FakeScorer(error=ScoringUnavailableError())
        generator = build_generator(small_catalog, small_config, clock, rng, scorer=scorer)

        # 09:30 UTC is 02:30 in Los Angeles (PDT), the night bucket
        entries = await generator.generate("user-1", 1, tz_name="America/Los_Angeles")

        assert ids(entries) == ["C"]
        assert scorer.requests[0].local_hour == 2

    @pytest.mark.asyncio
    async def test_unknown_bucket_ids_skipped_by_default(self, small_catalog, clock, rng):
        config = make_config(morning=("journaling_reflection_15min", "B"))
        generator = build_generator(small_catalog, config, clock, rng)

        entries = await generator.generate("user-1", 1)

        assert generator.unknown_bucket_ids == ["journaling_reflection_15min"]
        assert ids(entries) == ["B"]

    def test_unknown_bucket_ids_rejected_in_strict_mode(self, small_catalog, clock, rng):
        config = make_config(morning=("journaling_reflection_15min",))

        with pytest.raises(DailyFocusConfigValidationError):
            build_generator(small_catalog, config, clock, rng, strict_catalog_validation=True)


class TestAIRanking:
    """AI entries keep their rank and are backfilled from the pool."""

    @pytest.mark.asyncio
    async def test_ai_entries_keep_rank_and_backfill(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog,
            small_config,
            clock,
            rng,
            scorer=FakeScorer(scored("D", "A")),
            favorites=FakeFavorites(["C"]),
        )

        entries = await generator.generate("user-1", 3)

        assert ids(entries) == ["D", "A", "C"]
        assert [entry.provenance for entry in entries] == [Provenance.AI, Provenance.AI, Provenance.FALLBACK]
        assert entries[0].priority_score == 90
        assert entries[0].reasoning == "because D"

    @pytest.mark.asyncio
    async def test_full_ai_response_is_truncated_to_count(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog, small_config, clock, rng, scorer=FakeScorer(scored("E", "D", "C", "B"))
        )

        entries = await generator.generate("user-1", 2)

        assert ids(entries) == ["E", "D"]

    @pytest.mark.asyncio
    async def test_unknown_and_duplicate_ids_are_dropped(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog,
            small_config,
            clock,
            rng,
            scorer=FakeScorer(scored("X", "B", "B")),
            favorites=FakeFavorites(["C"]),
        )

        entries = await generator.generate("user-1", 3)

        assert ids(entries) == ["B", "C", "A"]
        assert entries[0].provenance == Provenance.AI

    @pytest.mark.asyncio
    async def test_missing_score_and_reasoning_get_defaults(self, small_catalog, small_config, clock, rng):
        response = ScoringResponse(recommendations=[ScoredExercise(exercise_id="A")])
        generator = build_generator(small_catalog, small_config, clock, rng, scorer=FakeScorer(response))

        entries = await generator.generate("user-1", 1)

        assert entries[0].priority_score == DEFAULT_PRIORITY_SCORE
        assert entries[0].reasoning == DEFAULT_AI_REASONING

    @pytest.mark.asyncio
    async def test_plan_carries_focus_theme(self, small_catalog, small_config, clock, rng):
        response = scored("A", "B", "C", focus_theme="Calm start", coach_note="Go easy today")
        generator = build_generator(small_catalog, small_config, clock, rng, scorer=FakeScorer(response))

        plan = await generator.generate_plan("user-1", 3)

        assert plan.ai_powered
        assert plan.focus_theme == "Calm start"
        assert plan.coach_note == "Go easy today"

    @pytest.mark.asyncio
    async def test_scorer_receives_recent_activity(self, small_catalog, small_config, clock, rng):
        activity = Mock()
        activity.get_recent_activity = AsyncMock(return_value={"Mindfulness": 4, "Journaling": 0})
        scorer = FakeScorer(scored("A"))
        generator = build_generator(
            small_catalog, small_config, clock, rng, scorer=scorer, activity=activity, history_days=7
        )

        await generator.generate("user-1", 1, tz_name="Asia/Tokyo")

        activity.get_recent_activity.assert_awaited_once_with("user-1", 7, tz_name="Asia/Tokyo")
        assert scorer.requests[0].recent_activity == {"Mindfulness": 4, "Journaling": 0}
        assert scorer.requests[0].history_days == 7


class TestDegradation:
    """Scoring and favorites failures always degrade to the fallback pool."""

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog, small_config, clock, rng, scorer=FakeScorer(scored("E"), delay=1.0)
        )

        plan = await generator.generate_plan("user-1", 2, timeout=0.01)

        assert ids(plan.entries) == ["B", "A"]
        assert not plan.ai_powered
        assert plan.focus_theme is None

    @pytest.mark.asyncio
    async def test_unexpected_scorer_error_falls_back(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog, small_config, clock, rng, scorer=FakeScorer(error=RuntimeError("boom"))
        )

        entries = await generator.generate("user-1", 3)

        assert len(entries) == 3
        assert all(entry.provenance == Provenance.FALLBACK for entry in entries)

    @pytest.mark.asyncio
    async def test_unsuccessful_response_falls_back(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog, small_config, clock, rng, scorer=FakeScorer(scored("E", success=False))
        )

        entries = await generator.generate("user-1", 1)

        assert ids(entries) == ["B"]

    @pytest.mark.asyncio
    async def test_favorites_failure_is_ignored(self, small_catalog, small_config, clock, rng):
        generator = build_generator(
            small_catalog, small_config, clock, rng, favorites=FakeFavorites(error=RuntimeError("offline"))
        )

        entries = await generator.generate("user-1", 3)

        assert ids(entries)[:2] == ["B", "A"]
        assert len(entries) == 3

    @pytest.mark.asyncio
    async def test_activity_failure_still_scores(self, small_catalog, small_config, clock, rng):
        activity = Mock()
        activity.get_recent_activity = AsyncMock(side_effect=RuntimeError("offline"))
        scorer = FakeScorer(scored("E"))
        generator = build_generator(small_catalog, small_config, clock, rng, scorer=scorer, activity=activity)

        entries = await generator.generate("user-1", 1)

        assert ids(entries) == ["E"]
        assert scorer.requests[0].recent_activity == {}


class TestCountHandling:
    @pytest.mark.asyncio
    async def test_distinct_entries_for_every_count(self, catalog, daily_focus_config, clock, rng):
        generator = build_generator(catalog, daily_focus_config, clock, rng, favorites=FakeFavorites(["tasks_planner"]))

        for count in range(1, len(catalog) + 1):
            entries = await generator.generate("user-1", count)
            assert len(entries) == count
            assert len(set(ids(entries))) == count

    @pytest.mark.asyncio
    async def test_small_catalog_returns_fewer(self, small_catalog, small_config, clock, rng):
        generator = build_generator(small_catalog, small_config, clock, rng)

        entries = await generator.generate("user-1", 8)

        assert sorted(ids(entries)) == ["A", "B", "C", "D", "E"]

    @pytest.mark.asyncio
    async def test_large_count_fills_from_full_catalog(self, catalog, daily_focus_config, clock, rng):
        scorer = FakeScorer(error=ScoringUnavailableError("down"))
        generator = build_generator(catalog, daily_focus_config, clock, rng, scorer=scorer)

        entries = await generator.generate("user-1", 15)

        assert len(entries) == 15
        assert len(set(ids(entries))) == 15

    @pytest.mark.asyncio
    async def test_count_below_one_is_rejected(self, small_catalog, small_config, clock, rng):
        generator = build_generator(small_catalog, small_config, clock, rng)

        with pytest.raises(ValidationError):
            await generator.generate("user-1", 0)

    @pytest.mark.asyncio
    async def test_anonymous_user_gets_catalog_sample(self, small_catalog, small_config, clock, rng):
        scorer = FakeScorer(scored("A"))
        favorites = FakeFavorites(["C"])
        generator = build_generator(small_catalog, small_config, clock, rng, scorer=scorer, favorites=favorites)

        entries = await generator.generate(None, 3)

        assert len(entries) == 3
        assert all(entry.fallback_source == FallbackSource.CATALOG for entry in entries)
        assert scorer.requests == []
        assert favorites.calls == 0


class TestExplain:
    def test_prefers_reasoning(self):
        entry = RecommendationEntry(make_exercise("A"), Provenance.AI, reasoning="Matches your goals")
        assert explain(entry) == "Matches your goals"

    def test_falls_back_to_description(self):
        entry = RecommendationEntry(make_exercise("A"), Provenance.FALLBACK)
        assert explain(entry) == "Exercise A - Perfect for your current focus needs."

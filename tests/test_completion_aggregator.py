"""Tests for CompletionAggregator against an on-disk SQLite store."""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from dailyfocus.config.daily_focus_config_loader import CompletionSourceConfig
from dailyfocus.models import DeepWorkSession, MindfulnessLog, Task, Visualization
from dailyfocus.repositories.completion_repository import CompletionLogRepository
from dailyfocus.services.completion_aggregator import CompletionAggregator

from tests.conftest import make_config


TODAY = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)
YESTERDAY = datetime(2026, 3, 9, 20, 0, tzinfo=timezone.utc)


async def add_rows(session_maker, *rows):
    async with session_maker() as session:
        async with session.begin():
            session.add_all(rows)


@pytest.fixture
def aggregator(session_maker, daily_focus_config, catalog, clock):
    return CompletionAggregator(
        CompletionLogRepository(session_maker),
        daily_focus_config,
        catalog,
        now_fn=clock,
        default_tz="UTC",
    )


class TestCompletionStatus:
    @pytest.mark.asyncio
    async def test_no_rows_means_not_completed(self, aggregator):
        report = await aggregator.get_completion_status("user-1", ["mindfulness", "tasks"])

        assert report.status == {"mindfulness": False, "tasks": False}
        assert report.errors == {}

    @pytest.mark.asyncio
    async def test_existence_alone_completes_unflagged_source(self, aggregator, session_maker):
        await add_rows(session_maker, MindfulnessLog(user_id="user-1", response="calm", created_at=TODAY))

        report = await aggregator.get_completion_status("user-1", ["mindfulness", "tasks"])

        assert report.status == {"mindfulness": True, "tasks": False}

    @pytest.mark.asyncio
    async def test_flag_must_be_true(self, aggregator, session_maker):
        await add_rows(
            session_maker,
            Task(user_id="user-1", description="draft", completed=False, updated_at=TODAY),
            Visualization(user_id="user-1", completed=True, completed_at=TODAY),
        )

        report = await aggregator.get_completion_status("user-1", ["tasks", "visualization"])

        assert report.status == {"tasks": False, "visualization": True}

    @pytest.mark.asyncio
    async def test_rows_outside_today_are_ignored(self, aggregator, session_maker):
        await add_rows(
            session_maker,
            Task(user_id="user-1", description="old", completed=True, updated_at=YESTERDAY),
            MindfulnessLog(user_id="someone-else", created_at=TODAY),
        )

        report = await aggregator.get_completion_status("user-1", ["tasks", "mindfulness"])

        assert report.status == {"tasks": False, "mindfulness": False}

    @pytest.mark.asyncio
    async def test_day_boundary_follows_timezone(self, aggregator, session_maker):
        # 02:00 UTC on the 10th is still the 9th in New York
        await add_rows(
            session_maker,
            MindfulnessLog(user_id="user-1", created_at=datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)),
        )

        utc_report = await aggregator.get_completion_status("user-1", ["mindfulness"], tz_name="UTC")
        ny_report = await aggregator.get_completion_status("user-1", ["mindfulness"], tz_name="America/New_York")

        assert utc_report.status["mindfulness"] is True
        assert ny_report.status["mindfulness"] is False

    @pytest.mark.asyncio
    async def test_exercise_ids_and_categories_resolve_to_sources(self, aggregator, session_maker):
        await add_rows(session_maker, DeepWorkSession(user_id="user-1", completed=True, created_at=TODAY))

        report = await aggregator.get_completion_status(
            "user-1",
            ["deepwork_pomodoro_25min", "Deep Work", "mindfulness_breath_5min"],
        )

        assert report.status == {
            "deepwork_pomodoro_25min": True,
            "Deep Work": True,
            "mindfulness_breath_5min": False,
        }

    @pytest.mark.asyncio
    async def test_unknown_ids_are_false(self, aggregator):
        report = await aggregator.get_completion_status("user-1", ["breathing_app_import"])

        assert report.status == {"breathing_app_import": False}
        assert not report.is_unknown("breathing_app_import")

    @pytest.mark.asyncio
    async def test_empty_request_returns_empty_map(self, daily_focus_config, catalog, clock):
        repository = Mock()
        repository.has_completion = AsyncMock(return_value=True)
        aggregator = CompletionAggregator(repository, daily_focus_config, catalog, now_fn=clock, default_tz="UTC")

        report = await aggregator.get_completion_status("user-1", [])

        assert report.status == {}
        repository.has_completion.assert_not_awaited()


class TestPartialFailure:
    @pytest.mark.asyncio
    async def test_failing_source_defaults_to_false(self, daily_focus_config, catalog, clock):
        async def has_completion(config, user_id, start, end):
            if config.source_id == "mindfulness":
                raise RuntimeError("connection reset")
            return True

        repository = Mock()
        repository.has_completion = AsyncMock(side_effect=has_completion)
        aggregator = CompletionAggregator(repository, daily_focus_config, catalog, now_fn=clock, default_tz="UTC")

        report = await aggregator.get_completion_status("user-1", ["mindfulness", "tasks"])

        assert report.status == {"mindfulness": False, "tasks": True}
        assert set(report.errors) == {"mindfulness"}
        assert report.errors["mindfulness"].code == "SOURCE_MINDFULNESS_QUERY"
        assert report.is_unknown("mindfulness")
        assert not report.is_unknown("tasks")
        assert "connection reset" in report.error

    @pytest.mark.asyncio
    async def test_each_source_is_queried_once(self, daily_focus_config, catalog, clock):
        repository = Mock()
        repository.has_completion = AsyncMock(return_value=False)
        aggregator = CompletionAggregator(repository, daily_focus_config, catalog, now_fn=clock, default_tz="UTC")

        await aggregator.get_completion_status(
            "user-1",
            ["mindfulness", "mindfulness_breath_5min", "mindfulness_senses_4min", "tasks"],
        )

        queried = sorted(call.args[0].source_id for call in repository.has_completion.await_args_list)
        assert queried == ["mindfulness", "tasks"]

    @pytest.mark.asyncio
    async def test_missing_table_is_reported(self, session_maker, catalog, clock):
        config = make_config(
            completion_sources=(
                CompletionSourceConfig("ghost", "ghost_logs", "created_at", categories=("Ghost",)),
                CompletionSourceConfig("mindfulness", "mindfulness_logs", "created_at", categories=("Mindfulness",)),
            )
        )
        await add_rows(session_maker, MindfulnessLog(user_id="user-1", created_at=TODAY))
        aggregator = CompletionAggregator(
            CompletionLogRepository(session_maker), config, catalog, now_fn=clock, default_tz="UTC"
        )

        report = await aggregator.get_completion_status("user-1", ["ghost", "mindfulness"])

        assert report.status == {"ghost": False, "mindfulness": True}
        assert set(report.errors) == {"ghost"}


class TestRecentActivity:
    @pytest.mark.asyncio
    async def test_counts_completed_rows_in_window(self, aggregator, session_maker):
        await add_rows(
            session_maker,
            MindfulnessLog(user_id="user-1", created_at=TODAY),
            MindfulnessLog(user_id="user-1", created_at=YESTERDAY),
            MindfulnessLog(user_id="user-1", created_at=datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)),
            MindfulnessLog(user_id="someone-else", created_at=TODAY),
            Task(user_id="user-1", description="ship", completed=True, updated_at=YESTERDAY),
            Task(user_id="user-1", description="draft", completed=False, updated_at=TODAY),
        )

        activity = await aggregator.get_recent_activity("user-1", 14)

        assert activity["Mindfulness"] == 2
        assert activity["Task Planning"] == 1
        assert activity["Journaling"] == 0

    @pytest.mark.asyncio
    async def test_failing_source_is_left_out(self, daily_focus_config, catalog, clock):
        async def count_completions(config, user_id, start, end):
            if config.source_id == "mindfulness":
                raise RuntimeError("connection reset")
            return 2

        repository = Mock()
        repository.count_completions = AsyncMock(side_effect=count_completions)
        aggregator = CompletionAggregator(repository, daily_focus_config, catalog, now_fn=clock, default_tz="UTC")

        activity = await aggregator.get_recent_activity("user-1", 14)

        assert "Mindfulness" not in activity
        assert activity["Deep Work"] == 2

    @pytest.mark.asyncio
    async def test_window_starts_at_local_midnight(self, daily_focus_config, catalog, clock):
        repository = Mock()
        repository.count_completions = AsyncMock(return_value=0)
        aggregator = CompletionAggregator(repository, daily_focus_config, catalog, now_fn=clock, default_tz="UTC")

        await aggregator.get_recent_activity("user-1", 14)

        _, _, start, end = repository.count_completions.await_args.args
        assert start == datetime(2026, 2, 24, 0, 0, tzinfo=timezone.utc)
        assert end == datetime(2026, 3, 11, 0, 0, tzinfo=timezone.utc)

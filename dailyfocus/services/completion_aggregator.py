"""
Completion Aggregator

Reduces the configured activity-log sources to one "completed today" flag
per requested id. Sources are queried concurrently and independently; a
failing source reports False for its ids and its error is collected
separately in the report.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable

from dailyfocus.config.daily_focus_config_loader import CompletionSourceConfig, DailyFocusConfig
from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import SourceQueryError
from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import track_source_failure
from dailyfocus.repositories.completion_repository import CompletionLogRepository
from dailyfocus.services.exercise_catalog import ExerciseCatalog
from dailyfocus.utils.datetime_utils import local_day_bounds, local_now, local_window_bounds, utcnow


logger = get_logger(__name__)


@dataclass
class CompletionReport:
    """Status map for one query cycle plus the source errors behind it."""
    day: date
    status: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, SourceQueryError] = field(default_factory=dict)
    unknown: set[str] = field(default_factory=set)

    @property
    def error(self) -> str | None:
        if not self.errors:
            return None
        return "; ".join(e.message for e in self.errors.values())

    def is_unknown(self, requested_id: str) -> bool:
        """True when the id reads False only because its source failed."""
        return requested_id in self.unknown


class CompletionAggregator:
    def __init__(
        self,
        repository: CompletionLogRepository,
        config: DailyFocusConfig,
        catalog: ExerciseCatalog,
        now_fn: Callable[[], datetime] = utcnow,
        default_tz: str | None = None,
    ):
        self._repository = repository
        self._config = config
        self._catalog = catalog
        self._now_fn = now_fn
        self._default_tz = default_tz or get_settings().default_timezone

    def resolve_source(self, requested_id: str) -> CompletionSourceConfig | None:
        """Map a source id, exercise id or category name to its source."""
        source = self._config.get_source(requested_id)
        if source is not None:
            return source
        exercise = self._catalog.get(requested_id)
        if exercise is not None:
            return self._config.source_for_category(exercise.category)
        return self._config.source_for_category(requested_id)

    async def get_completion_status(
        self,
        user_id: str,
        exercise_ids: Iterable[str],
        tz_name: str | None = None,
    ) -> CompletionReport:
        """
        Check which of the requested ids were completed during today's local day.

        Args:
            user_id: Owner of the activity rows.
            exercise_ids: Source ids ("mindfulness"), catalog exercise ids or
                category names, in any mix.
            tz_name: IANA timezone defining the day boundary for every source.

        Returns:
            CompletionReport with a boolean for every requested id. Ids with
            no configured source are False; ids whose source failed are False
            and listed in `unknown`.
        """
        tz_name = tz_name or self._default_tz
        now = self._now_fn()
        report = CompletionReport(day=local_now(tz_name, now).date())

        requested = list(dict.fromkeys(exercise_ids))
        if not requested:
            return report

        mapping = {requested_id: self.resolve_source(requested_id) for requested_id in requested}
        for requested_id, source in mapping.items():
            if source is None:
                logger.debug("completion_source_unknown", requested_id=requested_id)

        if not user_id:
            report.status = {requested_id: False for requested_id in requested}
            return report

        sources = {source.source_id: source for source in mapping.values() if source is not None}
        start, end = local_day_bounds(tz_name, now)
        results = await asyncio.gather(
            *(self._query(source, user_id, start, end) for source in sources.values())
        )

        completed: dict[str, bool] = {}
        for source_id, done, error in results:
            completed[source_id] = done
            if error is not None:
                report.errors[source_id] = error

        for requested_id, source in mapping.items():
            if source is None:
                report.status[requested_id] = False
                continue
            report.status[requested_id] = completed[source.source_id]
            if source.source_id in report.errors:
                report.unknown.add(requested_id)

        logger.debug(
            "completion_status_computed",
            user_id=user_id,
            requested=len(requested),
            sources=len(sources),
            failed_sources=len(report.errors),
        )
        return report

    async def _query(
        self,
        source: CompletionSourceConfig,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> tuple[str, bool, SourceQueryError | None]:
        try:
            done = await self._repository.has_completion(source, user_id, start, end)
        except Exception as e:
            error = SourceQueryError(source.source_id, str(e) or type(e).__name__)
            track_source_failure(source.source_id)
            logger.warning(
                "completion_source_failed",
                source_id=source.source_id,
                user_id=user_id,
                code=error.code,
                error=str(e),
            )
            return source.source_id, False, error
        return source.source_id, done, None

    async def get_recent_activity(
        self,
        user_id: str,
        days: int,
        tz_name: str | None = None,
    ) -> dict[str, int]:
        """
        Count completed activity per source over today and the previous `days` local days.

        Keys are the source's category names, joined when a source covers
        several. Failing sources are left out so the caller still gets
        whatever history could be read.
        """
        if not user_id or days < 0:
            return {}

        start, end = local_window_bounds(tz_name or self._default_tz, days, self._now_fn())
        sources = self._config.completion_sources
        results = await asyncio.gather(
            *(self._count(source, user_id, start, end) for source in sources)
        )

        activity = {
            ", ".join(source.categories) or source.source_id: total
            for source, total in zip(sources, results)
            if total is not None
        }
        logger.debug(
            "recent_activity_computed",
            user_id=user_id,
            days=days,
            sources=len(activity),
            failed_sources=len(sources) - len(activity),
        )
        return activity

    async def _count(
        self,
        source: CompletionSourceConfig,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> int | None:
        try:
            return await self._repository.count_completions(source, user_id, start, end)
        except Exception as e:
            track_source_failure(source.source_id)
            logger.warning(
                "activity_source_failed",
                source_id=source.source_id,
                user_id=user_id,
                error=str(e),
            )
            return None

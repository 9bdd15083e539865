"""
Recommendation Cache

Per-user, per-calendar-day memoization of generated daily focus plans.

Each user has one slot. A fetch records a fresh generation token; when a
fetch resolves, its result is applied only if its token is still the
slot's current token, so a superseded fetch can never overwrite newer
state. Concurrent non-forced calls for the same count join the in-flight
fetch instead of starting another one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable

from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import ValidationError
from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import track_cache_hit, track_cache_miss, track_stale_generation
from dailyfocus.services.recommendation_generator import (
    DailyFocusPlan,
    Provenance,
    RecommendationEntry,
    RecommendationGenerator,
)
from dailyfocus.utils.datetime_utils import calendar_day, utcnow


logger = get_logger(__name__)

CACHE_TYPE = "daily_focus"


class CacheState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"


@dataclass
class RecommendationCacheEntry:
    user_id: str
    calendar_day: date | None
    entries: list[RecommendationEntry]
    generated_at: datetime
    requested_count: int = 0
    focus_theme: str | None = None
    coach_note: str | None = None


@dataclass
class RecommendationResult:
    entries: list[RecommendationEntry] = field(default_factory=list)
    loading: bool = False
    error: str | None = None
    served_from_cache: bool = False
    focus_theme: str | None = None
    coach_note: str | None = None
    generated_at: datetime | None = None

    @property
    def ai_powered(self) -> bool:
        return any(entry.provenance == Provenance.AI for entry in self.entries)


@dataclass
class _UserSlot:
    state: CacheState = CacheState.IDLE
    token: int = 0
    entry: RecommendationCacheEntry | None = None
    error: str | None = None
    task: asyncio.Task | None = None
    task_key: tuple[int, str] | None = None


class RecommendationCache:
    """Owns every user's cache slot; construct one per application."""

    def __init__(
        self,
        generator: RecommendationGenerator,
        now_fn: Callable[[], datetime] = utcnow,
        default_tz: str | None = None,
        default_count: int | None = None,
    ):
        settings = get_settings()
        self._generator = generator
        self._now_fn = now_fn
        self._default_tz = default_tz or settings.default_timezone
        self._default_count = default_count or settings.recommendation_default_count
        self._slots: dict[str, _UserSlot] = {}

    def _today(self, tz_name: str | None) -> date:
        return calendar_day(tz_name or self._default_tz, self._now_fn())

    def is_cache_valid(self, user_id: str, tz_name: str | None = None) -> bool:
        """True when the user has an entry stamped with today's local day."""
        slot = self._slots.get(user_id)
        if slot is None or slot.entry is None:
            return False
        return slot.entry.calendar_day == self._today(tz_name)

    def peek(self, user_id: str) -> RecommendationResult | None:
        """Current slot contents without triggering a fetch."""
        slot = self._slots.get(user_id)
        if slot is None:
            return None
        result = self._result(slot.entry, served_from_cache=slot.entry is not None)
        result.loading = slot.state == CacheState.FETCHING
        result.error = slot.error
        return result

    def invalidate(self, user_id: str) -> None:
        """Force the next get_or_generate for this user to regenerate."""
        slot = self._slots.get(user_id)
        if slot is not None and slot.entry is not None:
            slot.entry.calendar_day = None
        logger.info("daily_focus_cache_invalidated", user_id=user_id)

    async def get_or_generate(
        self,
        user_id: str,
        count: int | None = None,
        force_refresh: bool = False,
        tz_name: str | None = None,
    ) -> RecommendationResult:
        """
        Return today's recommendations for a user, generating them if needed.

        Args:
            user_id: User whose slot is read or refreshed.
            count: Number of entries wanted, defaults to the configured count.
            force_refresh: Skip the cached entry and supersede any in-flight fetch.
            tz_name: IANA timezone that defines "today".

        Returns:
            RecommendationResult. A generator failure is reported through
            `error`, with the last good entries kept when there are any.
        """
        count = self._default_count if count is None else count
        if count < 1:
            raise ValidationError("count", "must be at least 1", {"count": count})
        tz_name = tz_name or self._default_tz
        slot = self._slots.setdefault(user_id, _UserSlot())

        if not force_refresh and slot.state in (CacheState.IDLE, CacheState.READY):
            entry = slot.entry
            if entry is not None and entry.calendar_day == self._today(tz_name) and entry.requested_count >= count:
                track_cache_hit(CACHE_TYPE)
                logger.debug("daily_focus_cache_hit", user_id=user_id, count=count)
                return self._result(entry, served_from_cache=True, count=count)

        if not force_refresh and self._can_join(slot, count, tz_name):
            logger.debug("daily_focus_fetch_joined", user_id=user_id, token=slot.token)
        else:
            track_cache_miss(CACHE_TYPE)
            self._start_fetch(user_id, slot, count, tz_name)

        return await self._await_latest(slot, count)

    @staticmethod
    def _can_join(slot: _UserSlot, count: int, tz_name: str) -> bool:
        # An in-flight fetch for at least this many entries is sliced on return
        if slot.state != CacheState.FETCHING or slot.task_key is None:
            return False
        fetch_count, fetch_tz = slot.task_key
        return fetch_tz == tz_name and fetch_count >= count

    def _start_fetch(self, user_id: str, slot: _UserSlot, count: int, tz_name: str) -> None:
        if slot.state == CacheState.FETCHING:
            logger.debug("daily_focus_fetch_superseded", user_id=user_id, superseded_token=slot.token)
        slot.token += 1
        slot.state = CacheState.FETCHING
        slot.task_key = (count, tz_name)
        slot.task = asyncio.create_task(
            self._fetch(user_id, slot, slot.token, count, tz_name, self._today(tz_name))
        )

    async def _fetch(
        self,
        user_id: str,
        slot: _UserSlot,
        token: int,
        count: int,
        tz_name: str,
        day: date,
    ) -> None:
        try:
            plan: DailyFocusPlan = await self._generator.generate_plan(user_id, count, tz_name=tz_name)
        except Exception as e:
            if token != slot.token:
                self._discard(user_id, token, slot.token)
                return
            slot.state = CacheState.FAILED
            slot.error = str(e) or type(e).__name__
            logger.error("daily_focus_generation_failed", user_id=user_id, token=token, error=slot.error)
            return

        if token != slot.token:
            self._discard(user_id, token, slot.token)
            return

        slot.entry = RecommendationCacheEntry(
            user_id=user_id,
            calendar_day=day,
            entries=plan.entries,
            generated_at=self._now_fn(),
            requested_count=count,
            focus_theme=plan.focus_theme,
            coach_note=plan.coach_note,
        )
        slot.state = CacheState.READY
        slot.error = None
        logger.debug("daily_focus_cached", user_id=user_id, token=token, day=day.isoformat())

    @staticmethod
    def _discard(user_id: str, token: int, current_token: int) -> None:
        track_stale_generation()
        logger.warning(
            "stale_generation_discarded",
            user_id=user_id,
            token=token,
            current_token=current_token,
        )

    async def _await_latest(self, slot: _UserSlot, count: int) -> RecommendationResult:
        # Follow supersessions until the newest fetch has settled
        while True:
            task = slot.task
            await asyncio.shield(task)
            if slot.task is task:
                break

        if slot.state == CacheState.FAILED:
            result = self._result(slot.entry, served_from_cache=slot.entry is not None, count=count)
            result.error = slot.error
            return result
        return self._result(slot.entry, count=count)

    @staticmethod
    def _result(
        entry: RecommendationCacheEntry | None,
        served_from_cache: bool = False,
        count: int | None = None,
    ) -> RecommendationResult:
        if entry is None:
            return RecommendationResult(served_from_cache=served_from_cache)
        entries = entry.entries if count is None else entry.entries[:count]
        return RecommendationResult(
            entries=list(entries),
            served_from_cache=served_from_cache,
            focus_theme=entry.focus_theme,
            coach_note=entry.coach_note,
            generated_at=entry.generated_at,
        )

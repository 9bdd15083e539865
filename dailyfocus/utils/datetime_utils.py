from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_tz(tz_name: str | None) -> timezone | ZoneInfo:
    """Return the tzinfo for an IANA name, UTC when missing or unknown."""
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return timezone.utc


def local_now(tz_name: str | None, now: datetime | None = None) -> datetime:
    """Return the wall-clock time in the user's timezone."""
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(resolve_tz(tz_name))


def calendar_day(tz_name: str | None, now: datetime | None = None) -> date:
    """Return today's (year, month, day) in the user's timezone."""
    return local_now(tz_name, now).date()


def local_day_bounds(tz_name: str | None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return [start, end) of the user's local calendar day as UTC datetimes.

    The end is the next local midnight, so DST days are 23 or 25 hours long.
    """
    tz = resolve_tz(tz_name)
    day = local_now(tz_name, now).date()
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    next_day = day + timedelta(days=1)
    end = datetime(next_day.year, next_day.month, next_day.day, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_window_bounds(
    tz_name: str | None,
    days: int,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Return [start, end) covering today plus the previous `days` local days, in UTC."""
    tz = resolve_tz(tz_name)
    first = local_now(tz_name, now).date() - timedelta(days=days)
    start = datetime(first.year, first.month, first.day, tzinfo=tz)
    _, end = local_day_bounds(tz_name, now)
    return start.astimezone(timezone.utc), end

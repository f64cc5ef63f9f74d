from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from ..core.constants import OPERATING_TIMEZONE

OPERATING_TZ = ZoneInfo(OPERATING_TIMEZONE)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into operating local time."""
    return to_operating_time(datetime.fromisoformat(value))


def now_local() -> datetime:
    """Current wall-clock time in the operating timezone (naive).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(OPERATING_TZ).replace(tzinfo=None)


def to_operating_time(value: datetime) -> datetime:
    """Convert an aware datetime to naive operating local time.

    Naive values are taken as already being in operating local time.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(OPERATING_TZ).replace(tzinfo=None)


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def weekdays_before(as_of: date, count: int) -> Iterator[date]:
    """Yield ``count`` weekdays strictly before ``as_of``, most recent first."""
    day = as_of
    remaining = int(count)
    while remaining > 0:
        day -= timedelta(days=1)
        if is_weekday(day):
            remaining -= 1
            yield day


def format_clock(value: Optional[datetime], missing: str = "-") -> str:
    return value.strftime("%H:%M") if value else missing

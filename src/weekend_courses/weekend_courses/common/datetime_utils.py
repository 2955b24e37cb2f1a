from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..core.enums import WeekDay

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_time_to_minutes(value: str) -> int:
    """Convert "HH:MM" (seconds tolerated) into minutes since midnight."""
    m = _HHMM.match((value or "").strip())
    if not m:
        raise ValueError(f"Invalid time string: {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time string: {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hhmm(value: str) -> str:
    """Canonical zero-padded "HH:MM" form of a time string."""
    return format_minutes(parse_time_to_minutes(value))


def calendar_day_number(moment: datetime | date) -> int:
    """Day of week with Sunday=0 ... Saturday=6."""
    return (moment.weekday() + 1) % 7


def weekday_for(moment: datetime | date) -> Optional[WeekDay]:
    number = calendar_day_number(moment)
    for day in WeekDay:
        if day.calendar_number == number:
            return day
    return None


def is_scheduled_day(moment: datetime | date, day: WeekDay) -> bool:
    return calendar_day_number(moment) == WeekDay(day).calendar_number


def is_within_window(
    now: datetime,
    day: WeekDay,
    start: str,
    end: str,
    early_minutes: int,
    late_minutes: int,
) -> bool:
    """True when `now` is on `day` and inside [start - early, end + late].

    Both ends are inclusive. Windows never span midnight.
    """
    if not is_scheduled_day(now, day):
        return False

    now_minutes = now.hour * 60 + now.minute
    opens = parse_time_to_minutes(start) - int(early_minutes)
    closes = parse_time_to_minutes(end) + int(late_minutes)
    return opens <= now_minutes <= closes


def day_bounds(value: date) -> Tuple[datetime, datetime]:
    """[start, end) datetimes covering one calendar day."""
    start = datetime.combine(value, datetime.min.time())
    return start, start + timedelta(days=1)

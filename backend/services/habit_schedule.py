from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Mapping

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class Period(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def nominal_days(self) -> int:
        return PERIOD_DAYS[self]


PERIOD_DAYS = {
    Period.WEEK: 7,
    Period.MONTH: 30,
    Period.YEAR: 365,
}


def to_day(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value_str = str(value).strip()
    if not value_str:
        return None
    try:
        return datetime.fromisoformat(value_str.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(value_str[:10])
    except ValueError:
        return None


def weekday_index(day: date) -> int:
    # date.weekday() is Monday=0; recurrence rules use Sunday=0.
    return (day.weekday() + 1) % 7


def normalize_frequency(raw: Any) -> list[int] | None:
    """Return the sorted weekday set of a recurrence rule, or None for "every day".

    Habit rows come from a loosely validated store, so anything that is not a
    collection of integers in 0..6 falls back to every day instead of raising.
    """
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        return None
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return None
    days = set()
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, int):
            return None
        if not 0 <= item <= 6:
            return None
        days.add(item)
    if not days:
        return None
    return sorted(days)


def generate_date_range(
    window_size: int,
    reference_date: date | datetime,
    anchor: date | None = None,
    oldest_first: bool = False,
) -> list[date]:
    start = to_day(reference_date)
    anchor_day = to_day(anchor)
    dates = []
    for offset in range(max(0, int(window_size))):
        current = start - timedelta(days=offset)
        if anchor_day is not None and current < anchor_day:
            break
        dates.append(current)
    if oldest_first:
        dates.reverse()
    return dates


def is_scheduled(habit: Mapping[str, Any], day: date) -> bool:
    frequency = normalize_frequency(habit.get("frequency"))
    if frequency is None:
        return True
    return weekday_index(day) in frequency


def is_eligible(habit: Mapping[str, Any], day: date, anchor: date | None = None) -> bool:
    if anchor is not None and day < anchor:
        return False
    created_day = to_day(habit.get("created_at"))
    if created_day is not None and day < created_day:
        return False
    return is_scheduled(habit, day)


def describe_frequency(raw: Any) -> str:
    frequency = normalize_frequency(raw)
    if frequency is None or len(frequency) == 7:
        return "Every day"
    if frequency == [1, 2, 3, 4, 5]:
        return "Weekdays"
    if frequency == [0, 6]:
        return "Weekends"
    return ", ".join(WEEKDAY_LABELS[idx] for idx in frequency)

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from typing import Any, Mapping, Sequence

from backend import repositories
from backend.services.habit_schedule import (
    Period,
    generate_date_range,
    is_eligible,
    to_day,
)

logger = logging.getLogger(__name__)

CompletionMap = Mapping[tuple[date, str], bool]


@dataclass
class HabitStat:
    habit_id: str
    name: str
    color: str
    completed_count: int
    eligible_count: int

    @property
    def remaining_count(self) -> int:
        return max(0, self.eligible_count - self.completed_count)

    @property
    def ratio(self) -> float:
        if self.eligible_count <= 0:
            return 0.0
        return round(self.completed_count / self.eligible_count, 4)

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["remaining_count"] = self.remaining_count
        payload["ratio"] = self.ratio
        return payload


def days_elapsed_since(anchor: date, now: date | datetime) -> int:
    if isinstance(now, datetime):
        moment = now
    else:
        # A bare date stands for the whole day, so the day itself has elapsed.
        moment = datetime.combine(now, time.max)
    start = datetime.combine(anchor, time.min, tzinfo=moment.tzinfo)
    seconds = (moment - start).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 86400)


def effective_window(period: Period | str, now: date | datetime, anchor: date | None = None) -> int:
    nominal = Period(period).nominal_days
    if anchor is None:
        return nominal
    return min(nominal, days_elapsed_since(anchor, now))


def candidate_dates(period: Period | str, now: date | datetime, anchor: date | None = None) -> list[date]:
    return generate_date_range(effective_window(period, now, anchor), now, anchor)


def compute_stats(
    habits: Sequence[Mapping[str, Any]],
    completions: CompletionMap,
    period: Period | str,
    now: date | datetime,
    anchor: date | None = None,
) -> list[HabitStat]:
    anchor = to_day(anchor)
    dates = candidate_dates(period, now, anchor)
    stats = []
    for habit in habits:
        habit_id = str(habit.get("id"))
        eligible = [day for day in dates if is_eligible(habit, day, anchor)]
        completed = sum(1 for day in eligible if completions.get((day, habit_id)))
        stats.append(
            HabitStat(
                habit_id=habit_id,
                name=str(habit.get("name") or ""),
                color=str(habit.get("color") or ""),
                completed_count=completed,
                eligible_count=len(eligible),
            )
        )
    return stats


@dataclass(frozen=True)
class StatsConfig:
    period: Period = Period.MONTH
    anchor: date | None = None

    def __post_init__(self):
        object.__setattr__(self, "period", Period(self.period))
        object.__setattr__(self, "anchor", to_day(self.anchor))

    def compute(self, habits, completions, now) -> list[HabitStat]:
        return compute_stats(habits, completions, self.period, now, self.anchor)


def build_tracker_grid(
    habits: Sequence[Mapping[str, Any]],
    completions: CompletionMap,
    now: date | datetime,
    days: int = 15,
) -> dict:
    today = to_day(now)
    dates = generate_date_range(days, today, oldest_first=True)
    rows = []
    for habit in habits:
        habit_id = str(habit.get("id"))
        cells = []
        for day in dates:
            cells.append(
                {
                    "date": day.isoformat(),
                    "scheduled": is_eligible(habit, day),
                    "done": bool(completions.get((day, habit_id))),
                    "is_today": day == today,
                }
            )
        rows.append(
            {
                "habit_id": habit_id,
                "name": habit.get("name"),
                "color": habit.get("color"),
                "cells": cells,
            }
        )
    return {
        "today": today.isoformat(),
        "dates": [day.isoformat() for day in dates],
        "rows": rows,
    }


async def _load_habits_safe() -> list[dict]:
    try:
        return await repositories.list_habits()
    except Exception:
        logger.exception("Failed to load habits; continuing with an empty list.")
        return []


async def _load_completions_safe(dates: list[date]) -> dict:
    if not dates:
        return {}
    try:
        return await repositories.get_completion_range(dates)
    except Exception:
        logger.exception("Failed to load habit records for %s days; continuing without them.", len(dates))
        return {}


async def load_habit_stats(config: StatsConfig, now: date | datetime) -> dict:
    dates = candidate_dates(config.period, now, config.anchor)
    habits = await _load_habits_safe()
    completions = await _load_completions_safe(dates)
    stats = config.compute(habits, completions, now)
    return {
        "period": config.period.value,
        "nominal_days": config.period.nominal_days,
        "window_days": len(dates),
        "anchor": config.anchor.isoformat() if config.anchor else None,
        "today": to_day(now).isoformat(),
        "items": [stat.as_dict() for stat in stats],
    }


async def load_tracker_grid(now: date | datetime, days: int = 15) -> dict:
    dates = generate_date_range(days, now)
    habits = await _load_habits_safe()
    completions = await _load_completions_safe(dates)
    return build_tracker_grid(habits, completions, now, days)

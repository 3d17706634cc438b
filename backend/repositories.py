from __future__ import annotations

import json
import re
from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text, bindparam

from backend.db import get_sessionmaker
from backend.services.habit_schedule import describe_frequency, to_day
from backend.settings import get_settings

HABITS_TABLE = "habits"
HABIT_RECORDS_TABLE = "habit_records"

DEFAULT_HABIT_COLOR = "#60a5fa"
DEFAULT_HABIT_FREQUENCY = [1, 2, 3, 4, 5]

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sanitize_habit_name(raw_value) -> str:
    return " ".join(str(raw_value or "").split()).strip()[:60]


def _clean_color(value) -> str:
    color = str(value or "").strip()
    if not color:
        return DEFAULT_HABIT_COLOR
    if not _COLOR_RE.match(color):
        raise ValueError("Color must be a hex value like #60a5fa")
    return color.lower()


def _clean_frequency(value) -> list[int]:
    if value is None:
        return list(DEFAULT_HABIT_FREQUENCY)
    days = set()
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 6:
            raise ValueError("Invalid weekday index")
        days.add(item)
    if not days:
        raise ValueError("Pick at least one weekday")
    return sorted(days)


def _created_at_iso(value) -> str:
    # Creation stamps are stored in the configured timezone so their date
    # matches the calendar used for "today".
    settings = get_settings()
    if value is None:
        return settings.now().isoformat()
    if isinstance(value, str):
        value_str = value.strip()
        try:
            value = datetime.fromisoformat(value_str.replace("Z", "+00:00"))
        except ValueError:
            parsed = to_day(value_str)
            if parsed is None:
                raise ValueError("Invalid created_at value")
            value = parsed
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=settings.timezone)
        return value.astimezone(settings.timezone).isoformat()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time(), tzinfo=settings.timezone).isoformat()
    raise ValueError("Invalid created_at value")


def _decode_frequency(raw):
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        # Unreadable rules are kept as-is; scheduling treats them as every day.
        return raw


def _normalize_habit_row(row) -> dict:
    payload = dict(row)
    frequency = _decode_frequency(payload.pop("frequency_json", None))
    created_at = payload.get("created_at")
    if created_at is not None and hasattr(created_at, "isoformat"):
        created_at = created_at.isoformat()
    return {
        "id": str(payload.get("id")),
        "name": payload.get("name") or "",
        "color": payload.get("color") or DEFAULT_HABIT_COLOR,
        "frequency": frequency,
        "schedule_label": describe_frequency(frequency),
        "created_at": created_at,
    }


async def list_habits() -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT id, name, color, frequency_json, created_at
                FROM {HABITS_TABLE}
                ORDER BY created_at DESC, id
                """
            )
        )).mappings().all()
    return [_normalize_habit_row(row) for row in rows]


async def get_habit(habit_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT id, name, color, frequency_json, created_at FROM {HABITS_TABLE} WHERE id = :id"
            ),
            {"id": habit_id},
        )).mappings().fetchone()
    return _normalize_habit_row(row) if row else None


async def create_habit(name: str, color: str | None = None, frequency=None, created_at=None) -> dict:
    name = _sanitize_habit_name(name)
    if not name:
        raise ValueError("Habit name cannot be empty")
    payload = {
        "id": _new_id(),
        "name": name,
        "color": _clean_color(color),
        "frequency_json": json.dumps(_clean_frequency(frequency)),
        "created_at": _created_at_iso(created_at),
    }
    existing = await list_habits()
    if any(item.get("name", "").lower() == name.lower() for item in existing):
        raise ValueError("Habit already exists")
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE} (id, name, color, frequency_json, created_at)
                VALUES (:id, :name, :color, :frequency_json, :created_at)
                """
            ),
            payload,
        )
        await session.commit()
    return _normalize_habit_row(payload)


async def get_completion_range(dates) -> dict[tuple[date, str], bool]:
    day_isos = sorted({to_day(day).isoformat() for day in dates if to_day(day) is not None})
    if not day_isos:
        return {}
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT habit_id, date, done FROM {HABIT_RECORDS_TABLE} WHERE date IN :dates"
            ).bindparams(bindparam("dates", expanding=True)),
            {"dates": day_isos},
        )).mappings().all()
    payload = {}
    for row in rows:
        day = to_day(row.get("date"))
        if day is None:
            continue
        payload[(day, str(row.get("habit_id")))] = bool(row.get("done"))
    return payload


async def set_completed(habit_id: str, day: date, done: bool) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        if done:
            await session.execute(
                sql_text(
                    f"""
                    INSERT INTO {HABIT_RECORDS_TABLE} (habit_id, date, done, updated_at)
                    VALUES (:habit_id, :date, 1, :updated_at)
                    ON CONFLICT(habit_id, date) DO UPDATE SET done=EXCLUDED.done, updated_at=EXCLUDED.updated_at
                    """
                ),
                {"habit_id": habit_id, "date": day.isoformat(), "updated_at": _utcnow().isoformat()},
            )
        else:
            await session.execute(
                sql_text(f"DELETE FROM {HABIT_RECORDS_TABLE} WHERE habit_id = :habit_id AND date = :date"),
                {"habit_id": habit_id, "date": day.isoformat()},
            )
        await session.commit()


def group_completions_by_date(completions) -> dict[str, dict[str, bool]]:
    grouped: dict[str, dict[str, bool]] = {}
    for (day, habit_id), done in sorted(completions.items()):
        grouped.setdefault(day.isoformat(), {})[habit_id] = bool(done)
    return grouped

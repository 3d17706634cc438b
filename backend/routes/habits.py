from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, Query

from backend import repositories
from backend.schemas import (
    HabitCreate,
    HabitRecordPayload,
    HabitRecordsResponse,
    HabitResponse,
    HabitStatsResponse,
    TrackerGridResponse,
)
from backend.services import habit_stats
from backend.services.habit_schedule import Period, generate_date_range, is_eligible
from backend.settings import get_settings

router = APIRouter()

MAX_RECORD_RANGE_DAYS = 366


@router.get("/v1/habits")
async def list_habits():
    return {"items": await repositories.list_habits()}


@router.post("/v1/habits", response_model=HabitResponse)
async def create_habit(payload: HabitCreate):
    try:
        habit = await repositories.create_habit(
            payload.name,
            payload.color,
            payload.frequency,
            payload.created_at,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return habit


@router.get("/v1/habits/records", response_model=HabitRecordsResponse)
async def list_habit_records(start: date = Query(...), end: date = Query(...)):
    if end < start:
        raise HTTPException(status_code=400, detail="End date must be after start date")
    span = (end - start).days + 1
    if span > MAX_RECORD_RANGE_DAYS:
        raise HTTPException(status_code=400, detail="Date range too large")
    dates = generate_date_range(span, end)
    completions = await repositories.get_completion_range(dates)
    return {"items": repositories.group_completions_by_date(completions)}


@router.put("/v1/habits/{habit_id}/records/{day}")
async def set_habit_record(habit_id: str, day: date, payload: HabitRecordPayload):
    habit = await repositories.get_habit(habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    if payload.done:
        today = get_settings().now().date()
        if day > today:
            raise HTTPException(status_code=400, detail="Cannot complete a future date")
        if not is_eligible(habit, day):
            raise HTTPException(status_code=400, detail="Habit is not scheduled on this date")
    await repositories.set_completed(habit_id, day, payload.done)
    return {"ok": True}


@router.get("/v1/habits/stats", response_model=HabitStatsResponse)
async def habit_stats_summary(period: Period = Query(Period.MONTH)):
    settings = get_settings()
    config = habit_stats.StatsConfig(period=period, anchor=settings.project_start)
    return await habit_stats.load_habit_stats(config, settings.now())


@router.get("/v1/habits/tracker", response_model=TrackerGridResponse)
async def habit_tracker(days: int | None = Query(None, ge=1, le=90)):
    settings = get_settings()
    return await habit_stats.load_tracker_grid(settings.now(), days or settings.tracker_days)

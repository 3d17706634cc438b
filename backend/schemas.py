from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field


class HabitCreate(BaseModel):
    name: str
    color: Optional[str] = None
    frequency: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    created_at: Optional[datetime] = None


class HabitResponse(BaseModel):
    id: str
    name: str
    color: str
    frequency: Optional[Any] = None
    schedule_label: str
    created_at: Optional[str] = None


class HabitRecordPayload(BaseModel):
    done: bool


class HabitStatResponse(BaseModel):
    habit_id: str
    name: str
    color: str
    completed_count: int
    eligible_count: int
    remaining_count: int
    ratio: float


class HabitStatsResponse(BaseModel):
    period: str
    nominal_days: int
    window_days: int
    anchor: Optional[str]
    today: str
    items: List[HabitStatResponse]


class TrackerCell(BaseModel):
    date: str
    scheduled: bool
    done: bool
    is_today: bool


class TrackerRow(BaseModel):
    habit_id: str
    name: Optional[str]
    color: Optional[str]
    cells: List[TrackerCell]


class TrackerGridResponse(BaseModel):
    today: str
    dates: List[str]
    rows: List[TrackerRow]


class HabitRecordsResponse(BaseModel):
    items: Dict[str, Dict[str, bool]]

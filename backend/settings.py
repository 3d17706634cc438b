from __future__ import annotations

import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")

    habits_timezone: str = Field("UTC", alias="HABITS_TIMEZONE")
    project_start_raw: str = Field("2026-01-01", alias="HABITS_PROJECT_START")
    tracker_days: int = Field(15, alias="HABITS_TRACKER_DAYS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def project_start(self) -> date | None:
        raw = str(self.project_start_raw or "").strip()
        if not raw:
            return None
        return date.fromisoformat(raw)

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.habits_timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# For local dev convenience only.
if os.getenv("BACKEND_DEBUG_SETTINGS"):
    print(get_settings())

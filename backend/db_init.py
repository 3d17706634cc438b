from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


HABITS_TABLE = "habits"
HABIT_RECORDS_TABLE = "habit_records"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL DEFAULT '#60a5fa',
                    frequency_json TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABIT_RECORDS_TABLE} (
                    habit_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    done INTEGER NOT NULL DEFAULT 1,
                    updated_at TEXT,
                    PRIMARY KEY (habit_id, date)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"CREATE INDEX IF NOT EXISTS idx_{HABIT_RECORDS_TABLE}_date "
                f"ON {HABIT_RECORDS_TABLE} (date)"
            )
        )

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend import db, settings


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'habits.db'}")
    monkeypatch.setenv("HABITS_PROJECT_START", "")
    monkeypatch.setenv("HABITS_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "_settings", None)
    monkeypatch.setattr(db, "_engine", None)
    monkeypatch.setattr(db, "_session_factory", None)
    return monkeypatch


@pytest.fixture
def client(app_env):
    from backend.main import app

    with TestClient(app) as test_client:
        yield test_client

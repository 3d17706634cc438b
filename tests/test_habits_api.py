from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from backend import repositories

EVERY_DAY = [0, 1, 2, 3, 4, 5, 6]


def _today():
    return datetime.now(timezone.utc).date()


def _create(client, name="Read", frequency=EVERY_DAY, days_ago=3, **extra):
    body = {
        "name": name,
        "frequency": frequency,
        "created_at": (datetime.now(timezone.utc) - timedelta(days=days_ago)).isoformat(),
        **extra,
    }
    response = client.post("/v1/habits", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def _week_stat(client, habit_id):
    payload = client.get("/v1/habits/stats", params={"period": "week"}).json()
    return next(item for item in payload["items"] if item["habit_id"] == habit_id)


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_create_and_list_habits(client):
    first = _create(client, "  Morning   yoga ", color="#AABBCC", days_ago=5)
    second = _create(client, "Read", frequency=[1, 3, 5], days_ago=1)
    assert first["name"] == "Morning yoga"
    assert first["color"] == "#aabbcc"
    assert second["schedule_label"] == "Mon, Wed, Fri"

    items = client.get("/v1/habits").json()["items"]
    assert [item["id"] for item in items] == [second["id"], first["id"]]


def test_create_uses_defaults(client):
    response = client.post("/v1/habits", json={"name": "Walk"})
    assert response.status_code == 200
    habit = response.json()
    assert habit["color"] == repositories.DEFAULT_HABIT_COLOR
    assert habit["frequency"] == [1, 2, 3, 4, 5]
    assert habit["created_at"]


def test_create_validation(client):
    assert client.post("/v1/habits", json={"name": "   "}).status_code == 400
    assert client.post("/v1/habits", json={"name": "Run", "frequency": []}).status_code == 400
    assert client.post("/v1/habits", json={"name": "Run", "frequency": [7]}).status_code == 400
    assert client.post("/v1/habits", json={"name": "Run", "color": "blue"}).status_code == 400
    _create(client, "Run")
    response = client.post("/v1/habits", json={"name": "run"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Habit already exists"


def test_toggle_is_idempotent_and_reversible(client):
    habit = _create(client)
    today = _today().isoformat()

    assert _week_stat(client, habit["id"])["completed_count"] == 0
    for _ in range(2):
        response = client.put(f"/v1/habits/{habit['id']}/records/{today}", json={"done": True})
        assert response.status_code == 200
    stat = _week_stat(client, habit["id"])
    assert stat["completed_count"] == 1
    assert stat["eligible_count"] == 4

    records = client.get("/v1/habits/records", params={"start": today, "end": today}).json()
    assert records["items"] == {today: {habit["id"]: True}}

    client.put(f"/v1/habits/{habit['id']}/records/{today}", json={"done": False})
    assert _week_stat(client, habit["id"])["completed_count"] == 0
    records = client.get("/v1/habits/records", params={"start": today, "end": today}).json()
    assert records["items"] == {}


def test_toggle_rejections(client):
    habit = _create(client)
    today = _today()
    assert client.put(f"/v1/habits/missing/records/{today}", json={"done": True}).status_code == 404

    tomorrow = (today + timedelta(days=1)).isoformat()
    assert client.put(f"/v1/habits/{habit['id']}/records/{tomorrow}", json={"done": True}).status_code == 400

    before_created = (today - timedelta(days=10)).isoformat()
    response = client.put(f"/v1/habits/{habit['id']}/records/{before_created}", json={"done": True})
    assert response.status_code == 400

    off_day = (today + timedelta(days=1)).weekday()
    other = _create(client, "Stretch", frequency=[(off_day + 1) % 7], days_ago=20)
    response = client.put(f"/v1/habits/{other['id']}/records/{today.isoformat()}", json={"done": True})
    assert response.status_code == 400
    assert response.json()["detail"] == "Habit is not scheduled on this date"
    # Clearing is always allowed.
    response = client.put(f"/v1/habits/{other['id']}/records/{today.isoformat()}", json={"done": False})
    assert response.status_code == 200


def test_records_range_validation(client):
    today = _today()
    params = {"start": today.isoformat(), "end": (today - timedelta(days=1)).isoformat()}
    assert client.get("/v1/habits/records", params=params).status_code == 400
    params = {"start": (today - timedelta(days=400)).isoformat(), "end": today.isoformat()}
    assert client.get("/v1/habits/records", params=params).status_code == 400


def test_stats_payload(client):
    habit = _create(client, days_ago=40)
    payload = client.get("/v1/habits/stats", params={"period": "month"}).json()
    assert payload["period"] == "month"
    assert payload["nominal_days"] == 30
    assert payload["window_days"] == 30
    assert payload["anchor"] is None
    [item] = payload["items"]
    assert item["habit_id"] == habit["id"]
    assert item["eligible_count"] == 30
    assert client.get("/v1/habits/stats", params={"period": "decade"}).status_code == 422


def test_stats_with_future_anchor(app_env, client):
    from backend import settings

    _create(client)
    app_env.setenv("HABITS_PROJECT_START", (_today() + timedelta(days=1)).isoformat())
    app_env.setattr(settings, "_settings", None)
    payload = client.get("/v1/habits/stats", params={"period": "year"}).json()
    assert payload["window_days"] == 0
    assert [(i["completed_count"], i["eligible_count"]) for i in payload["items"]] == [(0, 0)]


def test_stats_degrade_when_store_fails(app_env, client):
    async def broken(*args, **kwargs):
        raise RuntimeError("store offline")

    _create(client)
    app_env.setattr(repositories, "get_completion_range", broken)
    payload = client.get("/v1/habits/stats", params={"period": "week"}).json()
    assert payload["items"][0]["completed_count"] == 0

    app_env.setattr(repositories, "list_habits", broken)
    response = client.get("/v1/habits/stats", params={"period": "week"})
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_tracker_grid(client):
    habit = _create(client, days_ago=2)
    today = _today().isoformat()
    client.put(f"/v1/habits/{habit['id']}/records/{today}", json={"done": True})

    grid = client.get("/v1/habits/tracker", params={"days": 5}).json()
    assert grid["today"] == today
    assert len(grid["dates"]) == 5
    assert grid["dates"][-1] == today
    [row] = grid["rows"]
    scheduled = [cell["scheduled"] for cell in row["cells"]]
    assert scheduled == [False, False, True, True, True]
    assert row["cells"][-1]["done"] is True

    assert len(client.get("/v1/habits/tracker").json()["dates"]) == 15


def test_tracker_days_bounds(client):
    assert client.get("/v1/habits/tracker", params={"days": 0}).status_code == 422
    assert client.get("/v1/habits/tracker", params={"days": 91}).status_code == 422
    assert len(client.get("/v1/habits/tracker", params={"days": 90}).json()["dates"]) == 90


def _use_local_evening(app_env):
    from backend import settings

    # 23:30 in Sao Paulo is already 02:30 of the next day in UTC.
    local_now = datetime(2026, 10, 18, 23, 30, tzinfo=ZoneInfo("America/Sao_Paulo"))
    app_env.setenv("HABITS_TIMEZONE", "America/Sao_Paulo")
    app_env.setattr(settings, "_settings", None)
    app_env.setattr(settings.Settings, "now", lambda self: local_now)


def test_default_created_at_uses_configured_timezone(app_env, client):
    _use_local_evening(app_env)
    habit = client.post("/v1/habits", json={"name": "Journal", "frequency": EVERY_DAY}).json()
    assert habit["created_at"].startswith("2026-10-18T23:30")

    response = client.put(f"/v1/habits/{habit['id']}/records/2026-10-18", json={"done": True})
    assert response.status_code == 200
    stat = _week_stat(client, habit["id"])
    assert (stat["completed_count"], stat["eligible_count"]) == (1, 1)


def test_explicit_utc_created_at_is_converted(app_env, client):
    _use_local_evening(app_env)
    body = {"name": "Journal", "frequency": EVERY_DAY, "created_at": "2026-10-19T02:30:00Z"}
    habit = client.post("/v1/habits", json=body).json()
    assert habit["created_at"] == "2026-10-18T23:30:00-03:00"
    response = client.put(f"/v1/habits/{habit['id']}/records/2026-10-18", json={"done": True})
    assert response.status_code == 200

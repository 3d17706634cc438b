from datetime import date, datetime

from dashboard.data import api_client


def api_enabled():
    return api_client.is_enabled()


def get_habits():
    payload = api_client.request("GET", "/v1/habits") or {}
    return payload.get("items", [])


def add_habit(name, color, frequency, created_at=None):
    body = {"name": name, "color": color, "frequency": sorted(set(frequency))}
    if created_at is not None:
        if isinstance(created_at, date) and not isinstance(created_at, datetime):
            created_at = datetime.combine(created_at, datetime.min.time())
        body["created_at"] = created_at.isoformat()
    return api_client.request("POST", "/v1/habits", json=body)


def get_habit_stats(period):
    return api_client.request("GET", "/v1/habits/stats", params={"period": period})


def get_tracker_grid(days):
    return api_client.request("GET", "/v1/habits/tracker", params={"days": int(days)})


def set_habit_done(habit_id, day, done):
    day_iso = day if isinstance(day, str) else day.isoformat()
    api_client.request("PUT", f"/v1/habits/{habit_id}/records/{day_iso}", json={"done": bool(done)})

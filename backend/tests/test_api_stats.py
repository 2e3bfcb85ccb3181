from datetime import date, datetime, timedelta


def _create(client, distance_m, sport_type="Run", **overrides):
    payload = {
        "name": "Run",
        "sport_type": sport_type,
        "start_date_time": "2025-01-01T07:00:00",
        "distance_m": distance_m,
        "duration": "01:00:00",
    }
    payload.update(overrides)
    r = client.post("/activities/", json=payload)
    assert r.status_code == 200, r.text


def test_eddington_for_runs(client):
    for d in (10000, 10000, 10000, 5000):
        _create(client, d)
    _create(client, 50000, sport_type="Ride")

    data = client.get("/stats/eddington").json()
    assert data["sport"] == "run"
    assert data["unit"] == "km"
    assert data["activity_count"] == 4
    assert (data["eddington"], data["next"], data["needed_for_next"]) == (4, 5, 1)

    data = client.get("/stats/eddington", params={"unit": "imperial"}).json()
    assert data["unit"] == "mi"
    assert (data["eddington"], data["needed_for_next"]) == (3, 1)

    data = client.get("/stats/eddington", params={"sport": "ride"}).json()
    assert data["activity_count"] == 1
    assert data["eddington"] == 1


def test_eddington_without_activities(client):
    data = client.get("/stats/eddington").json()
    assert (data["eddington"], data["next"], data["needed_for_next"]) == (0, 1, 1)


def test_heart_rate_zones(client):
    zones = client.get("/stats/heart-rate-zones", params={"age": 30}).json()
    assert zones[-1]["max_hr"] == 187

    zones = client.get("/stats/heart-rate-zones", params={"max_hr": 190}).json()
    assert zones[0]["min_hr"] == 95
    assert zones[0]["name"] == "Recovery"

    zones = client.get("/stats/heart-rate-zones").json()
    assert zones[-1]["max_hr"] == 187

    r = client.get("/stats/heart-rate-zones", params={"age": 30, "max_hr": 190})
    assert r.status_code == 422


def test_weekly_summary(client):
    now = datetime.now().replace(microsecond=0)
    _create(client, 8000, start_date_time=now.isoformat(), average_heart_rate=150)

    weeks = client.get("/stats/weekly", params={"weeks": 4}).json()
    assert len(weeks) == 4

    today = date.today()
    monday = today - timedelta(days=today.weekday())
    assert weeks[-1]["week_start"] == monday.isoformat()
    assert weeks[-1]["distance"] == 8.0
    assert weeks[-1]["distance_unit"] == "km"
    assert weeks[-1]["moving_time_sec"] == 3600
    assert weeks[-1]["activity_count"] == 1
    assert weeks[-1]["trimp"] > 0
    assert all(w["activity_count"] == 0 for w in weeks[:-1])

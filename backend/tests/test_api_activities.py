def _create(client, **overrides):
    payload = {
        "name": "Test Run",
        "start_date_time": "2025-01-01T07:00:00",
        "distance_m": 5000,
        "duration": "00:25:00",
    }
    payload.update(overrides)
    r = client.post("/activities/", json=payload)
    assert r.status_code == 200, r.text
    return r.json()


def test_root_ok(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "message" in r.json()


def test_create_and_list_activity(client):
    activity = _create(client)
    assert activity["pace"] == "5:00/km"
    assert activity["distance"] == 5.0
    assert activity["distance_unit"] == "km"
    assert activity["duration"] == "00:25:00"
    assert activity["source"] == "manual"
    assert activity["is_race"] is False
    assert activity["start_local"] is not None

    # list within range
    lr = client.get("/activities/", params={"start_date": "2024-12-30", "end_date": "2025-01-02"})
    assert lr.status_code == 200
    assert any(a["name"] == "Test Run" for a in lr.json())

    lr = client.get("/activities/", params={"start_date": "2025-01-02"})
    assert lr.json() == []


def test_list_in_imperial(client):
    _create(client)
    arr = client.get("/activities/", params={"unit": "imperial"}).json()
    assert arr[0]["pace"].endswith("/mi")
    assert arr[0]["distance_unit"] == "mi"
    assert arr[0]["distance"] == 3.11


def test_create_rejects_bad_input(client):
    payload = {"name": "Bad", "start_date_time": "2025-01-01T07:00:00", "duration": "25:00"}
    assert client.post("/activities/", json=payload).status_code == 422

    payload.update(duration="00:25:00", distance_m=0)
    assert client.post("/activities/", json=payload).status_code == 422


def test_update_and_delete(client):
    activity = _create(client)
    r = client.put(f"/activities/{activity['id']}", json={"name": "Renamed", "duration": "00:30:00"})
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Renamed"
    assert r.json()["pace"] == "6:00/km"

    assert client.put(f"/activities/{activity['id']}", json={"duration": "nope"}).status_code == 422

    assert client.delete(f"/activities/{activity['id']}").status_code == 200
    assert client.get(f"/activities/{activity['id']}").status_code == 404


def test_missing_activity(client):
    assert client.get("/activities/999").status_code == 404
    assert client.get("/activities/999/analysis").status_code == 404
    assert client.post("/activities/999/race", json={}).status_code == 404


def test_analysis(client):
    activity = _create(client, average_heart_rate=150, hr_series=[140] * 30 + [160] * 30)

    r = client.get(f"/activities/{activity['id']}/analysis", params={"max_hr": 190})
    assert r.status_code == 200, r.text
    data = r.json()

    assert data["max_hr"] == 190
    assert data["trimp"] > 0
    assert data["hr_drift"] > 0
    assert data["pace_drift"] == 0
    assert len(data["zones"]) == 5
    assert [z["seconds"] for z in data["time_in_zones"]] == [0, 0, 30, 30, 0]
    assert data["average_speed"] == "12.0 km/h"
    assert "**Distance**: 5.00 km" in data["coaching_prompt"]
    assert data["coaching_system_prompt"].startswith("You are an elite endurance coach")


def test_analysis_uses_configured_athlete(client):
    activity = _create(client)
    data = client.get(f"/activities/{activity['id']}/analysis").json()
    # AGE=30 in the test environment
    assert data["max_hr"] == 187
    assert data["trimp"] == 0
    assert [z["seconds"] for z in data["time_in_zones"]] == [0, 0, 0, 0, 0]


def test_race_detection_for_activity(client):
    activity = _create(client, name="Boston Marathon 2024", distance_m=42250, duration="03:10:00")
    r = client.get(f"/activities/{activity['id']}/race-detection")
    assert r.status_code == 200
    data = r.json()
    assert data["detected_distance_class"] == "Marathon"
    assert data["activity_id"] == str(activity["id"])
    assert "Title contains 'boston'" in data["reasons"]


def test_mark_and_unmark_race(client):
    activity = _create(client, name="Parkrun", distance_m=5010)

    r = client.post(
        f"/activities/{activity['id']}/race",
        json={"race_name": "Local Parkrun", "race_distance_class": "5K", "placement": 12, "is_pr": True},
    )
    assert r.status_code == 200, r.text
    assert r.json()["is_race"] is True
    assert r.json()["race_distance_class"] == "5K"

    races = client.get("/activities/", params={"is_race": True}).json()
    assert [a["id"] for a in races] == [activity["id"]]

    r = client.delete(f"/activities/{activity['id']}/race")
    assert r.status_code == 200
    assert r.json()["is_race"] is False
    assert r.json()["race_name"] is None
    assert client.get("/activities/", params={"is_race": True}).json() == []


def test_import_gpx(client, gpx_track):
    r = client.post(
        "/activities/import",
        files={"file": ("morning.gpx", gpx_track.encode("utf-8"), "application/gpx+xml")},
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["name"] == "morning"
    assert data["source"] == "gpx"
    assert data["duration"] == "00:01:00"
    assert data["distance"] == 0.22


def test_import_rejects_unsupported_and_broken_files(client):
    r = client.post("/activities/import", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400

    r = client.post("/activities/import", files={"file": ("broken.gpx", b"not xml", "application/gpx+xml")})
    assert r.status_code == 400


def test_update_cannot_clear_required_fields(client):
    activity = _create(client)

    r = client.put(f"/activities/{activity['id']}", json={"start_date_time": None})
    assert r.status_code == 422
    r = client.put(f"/activities/{activity['id']}", json={"sport_type": None, "name": None})
    assert r.status_code == 422

    # nullable columns can still be cleared
    r = client.put(f"/activities/{activity['id']}", json={"name": None})
    assert r.status_code == 200, r.text
    assert r.json()["name"] is None
    assert r.json()["start_date_time"].startswith("2025-01-01")

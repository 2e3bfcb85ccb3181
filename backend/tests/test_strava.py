from qtrun.api.strava import activity_from_strava, check_rate_limits

SUMMARY = {
    "id": 123456789,
    "name": "Boston Marathon",
    "sport_type": "Run",
    "start_date": "2024-04-15T14:00:00Z",
    "moving_time": 11400,
    "distance": 42300.5,
    "total_elevation_gain": 248.0,
    "average_heartrate": 162.6,
    "max_heartrate": 181.2,
    "average_speed": 3.71,
    "max_speed": 5.2,
    "workout_type": 1,
    "suffer_score": 412.0,
}


def test_activity_from_strava():
    activity = activity_from_strava(SUMMARY)

    assert activity.external_id == "123456789"
    assert activity.source == "strava"
    assert activity.sport_type == "Run"
    assert activity.start_date_time.tzinfo is not None
    assert activity.start_date_time.hour == 14
    assert activity.moving_time_sec == 11400
    assert activity.distance_m == 42300.5
    assert activity.average_heart_rate == 163
    assert activity.max_heart_rate == 181
    assert activity.workout_type == "1"
    assert activity.suffer_score == 412


def test_activity_from_strava_sparse_summary():
    activity = activity_from_strava({"id": 1, "type": "Ride"})

    assert activity.name == "Strava Activity"
    assert activity.sport_type == "Ride"
    assert activity.moving_time_sec == 0
    assert activity.distance_m is None
    assert activity.average_heart_rate is None
    assert activity.workout_type is None
    assert activity.suffer_score is None


def test_check_rate_limits():
    headers = {"X-RateLimit-Limit": "100,1000", "X-RateLimit-Usage": "42,310"}
    assert check_rate_limits(headers) == (100, 42, 1000, 310)


def test_check_rate_limits_defaults():
    assert check_rate_limits({}) == (100, 0, 1000, 0)
    assert check_rate_limits({"X-RateLimit-Limit": "junk"}) == (100, 0, 1000, 0)

import pytest

from qtrun.core.activity_files import haversine, parse_fit, parse_gpx


def test_haversine_one_millidegree_of_latitude():
    assert haversine(0, 0, 0.001, 0) == pytest.approx(111.19, abs=0.01)
    assert haversine(51.5, -0.12, 51.5, -0.12) == 0


def test_parse_gpx(tmp_path, gpx_track):
    path = tmp_path / "morning.gpx"
    path.write_text(gpx_track, encoding="utf-8")

    parsed = parse_gpx(str(path))

    assert parsed.distance_m == pytest.approx(222.39, abs=0.05)
    assert parsed.moving_time_sec == 60
    assert parsed.elevation_m == pytest.approx(5)
    assert parsed.start_date_time.year == 2024
    assert len(parsed.speed_samples) == 2
    assert parsed.average_heart_rate is None
    assert parsed.hr_samples == []


def test_parse_gpx_rejects_garbage(tmp_path):
    path = tmp_path / "broken.gpx"
    path.write_text("this is not xml", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_gpx(str(path))


def test_parse_fit_rejects_garbage(tmp_path):
    path = tmp_path / "broken.fit"
    path.write_bytes(b"definitely not a FIT file")
    with pytest.raises(ValueError):
        parse_fit(str(path))

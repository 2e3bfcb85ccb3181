import os

import pytest

# Use in-memory sqlite for tests; must be set before the app (and engine) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("UNITS", "metric")
os.environ.setdefault("AGE", "30")
os.environ.setdefault("HR_MAX", "")


@pytest.fixture
def db_session():
    from qtrun.db import Base, SessionLocal, engine  # noqa: WPS433
    from qtrun.main import app  # noqa: F401,WPS433  (registers models)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session, tmp_path, monkeypatch):
    from fastapi.testclient import TestClient  # noqa: WPS433
    from qtrun.core.config import settings  # noqa: WPS433
    from qtrun.main import app  # noqa: WPS433

    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "strava_tokens_path", str(tmp_path / "strava" / "tokens.json"))
    return TestClient(app)


@pytest.fixture
def gpx_track():
    """Three points 0.001° of latitude apart, 30 s between each."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="qtrun-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Morning Run</name>
    <trkseg>
      <trkpt lat="0.000" lon="0.0"><ele>10</ele><time>2024-05-01T07:00:00Z</time></trkpt>
      <trkpt lat="0.001" lon="0.0"><ele>15</ele><time>2024-05-01T07:00:30Z</time></trkpt>
      <trkpt lat="0.002" lon="0.0"><ele>12</ele><time>2024-05-01T07:01:00Z</time></trkpt>
    </trkseg>
  </trk>
</gpx>
"""

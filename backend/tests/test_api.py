import pytest
from fastapi.testclient import TestClient

from app.core.deps import get_settings, get_store
from app.main import app


@pytest.fixture
def client(monkeypatch, settings, store_for, weekday_tables):
    monkeypatch.setattr("app.schedule.board.fetch_trip_updates", lambda cfg: [])
    monkeypatch.setattr("app.schedule.board.fetch_scraped_delays", lambda cfg: {})

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store] = lambda: store_for(weekday_tables)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["dataset"]["loaded"] is True
    assert body["dataset"]["trips"] == 1


def test_trains_with_local_time(client):
    r = client.get("/v1/trains", params={"origin": "SF", "destination": "SJ", "at": "2026-10-20T07:00:00"})
    assert r.status_code == 200
    body = r.json()

    assert body["used_fallback_data"] is False
    assert body["is_synthetic"] is False
    assert body["dataset_source"] == "local"
    [train] = body["trains"]
    assert train["train_number"] == "101"
    assert train["type"] == "Local"
    assert train["departure_time"] == "2026-10-20T08:00:00-07:00"
    assert train["duration_minutes"] == 45
    assert train["status"] == "on-time"


def test_trains_with_offset_time(client):
    # 09:00 PDT, after the only train
    r = client.get("/v1/trains", params={"origin": "SF", "destination": "SJ", "at": "2026-10-20T16:00:00+00:00"})
    assert r.status_code == 200
    assert r.json()["trains"] == []


def test_trains_unknown_station(client):
    r = client.get("/v1/trains", params={"origin": "SF", "destination": "NOWHERE", "at": "2026-10-20T07:00:00"})
    assert r.status_code == 200
    assert r.json()["reason"] == "station_not_found"


def test_trains_bad_time(client):
    r = client.get("/v1/trains", params={"origin": "SF", "destination": "SJ", "at": "tomorrow"})
    assert r.status_code == 400


def test_trains_requires_origin(client):
    assert client.get("/v1/trains", params={"destination": "SJ"}).status_code == 422


def test_alerts_without_key(client):
    r = client.get("/v1/alerts")
    assert r.status_code == 200
    assert r.json() == []

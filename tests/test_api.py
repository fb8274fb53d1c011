"""HTTP surface exercised through FastAPI's test client."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from watch_progress.config import ServerConfig
from watch_progress.server import create_app
from watch_progress.store import JsonProgressStore, MemoryProgressStore


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))


def post(client: TestClient, video_id: str, event: str, **body):
    response = client.post(f"/sessions/{video_id}/{event}", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_fresh_session_summary(client):
    body = client.get("/sessions/intro").json()
    assert body["video_id"] == "intro"
    assert body["intervals"] == []
    assert body["progress_percentage"] == 0
    assert body["is_tracking"] is False


def test_playback_flow_reports_progress(client, store):
    post(client, "intro", "duration", duration=100)
    post(client, "intro", "play", time=0)
    post(client, "intro", "time-update", time=1)
    post(client, "intro", "seek", time=50)
    body = post(client, "intro", "pause", time="00:00:52")

    assert body["accepted"] is True
    progress = body["progress"]
    assert progress["intervals"] == [{"start": 0, "end": 1}, {"start": 50, "end": 52}]
    assert progress["total_watched_seconds"] == 3
    assert progress["progress_percentage"] == 3.0
    assert progress["last_position"] == 52
    assert progress["resume_position"] == 52
    assert progress["segment_count"] == 2
    assert progress["watched_display"] == "0:03"
    assert progress["duration_display"] == "1:40"
    assert progress["position_timestamp"] == "00:00:52"
    assert store.load("intro").last_position == 52


def test_gaps_and_watched_queries(client):
    post(client, "intro", "duration", duration=60)
    post(client, "intro", "play", time=10)
    post(client, "intro", "pause", time=20)

    gaps = client.get("/sessions/intro/gaps").json()
    assert gaps == [{"start": 0, "end": 10}, {"start": 20, "end": 60}]
    assert client.get("/sessions/intro/watched", params={"at": 15}).json() == {"at": 15, "watched": True}
    assert client.get("/sessions/intro/watched", params={"at": "0:20"}).json()["watched"] is False


def test_bad_timestamp_is_a_client_error(client):
    response = client.post("/sessions/intro/play", json={"time": "yesterday"})
    assert response.status_code == 400
    response = client.post("/sessions/intro/seek", json={"time": -5})
    assert response.status_code == 400
    assert client.get("/sessions/intro/watched", params={"at": "nope"}).status_code == 400


def test_negative_duration_is_rejected(client):
    response = client.post("/sessions/intro/duration", json={"duration": -1})
    assert response.status_code == 422


def test_reset_deletes_snapshot(client, store):
    post(client, "intro", "play", time=0)
    post(client, "intro", "pause", time=30)
    assert store.load("intro") is not None

    response = client.delete("/sessions/intro")
    assert response.status_code == 204
    assert store.load("intro") is None
    body = client.get("/sessions/intro").json()
    assert body["intervals"] == []
    assert body["last_position"] == 0


def test_sessions_are_independent(client):
    post(client, "a", "play", time=0)
    post(client, "a", "pause", time=10)
    assert client.get("/sessions/b").json()["intervals"] == []


def test_default_store_is_a_json_file(tmp_path):
    config = ServerConfig(data_dir=tmp_path / "data")
    client = TestClient(create_app(config))
    post(client, "intro", "play", time=0)
    post(client, "intro", "pause", time=5)
    assert config.store_path.exists()
    assert JsonProgressStore(config.store_path).load("intro").intervals[0].end == 5

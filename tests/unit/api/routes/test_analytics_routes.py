"""Tests for the analytics service routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jokemesh.apps.analytics import create_app
from jokemesh.core.config import AnalyticsSettings


TRACK_PATH = "/internal/track"
STATS_PATH = "/api/v1/stats"


@pytest.fixture
def app(make_telemetry, analytics_settings: AnalyticsSettings) -> FastAPI:
    telemetry, _ = make_telemetry(analytics_settings)
    return create_app(analytics_settings, telemetry=telemetry)


class TestTrack:
    def test_track_acknowledges(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            response = client.post(TRACK_PATH)
        assert response.status_code == 200
        assert response.json() == {"status": "tracked"}

    def test_track_ignores_body(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            response = client.post(TRACK_PATH, content=b"not json at all")
        assert response.status_code == 200

    def test_track_with_joke_length_header(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            response = client.post(TRACK_PATH, headers={"X-Joke-Length": "42"})
        assert response.status_code == 200


class TestStats:
    def test_initial_stats(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            body = client.get(STATS_PATH).json()

        assert body["total_requests"] == 0
        assert body["total_jokes"] == 0
        assert body["last_update"].endswith("Z")
        assert body["uptime_seconds"] >= 0

    def test_stats_after_tracks(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            for _ in range(5):
                client.post(TRACK_PATH)
            body = client.get(STATS_PATH).json()

        assert body["total_requests"] == 5
        assert body["total_jokes"] == 5

    def test_stats_is_read_only(self, app: FastAPI) -> None:
        with TestClient(app) as client:
            client.post(TRACK_PATH)
            first = client.get(STATS_PATH).json()
            second = client.get(STATS_PATH).json()

        assert first["total_requests"] == second["total_requests"] == 1

    def test_state_is_per_app(self, make_telemetry, analytics_settings) -> None:
        """Counters start from zero for every new app instance."""
        telemetry, _ = make_telemetry(analytics_settings)
        first = create_app(analytics_settings, telemetry=telemetry)
        with TestClient(first) as client:
            client.post(TRACK_PATH)

        second = create_app(analytics_settings, telemetry=telemetry)
        with TestClient(second) as client:
            assert client.get(STATS_PATH).json()["total_requests"] == 0

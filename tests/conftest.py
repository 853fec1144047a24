"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from steamcity.api import ApiService
from steamcity.config import reset_settings

TEST_API_URL = "http://testserver/api"


@pytest.fixture(autouse=True)
def clean_env_for_tests(monkeypatch):
    """Clean environment variables for test isolation.

    Clears every STEAMCITY_* variable and drops cached settings so tests
    never read the developer's configuration.

    This fixture is applied automatically to all tests (autouse=True).
    """
    for name in (
        "STEAMCITY_API_URL",
        "STEAMCITY_API_TIMEOUT",
        "STEAMCITY_DEFAULT_PERIOD",
        "STEAMCITY_DEDUPE_HISTORY",
        "STEAMCITY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mock_experiments() -> list[dict[str, Any]]:
    """Mock experiment records."""
    return [
        {
            "id": "exp-001",
            "title": "Air quality near the school",
            "protocol": "environmental",
            "status": "active",
            "school": "Lycée Victor Hugo, Lyon",
            "studentName": "Camille",
            "description": "Measuring CO2 and particles around the playground",
        },
        {
            "id": "exp-002",
            "title": "Classroom temperature",
            "protocol": "energy",
            "status": "completed",
            "school": "Collège Jean Moulin, Paris",
            "studentName": "Sacha",
        },
        {
            "id": "exp-003",
            "title": "River level",
            "protocol": "mobility",
            "status": "planned",
            "school": "École du Port, Nantes",
        },
    ]


@pytest.fixture
def mock_sensors() -> list[dict[str, Any]]:
    """Mock sensor device records."""
    return [
        {
            "id": "sensor-1",
            "name": "Playground thermometer",
            "sensor_type_id": "temperature",
            "experiment_id": "exp-001",
            "status": "active",
            "metadata": {"manufacturer": "Bosch", "model": "BME280"},
        },
        {
            "id": "sensor-2",
            "name": "Playground hygrometer",
            "sensor_type_id": "humidity",
            "experiment_id": "exp-001",
            "status": "maintenance",
        },
        {
            "id": "sensor-3",
            "name": "Room 12 thermometer",
            "sensor_type_id": "temperature",
            "experiment_id": "exp-002",
            "status": "offline",
        },
    ]


@pytest.fixture
def mock_measurements() -> list[dict[str, Any]]:
    """Mock measurement records, two sensor types over three hours."""
    return [
        {
            "sensor_id": "sensor-1",
            "experiment_id": "exp-001",
            "sensor_type_id": "temperature",
            "timestamp": "2024-01-15T10:00:00Z",
            "value": 18.0,
            "unit": "°C",
            "quality": {"score": 0.9},
        },
        {
            "sensor_id": "sensor-1",
            "experiment_id": "exp-001",
            "sensor_type_id": "temperature",
            "timestamp": "2024-01-15T11:00:00Z",
            "value": 20.0,
            "unit": "°C",
            "quality": 0.7,
        },
        {
            "sensor_id": "sensor-1",
            "experiment_id": "exp-001",
            "sensor_type_id": "temperature",
            "timestamp": "2024-01-15T13:00:00Z",
            "value": 25.0,
            "unit": "°C",
        },
        {
            "sensor_id": "sensor-2",
            "experiment_id": "exp-001",
            "sensor_type_id": "humidity",
            "timestamp": "2024-01-15T12:00:00Z",
            "value": 55.0,
            "unit": "%",
            "quality": 0.8,
        },
    ]


class FakeSteamCityApi:
    """Request handler serving mock records the way the SteamCity API does.

    Every request is recorded in ``requests``. Paths listed in ``failing``
    answer with HTTP 500.
    """

    def __init__(self, experiments, sensors, measurements) -> None:
        self.experiments = experiments
        self.sensors = sensors
        self.measurements = measurements
        self.requests: list[httpx.Request] = []
        self.failing: set[str] = set()

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/api") for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        query = request.url.params

        if path in self.failing:
            return httpx.Response(500, json={"success": False, "error": "boom"})

        if path == "/experiments":
            return self._ok(self.experiments)
        if path.startswith("/experiments/"):
            return self._one(self.experiments, path.rsplit("/", 1)[1])
        if path == "/sensors/devices":
            devices = self.sensors
            if "experimentId" in query:
                devices = [s for s in devices if s["experiment_id"] == query["experimentId"]]
            return self._ok(devices)
        if path.startswith("/sensors/devices/"):
            return self._one(self.sensors, path.rsplit("/", 1)[1])
        if path == "/sensors/measurements":
            rows = self.measurements
            if "sensorId" in query:
                rows = [m for m in rows if m["sensor_id"] == query["sensorId"]]
            if "experimentId" in query:
                rows = [m for m in rows if m["experiment_id"] == query["experimentId"]]
            if "limit" in query:
                rows = rows[: int(query["limit"])]
            return self._ok(rows)
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})
        return httpx.Response(404, json={"success": False, "error": "Not found"})

    def _ok(self, data: Any) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"success": True, "data": data}))

    def _one(self, records: list[dict[str, Any]], record_id: str) -> httpx.Response:
        for record in records:
            if record["id"] == record_id:
                return self._ok(record)
        return httpx.Response(404, json={"success": False, "error": "Not found"})


@pytest.fixture
def fake_api(mock_experiments, mock_sensors, mock_measurements) -> FakeSteamCityApi:
    """Request handler over the mock records."""
    return FakeSteamCityApi(mock_experiments, mock_sensors, mock_measurements)


@pytest.fixture
def api_service(fake_api) -> ApiService:
    """ApiService talking to the fake API through httpx.MockTransport."""
    return ApiService(TEST_API_URL, transport=httpx.MockTransport(fake_api))

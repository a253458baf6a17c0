"""
Tests for the HTTP API.

Covers:
- Root and health endpoints
- Zone, session score, plan and schedule endpoints
- Engine errors mapped to 400 with the error class name
- Request validation failures left as 422
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from trainload.api.dependencies import get_engine_config
from trainload.api.main import app
from trainload.schemas import EngineConfig

FIXTURES = Path(__file__).parent / "fixtures"


def _fixture(name):
    with open(FIXTURES / name) as f:
        return json.load(f)


@pytest.fixture
def client():
    app.dependency_overrides[get_engine_config] = lambda: EngineConfig()
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "Training Load Engine API"


def test_health(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy", "service": "trainload-api"}


def test_zones(client):
    response = client.post("/api/zones", json={"profile": _fixture("profile_full.json")})
    data = response.json()

    assert response.status_code == 200
    assert len(data["power"]["zones"]) == 7
    assert data["power"]["zones"][1]["min"] == 138
    assert data["power"]["zones"][6]["max"] is None
    assert len(data["hr"]["zones"]) == 5
    assert data["hr"]["zones"][0]["substrates"]["kcal_h"] == 1006
    assert data["weekly_tss_capacity"] == 375


def test_zones_max_hr_model(client):
    payload = {"profile": _fixture("profile_full.json"), "hr_zone_model": "max_hr"}
    response = client.post("/api/zones", json=payload)
    zones = response.json()["hr"]["zones"]

    assert response.status_code == 200
    assert [z["max"] for z in zones] == [139, 152, 162, 180, 190]


def test_zones_hr_only(client):
    response = client.post("/api/zones", json={"profile": _fixture("profile_hr_only.json")})
    data = response.json()

    assert response.status_code == 200
    assert data["power"] is None
    assert data["weekly_tss_capacity"] is None


def test_zones_inconsistent_profile(client):
    profile = {"hr_max": 190, "hr_threshold": 170, "hr_rest": 175}
    response = client.post("/api/zones", json={"profile": profile})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidProfile"


def test_score_session(client):
    payload = {
        "session": _fixture("session_intervals.json"),
        "profile": _fixture("profile_full.json"),
    }
    response = client.post("/api/sessions/score", json=payload)
    data = response.json()

    assert response.status_code == 200
    assert data["record"]["tss"] == 50
    assert data["record"]["total_duration_minutes"] == 43
    assert data["record"]["average_power_watts"] == 203
    assert data["workout_type"] == "intervals"
    assert data["primary_zone"] == "Z5"
    assert [b["effective_duration_minutes"] for b in data["blocks"]] == [15, 18, 10]


def test_score_invalid_block(client):
    session = _fixture("session_intervals.json")
    del session["blocks"][1]["num_intervals"]
    payload = {"session": session, "profile": _fixture("profile_full.json")}

    response = client.post("/api/sessions/score", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidBlock"
    assert response.json()["message"].startswith("Block 1:")


def test_score_unknown_zone_is_422(client):
    session = _fixture("session_intervals.json")
    session["blocks"][0]["zone"] = "Z9"
    payload = {"session": session, "profile": _fixture("profile_full.json")}

    response = client.post("/api/sessions/score", json=payload)
    assert response.status_code == 422


def test_plan(client):
    response = client.post("/api/plans", json={"season": _fixture("season_26_weeks.json")})
    data = response.json()

    assert response.status_code == 200
    assert data["phase_breakdown"] == {
        "base": 10, "build": 10, "peak": 4, "race": 3, "recovery": 1
    }
    assert data["calendar"]["total_weeks"] == 28
    assert data["warnings"] == []


def test_plan_rounding_warning(client):
    response = client.post("/api/plans", json={"season": _fixture("season_events.json")})

    assert response.status_code == 200
    assert response.json()["warnings"] == [
        "Phase rounding planned 26 weeks for a 25-week season window"
    ]


def test_plan_without_goal(client):
    response = client.post("/api/plans", json={"season": {"year": 2024}})

    assert response.status_code == 400
    assert response.json()["error"] == "UnplannableSeason"


def test_plan_uses_injected_config(client):
    app.dependency_overrides[get_engine_config] = lambda: EngineConfig(recovery_buffer_days=0)
    response = client.post("/api/plans", json={"season": _fixture("season_26_weeks.json")})

    assert response.json()["calendar"]["total_weeks"] == 26


def test_schedule(client):
    payload = {
        "season": _fixture("season_26_weeks.json"),
        "profile": _fixture("profile_full.json"),
        "rest_days": ["friday"],
    }
    response = client.post("/api/plans/schedule", json=payload)
    data = response.json()

    assert response.status_code == 200
    assert data["session_count"] == len(data["sessions"])
    assert data["total_tss"] == sum(s["tss"] for s in data["sessions"])
    first = data["sessions"][0]
    assert first["session_date"] == "2024-01-01"
    assert first["duration_minutes"] == 74
    assert (first["target_min"], first["target_max"]) == (138, 188)
    assert not any(s["session_date"] == "2024-01-05" for s in data["sessions"])

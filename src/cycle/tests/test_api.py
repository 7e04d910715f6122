"""Tests for the cycle HTTP endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from src.config import get_settings
from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.engine import CycleEngine
from src.dependencies import get_cycle_engine
from src.main import create_app

V1 = "/api/v1/cycle"


@pytest.fixture
def api_engine(cycle_config: CycleConfig) -> CycleEngine:
    return CycleEngine(cycle_config)


@pytest.fixture
def client(api_engine: CycleEngine) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_cycle_engine] = lambda: api_engine
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["cycle_config"] == "1.0"


class TestProfileEndpoints:
    def test_default_profile(self, client: TestClient) -> None:
        body = client.get(f"{V1}/profile").json()
        assert body == {
            "anchor_date": None,
            "cycle_length": 28,
            "period_duration": 5,
            "partner_name": "Partner",
        }

    def test_patch_profile(self, client: TestClient) -> None:
        response = client.patch(f"{V1}/profile", json={"cycle_length": 30})
        assert response.status_code == 200
        assert response.json()["cycle_length"] == 30

    def test_patch_invalid_profile_is_422(self, client: TestClient) -> None:
        response = client.patch(f"{V1}/profile", json={"period_duration": 12})
        assert response.status_code == 422
        assert "period_duration" in response.json()["detail"]

    def test_patch_empty_is_400(self, client: TestClient) -> None:
        assert client.patch(f"{V1}/profile", json={}).status_code == 400

    def test_period_start(self, client: TestClient) -> None:
        response = client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        assert response.status_code == 200
        assert response.json()["anchor_date"] == "2024-01-01"

    def test_reset(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        client.patch(f"{V1}/profile", json={"cycle_length": 30})
        body = client.post(f"{V1}/reset").json()
        assert body["anchor_date"] is None
        assert body["cycle_length"] == 30
        body = client.post(f"{V1}/reset", json={"reset_profile": True}).json()
        assert body["cycle_length"] == 28


class TestStatusEndpoints:
    def test_phase_without_anchor(self, client: TestClient) -> None:
        body = client.get(f"{V1}/phase", params={"as_of": "2024-01-03"}).json()
        assert body["phase"] == "UNKNOWN"
        assert body["cycle_day"] is None

    def test_phase_and_countdown(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        phase = client.get(f"{V1}/phase", params={"as_of": "2024-01-20"}).json()
        assert phase["phase"] == "LUTEAL"
        assert phase["cycle_day"] == 19
        countdown = client.get(f"{V1}/countdown", params={"as_of": "2024-01-03"}).json()
        assert countdown["days_until_next"] == 26

    def test_intel_overdue(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        body = client.get(f"{V1}/intel", params={"as_of": "2024-02-16"}).json()
        assert body["phase"] == "OVERDUE"

    def test_radar(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-29"})
        client.post(f"{V1}/logs/2024-01-15/symptoms/toggle", json={"tag": "Migraine"})
        body = client.get(f"{V1}/radar", params={"as_of": "2024-02-09"}).json()
        assert body["predictions"] == [
            {"date": "2024-02-12", "days_from_now": 3, "incidents": ["Migraine"]}
        ]
        assert body["nearest"]["date"] == "2024-02-12"

    def test_radar_empty_without_anchor(self, client: TestClient) -> None:
        body = client.get(f"{V1}/radar").json()
        assert body == {"predictions": [], "nearest": None}

    def test_calendar(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        body = client.get(
            f"{V1}/calendar", params={"start": "2024-01-01", "end": "2024-01-07"}
        ).json()
        assert len(body) == 7
        assert body[0]["phase"] == "MENSTRUATION"
        assert body[6]["phase"] == "FOLLICULAR"

    def test_calendar_bad_range_is_400(self, client: TestClient) -> None:
        response = client.get(
            f"{V1}/calendar", params={"start": "2024-01-07", "end": "2024-01-01"}
        )
        assert response.status_code == 400


class TestLogEndpoints:
    def test_untouched_log(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        body = client.get(f"{V1}/logs/2024-01-03").json()
        assert body["phase"] == "MENSTRUATION"
        assert all(not item["checked"] for item in body["checklist"])
        assert body["symptom_tags"] == []

    def test_toggle_checklist(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        body = client.post(f"{V1}/logs/2024-01-03/checklist/hydration/toggle").json()
        checked = [item["id"] for item in body["checklist"] if item["checked"]]
        assert checked == ["hydration"]

    def test_toggle_symptom_with_slash(self, client: TestClient) -> None:
        response = client.post(
            f"{V1}/logs/2024-01-03/symptoms/toggle", json={"tag": "Acne / Breakout"}
        )
        assert response.status_code == 200
        assert response.json()["symptom_tags"] == ["Acne / Breakout"]

    def test_blank_symptom_is_422(self, client: TestClient) -> None:
        response = client.post(f"{V1}/logs/2024-01-03/symptoms/toggle", json={"tag": "  "})
        assert response.status_code == 422

    def test_bad_date_is_422(self, client: TestClient) -> None:
        assert client.get(f"{V1}/logs/2024-13-40").status_code == 422

    def test_history(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        client.post(f"{V1}/logs/2024-01-03/symptoms/toggle", json={"tag": "Cramps"})
        client.post(f"{V1}/logs/2024-01-20/checklist/active-listening/toggle")
        rows = client.get(f"{V1}/history").json()
        assert [r["date"] for r in rows] == ["2024-01-20", "2024-01-03"]
        detail = client.get(f"{V1}/history/2024-01-20").json()
        assert detail["phase"] == "LUTEAL"
        assert [i["id"] for i in detail["checked_items"]] == ["active-listening"]

    def test_vocabulary(self, client: TestClient) -> None:
        assert len(client.get(f"{V1}/symptoms/vocabulary").json()["tags"]) == 12


class TestSnapshotEndpoints:
    def test_round_trip(self, client: TestClient) -> None:
        client.post(f"{V1}/period-start", json={"start_date": "2024-01-01"})
        client.post(f"{V1}/logs/2024-01-03/symptoms/toggle", json={"tag": "Cramps"})
        snapshot = client.get(f"{V1}/snapshot").json()

        client.post(f"{V1}/reset", json={"reset_profile": True})
        assert client.get(f"{V1}/snapshot").json() != snapshot

        response = client.put(f"{V1}/snapshot", json=snapshot)
        assert response.status_code == 200
        assert client.get(f"{V1}/snapshot").json() == snapshot

    def test_invalid_snapshot_is_422(self, client: TestClient) -> None:
        response = client.put(
            f"{V1}/snapshot",
            json={"profile": {"cycle_length": 0, "period_duration": 0}},
        )
        assert response.status_code == 422

    def test_malformed_snapshot_is_422(self, client: TestClient) -> None:
        response = client.put(
            f"{V1}/snapshot",
            json={"profile": {"cycle_length": 28, "period_duration": 5}, "daily_logs": {"x": {}}},
        )
        assert response.status_code == 422


class TestResponseHeaders:
    def test_api_responses_are_not_cached(self, client: TestClient) -> None:
        response = client.get(f"{V1}/profile")
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "Content-Security-Policy" in response.headers

    def test_health_is_not_marked_no_store(self, client: TestClient) -> None:
        response = client.get("/health")
        assert "Cache-Control" not in response.headers
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_docs_skip_csp(self, client: TestClient) -> None:
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert "Content-Security-Policy" not in response.headers


class TestEngineDependency:
    @pytest.fixture
    def fresh_caches(self) -> Iterator[None]:
        get_settings.cache_clear()
        get_cycle_engine.cache_clear()
        yield
        get_settings.cache_clear()
        get_cycle_engine.cache_clear()

    def test_config_path_override_leaves_global_config_alone(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_caches: None
    ) -> None:
        config_file = tmp_path / "cycle_config.yaml"
        config_file.write_text('version: "9.9"\nradar:\n  lookahead_days: 7\n', encoding="utf-8")
        monkeypatch.setenv("REDPROTOCOL_CYCLE_CONFIG_PATH", str(config_file))
        global_before = get_cycle_config()

        engine = get_cycle_engine()

        assert engine.config.version == "9.9"
        assert engine.config.radar.lookahead_days == 7
        assert get_cycle_config() is global_before
        assert get_cycle_config().radar.lookahead_days == 5

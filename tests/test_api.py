from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sim_microgrid.api import dependencies
from sim_microgrid.api.app import create_app
from sim_microgrid.application import SimulationApplication
from sim_microgrid.persistence import PersistenceService


def create_test_client(persistence: PersistenceService) -> TestClient:
    """Build a FastAPI test client with dependency overrides for persistence."""
    app = create_app()

    def get_app_service() -> SimulationApplication:
        return SimulationApplication(
            save_outputs=False,
            persistence=persistence,
            result_builder=None,
        )

    app.dependency_overrides[dependencies.get_application_service] = get_app_service
    app.dependency_overrides[dependencies.get_persistence_service] = lambda: persistence
    return TestClient(app)


def test_api_comparison_and_runs(persistence: PersistenceService, simple_scenario_data: dict):
    """Exercise /api/comparison and /api/runs endpoints."""
    client = create_test_client(persistence)
    resp = client.post("/api/comparison", json={"day": 1, "scenario": simple_scenario_data})
    assert resp.status_code == 200
    data = resp.json()
    assert data["scenario"] == "test_minimal"
    assert data["cost_savings"] == pytest.approx(data["baseline"]["cost"] - data["smart"]["cost"])
    assert len(data["plots_data"]["smart"]["soc_pct"]) == 24

    runs_resp = client.get("/api/runs")
    assert runs_resp.status_code == 200
    runs = runs_resp.json()
    assert len(runs) == 1
    assert runs[0]["result_type"] == "comparison"


def test_api_comparison_rejects_invalid_scenario(
    persistence: PersistenceService, simple_scenario_data: dict
):
    client = create_test_client(persistence)
    simple_scenario_data["battery"]["capacity_kwh"] = 0
    resp = client.post("/api/comparison", json={"scenario": simple_scenario_data})
    assert resp.status_code == 422

    resp = client.post("/api/comparison", json={"day": 0})
    assert resp.status_code == 422


def test_api_hour_record_matches_totals(persistence: PersistenceService, simple_scenario_data: dict):
    """Summing the live hours of a mode gives the comparison totals."""
    client = create_test_client(persistence)
    totals = client.post("/api/comparison", json={"scenario": simple_scenario_data}).json()

    costs = []
    for hour in range(24):
        resp = client.post(
            "/api/comparison/hour",
            json={"hour": hour, "mode": "smart", "scenario": simple_scenario_data},
        )
        assert resp.status_code == 200
        costs.append(resp.json()["cost"])
    assert sum(costs) == pytest.approx(totals["smart"]["cost"])

    bad = client.post("/api/comparison/hour", json={"hour": 24, "mode": "smart"})
    assert bad.status_code == 422
    bad = client.post("/api/comparison/hour", json={"hour": 3, "mode": "greedy"})
    assert bad.status_code == 422


def test_save_and_run_scenario(persistence: PersistenceService, simple_scenario_data: dict):
    """Save a scenario document and run it by ID."""
    client = create_test_client(persistence)
    save_resp = client.post(
        "/api/configurations",
        json={"name": "Cloudy evening", "config_type": "scenario", "data": simple_scenario_data},
    )
    assert save_resp.status_code == 200
    saved = save_resp.json()

    listed = client.get("/api/configurations", params={"type": "scenario"}).json()
    assert [c["name"] for c in listed] == ["Cloudy evening"]

    run_resp = client.post(f"/api/configurations/{saved['id']}/run?day=1")
    assert run_resp.status_code == 200
    result = run_resp.json()
    assert result["scenario"] == "Cloudy evening"
    assert "cost_savings" in result


def test_run_saved_configuration_errors(persistence: PersistenceService):
    client = create_test_client(persistence)
    assert client.post("/api/configurations/999/run").status_code == 404

    other = client.post(
        "/api/configurations",
        json={"name": "notes", "config_type": "notes", "data": {}},
    ).json()
    assert client.post(f"/api/configurations/{other['id']}/run").status_code == 400

    broken = client.post(
        "/api/configurations",
        json={"name": "broken", "data": {"solar": {"weather": "foggy"}}},
    ).json()
    assert client.post(f"/api/configurations/{broken['id']}/run").status_code == 422


def test_application_dependency_honours_save_flag(monkeypatch, persistence: PersistenceService, tmp_path):
    monkeypatch.setattr(dependencies, "get_persistence_service", lambda: persistence)
    monkeypatch.setenv("SIM_MICROGRID_RESULTS_DIR", str(tmp_path))

    monkeypatch.delenv("SIM_MICROGRID_API_SAVE_OUTPUTS", raising=False)
    service = dependencies.get_application_service()
    assert service.save_outputs is False
    assert service.result_builder is None

    monkeypatch.setenv("SIM_MICROGRID_API_SAVE_OUTPUTS", "1")
    service = dependencies.get_application_service()
    assert service.save_outputs is True
    assert service.result_builder.output_root == tmp_path
    assert service.persistence is persistence

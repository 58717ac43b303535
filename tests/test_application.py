from __future__ import annotations

import pytest

from sim_microgrid.application import SimulationApplication
from sim_microgrid.persistence import PersistenceService


def _app(persistence: PersistenceService | None) -> SimulationApplication:
    return SimulationApplication(
        save_outputs=False,
        persistence=persistence,
        result_builder=None,
    )


def test_simulation_application_run_comparison_records_run(
    persistence: PersistenceService,
    simple_scenario_data: dict,
):
    """Run the comparison workflow and assert a DB record is inserted."""
    summary = _app(persistence).run_comparison(scenario_data=simple_scenario_data)
    assert summary["scenario"] == "test_minimal"
    assert summary["day"] == 1
    assert summary["cost_savings"] == pytest.approx(
        summary["baseline"]["cost"] - summary["smart"]["cost"]
    )
    assert len(summary["plots_data"]["hours"]) == 24
    assert summary["output_dir"] is None

    runs = persistence.list_run_results(limit=5)
    assert runs, "Expected a run result stored in the database"
    assert runs[0].result_type == "comparison"
    assert "plots_data" not in runs[0].summary
    scenarios = persistence.list_scenarios()
    assert scenarios[0].extra_metadata["weather"] == "cloudy"


def test_run_comparison_uses_bundled_default_scenario():
    summary = _app(None).run_comparison()
    assert summary["scenario"]
    assert summary["baseline"]["load_kwh"] > 0.0


def test_run_comparison_rejects_invalid_battery(simple_scenario_data: dict):
    simple_scenario_data["battery"]["round_trip_efficiency"] = 1.5
    with pytest.raises(ValueError):
        _app(None).run_comparison(scenario_data=simple_scenario_data)


def test_live_hour_matches_comparison(simple_scenario_data: dict):
    app = _app(None)
    summary = app.run_comparison(scenario_data=simple_scenario_data)
    costs = [
        app.live_hour(hour=hour, mode="smart", scenario_data=simple_scenario_data)["cost"]
        for hour in range(24)
    ]
    assert sum(costs) == pytest.approx(summary["smart"]["cost"])

    record = app.live_hour(hour=20, mode="baseline", scenario_data=simple_scenario_data)
    assert record["mode"] == "baseline"
    assert record["is_peak"] is True
    assert "Television" in record["active_appliances"]


def test_step_session_crosses_midnight(simple_scenario_data: dict):
    result = _app(None).step_session(hours=26, mode="smart", scenario_data=simple_scenario_data)
    records = result["records"]
    assert len(records) == 26
    assert [r["day"] for r in records[23:]] == [1, 2, 2]
    assert records[24]["hour"] == 0
    assert result["status"]["day"] == 2
    assert result["status"]["hour"] == 2

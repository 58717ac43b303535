from __future__ import annotations

import pytest

from sim_microgrid.persistence import PersistenceService, _asdict_safe
from sim_microgrid.simulation.comparison import compare_day
from sim_microgrid.simulation.energy_simulator import MicrogridConfig


def test_persistence_records_scenarios_and_runs(persistence: PersistenceService):
    """Verify scenarios and runs can be stored and retrieved."""
    scenario = persistence.record_scenario(
        "Scenario Test",
        config=MicrogridConfig(battery_capacity_kwh=13.5),
        metadata={"note": "unit test"},
    )
    assert scenario.id is not None
    assert scenario.config["battery_capacity_kwh"] == 13.5
    assert scenario.config["peak_hours"] == [17, 18, 19, 20, 21, 22]

    run = persistence.record_run_result(
        "comparison",
        {"cost_savings": 12.5},
        scenario=scenario,
        output_dir="results/test",
    )
    assert run.id is not None

    runs = persistence.list_run_results(limit=5)
    assert len(runs) == 1
    assert runs[0].summary["cost_savings"] == 12.5
    assert runs[0].scenario_id == scenario.id
    assert [s.name for s in persistence.list_scenarios()] == ["Scenario Test"]


def test_record_comparison_links_scenario_and_copies_costs(
    persistence: PersistenceService, make_day_inputs
):
    config = MicrogridConfig(initial_soc_pct=20.0, min_soc_pct=20.0)
    load = [4.0 if 17 <= h <= 22 else 2.0 for h in range(24)]
    comparison = compare_day(make_day_inputs(0.0, load, config), config)

    run = persistence.record_comparison(
        "evening",
        config=config,
        summary=comparison.summary(),
        day=3,
        metadata={"weather": "rainy"},
    )

    assert run.scenario_id is not None
    assert run.day == 3
    assert run.baseline_cost == pytest.approx(comparison.baseline.totals.cost)
    assert run.smart_cost == pytest.approx(comparison.smart.totals.cost)
    assert run.cost_savings == pytest.approx(comparison.cost_savings)
    scenario = persistence.list_scenarios()[0]
    assert scenario.id == run.scenario_id
    assert scenario.extra_metadata == {"weather": "rainy"}


def test_runs_are_listed_newest_first(persistence: PersistenceService):
    for value in (1.0, 2.0, 3.0):
        persistence.record_run_result("comparison", {"cost_savings": value})
    persistence.record_run_result("other", {})
    runs = persistence.list_run_results(limit=2, result_type="comparison")
    assert [r.cost_savings for r in runs] == [3.0, 2.0]
    assert runs[0].baseline_cost is None
    assert len(persistence.list_run_results()) == 4


def test_save_configuration_upserts_by_name(persistence: PersistenceService):
    first = persistence.save_configuration("evening", "scenario", {"battery": {"capacity_kwh": 10}})
    second = persistence.save_configuration("evening", "scenario", {"battery": {"capacity_kwh": 20}})
    assert first.id == second.id

    stored = persistence.get_configuration_by_name("evening")
    assert stored.data["battery"]["capacity_kwh"] == 20
    assert persistence.get_configuration_by_id(first.id).name == "evening"
    assert persistence.get_configuration_by_id(999) is None

    persistence.save_configuration("notes", "other", {})
    assert [c.name for c in persistence.list_configurations("scenario")] == ["evening"]
    assert len(persistence.list_configurations()) == 2


def test_asdict_safe_rejects_unknown_objects():
    assert _asdict_safe(None) == {}
    assert _asdict_safe({"a": 1}) == {"a": 1}
    with pytest.raises(TypeError):
        _asdict_safe(object())

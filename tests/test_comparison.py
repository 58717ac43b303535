from __future__ import annotations

import pytest

from sim_microgrid.simulation.comparison import (
    ComparisonOrchestrator,
    build_day_inputs,
    compare_day,
)
from sim_microgrid.simulation.energy_simulator import MicrogridConfig
from sim_microgrid.simulation.profiles import DayProfileBuilder, HourSample, StaticSampleSource

EVENING_LOAD = [4.0 if 17 <= h <= 22 else 2.0 for h in range(24)]


def _evening_source() -> StaticSampleSource:
    return StaticSampleSource.from_arrays([0.0] * 24, EVENING_LOAD)


def test_build_day_inputs_prices_each_hour() -> None:
    config = MicrogridConfig(base_grid_price=8.0, peak_factor=2.0)
    samples = [HourSample(1.0, 2.0, ("Lights",))] * 24
    inputs = build_day_inputs(samples, config)
    assert [inp.hour for inp in inputs] == list(range(24))
    assert inputs[3].tariff == pytest.approx(8.0)
    assert inputs[18].tariff == pytest.approx(16.0)
    assert inputs[18].is_peak
    assert inputs[0].active_appliances == ("Lights",)


def test_build_day_inputs_requires_full_day() -> None:
    with pytest.raises(ValueError):
        build_day_inputs([(0.0, 1.0)] * 23, MicrogridConfig())
    with pytest.raises(ValueError):
        build_day_inputs([(0.0, -1.0)] * 24, MicrogridConfig())


def test_both_policies_consume_identical_inputs(make_day_inputs) -> None:
    config = MicrogridConfig()
    comparison = compare_day(make_day_inputs(0.0, EVENING_LOAD, config), config)
    assert comparison.baseline.inputs == comparison.smart.inputs == comparison.inputs
    assert [f.load_kw for f in comparison.baseline.hourly] == [f.load_kw for f in comparison.smart.hourly]
    assert [f.tariff for f in comparison.baseline.hourly] == [f.tariff for f in comparison.smart.hourly]


def test_savings_are_differences_of_totals(make_day_inputs) -> None:
    config = MicrogridConfig(initial_soc_pct=20.0, min_soc_pct=20.0)
    comparison = compare_day(make_day_inputs(0.0, EVENING_LOAD, config), config)
    base, smart = comparison.baseline.totals, comparison.smart.totals
    assert comparison.cost_savings == pytest.approx(base.cost - smart.cost)
    assert comparison.co2_savings_kg == pytest.approx(base.co2_kg - smart.co2_kg)
    assert comparison.grid_kwh_delta == pytest.approx(smart.grid_kwh - base.grid_kwh)
    assert comparison.savings_pct == pytest.approx(100.0 * comparison.cost_savings / base.cost)

    summary = comparison.summary()
    assert set(summary) == {
        "baseline",
        "smart",
        "cost_savings",
        "co2_savings_kg",
        "savings_pct",
        "grid_kwh_delta",
        "final_soc_pct",
    }
    assert summary["smart"]["cost"] == pytest.approx(smart.cost)
    assert summary["final_soc_pct"]["smart"] == pytest.approx(comparison.smart.hourly[-1].soc_pct)


def test_savings_pct_is_zero_for_free_day(make_day_inputs) -> None:
    config = MicrogridConfig(peak_hours=())
    comparison = compare_day(make_day_inputs(4.0, 1.0, config), config)
    assert comparison.baseline.totals.cost == 0.0
    assert comparison.savings_pct == 0.0


def test_hour_record_validation(make_day_inputs) -> None:
    config = MicrogridConfig()
    comparison = compare_day(make_day_inputs(0.0, 2.0, config), config)
    assert comparison.hour_record(5, "smart") is comparison.smart.hourly[5]
    assert comparison.hour_record(5, "BASELINE") is comparison.baseline.hourly[5]
    with pytest.raises(ValueError):
        comparison.hour_record(24, "smart")
    with pytest.raises(ValueError):
        comparison.trace("greedy")


def test_orchestrator_caches_each_day() -> None:
    orchestrator = ComparisonOrchestrator(MicrogridConfig(), _evening_source())
    first = orchestrator.prepare(1)
    assert orchestrator.prepare(1) is first
    assert orchestrator.prepare(2) is not first

    orchestrator.invalidate(1)
    assert orchestrator.prepare(1) is not first

    orchestrator.invalidate()
    assert orchestrator._cache == {}


def test_live_hours_add_up_to_cached_totals() -> None:
    orchestrator = ComparisonOrchestrator(MicrogridConfig(), DayProfileBuilder(weather="sunny"))
    comparison = orchestrator.prepare(1)
    for mode in ("baseline", "smart"):
        records = [orchestrator.live_hour(1, hour, mode) for hour in range(24)]
        assert sum(r.cost for r in records) == pytest.approx(comparison.trace(mode).totals.cost)
        assert records == comparison.trace(mode).hourly


def test_config_override_applies_to_uncached_day_only() -> None:
    config = MicrogridConfig(initial_soc_pct=50.0)
    orchestrator = ComparisonOrchestrator(config, _evening_source())
    day2 = orchestrator.prepare(2, config=config.with_initial_soc(90.0))
    assert day2.smart.hourly[0].soc_pct > orchestrator.prepare(1).smart.hourly[0].soc_pct

    again = orchestrator.prepare(2, config=config.with_initial_soc(10.0))
    assert again is day2

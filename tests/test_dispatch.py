from __future__ import annotations

import warnings

import pytest

from sim_microgrid.simulation.battery import BatteryState
from sim_microgrid.simulation.dispatch import (
    DayForecast,
    HourInput,
    UnmetLoadWarning,
    dispatch_hour,
)
from sim_microgrid.simulation.policies import BaselinePolicy, DispatchPolicy

GRID_KWARGS = dict(
    grid_limit_kw=5.0,
    diesel_price=25.0,
    co2_per_grid_kwh=0.5,
    co2_per_diesel_kwh=0.8,
)


class _ChargeFromGridPolicy(DispatchPolicy):
    """Never discharges, always asks the grid for ``desired`` kW."""

    name = "test"

    def __init__(self, desired: float) -> None:
        self.desired = desired

    def allow_discharge(self, ctx) -> bool:
        return False

    def allow_grid_charge(self, ctx) -> bool:
        return True

    def desired_grid_charge_kw(self, ctx) -> float:
        return self.desired


def _battery(soc=5.0, floor=2.0) -> BatteryState:
    return BatteryState(10.0, soc, floor, 0.9, 0.9, 2.5, 2.5)


def _forecast(*inputs: HourInput) -> DayForecast:
    return DayForecast(tuple(inputs))


def test_hour_input_validation() -> None:
    with pytest.raises(ValueError):
        HourInput(hour=24, solar_gen_kw=0.0, load_kw=1.0, tariff=10.0)
    with pytest.raises(ValueError):
        HourInput(hour=3, solar_gen_kw=-0.1, load_kw=1.0, tariff=10.0)
    with pytest.raises(ValueError):
        HourInput(hour=3, solar_gen_kw=0.0, load_kw=float("nan"), tariff=10.0)
    assert HourInput(hour=3, solar_gen_kw=1.0, load_kw=3.0, tariff=10.0).deficit_kw == pytest.approx(2.0)


def test_forecast_deficits() -> None:
    inputs = [
        HourInput(hour=h, solar_gen_kw=1.0, load_kw=8.0 if h >= 17 else 2.0, tariff=10.0, is_peak=h >= 17)
        for h in range(24)
    ]
    forecast = DayForecast(inputs)
    assert len(forecast) == 24
    assert forecast.total_deficit_kwh() == pytest.approx(17 * 1.0 + 7 * 7.0)
    assert forecast.peak_deficit_kwh_from(20) == pytest.approx(4 * 7.0)
    assert forecast.diesel_risk_kwh_from(0, grid_limit_kw=5.0) == pytest.approx(7 * 2.0)


def test_solar_serves_load_then_charges_battery_then_curtails() -> None:
    inp = HourInput(hour=12, solar_gen_kw=6.0, load_kw=2.0, tariff=10.0)
    battery = _battery()
    flows = dispatch_hour(inp, battery, BaselinePolicy(), _forecast(inp), **GRID_KWARGS)

    assert flows.solar_to_load_kw == pytest.approx(2.0)
    assert flows.solar_to_batt_kw == pytest.approx(2.5)
    assert flows.curtailed_solar_kw == pytest.approx(1.5)
    assert flows.grid_import_kw == 0.0
    assert flows.cost == 0.0
    assert flows.soc_kwh == pytest.approx(5.0 + 2.5 * 0.9)


def test_deficit_served_by_battery_then_grid_then_diesel() -> None:
    inp = HourInput(hour=2, solar_gen_kw=0.0, load_kw=9.0, tariff=10.0)
    battery = _battery(soc=5.0, floor=2.0)
    flows = dispatch_hour(inp, battery, BaselinePolicy(), _forecast(inp), **GRID_KWARGS)

    assert flows.batt_to_load_kw == pytest.approx(2.5)
    assert flows.grid_to_load_kw == pytest.approx(5.0)
    assert flows.diesel_to_load_kw == pytest.approx(1.5)
    assert flows.unmet_load_kw == 0.0
    assert flows.cost == pytest.approx(5.0 * 10.0 + 1.5 * 25.0)
    assert flows.co2_kg == pytest.approx(5.0 * 0.5 + 1.5 * 0.8)
    assert flows.battery_power_kw == pytest.approx(2.5)


def test_policy_refusal_skips_battery() -> None:
    inp = HourInput(hour=2, solar_gen_kw=0.0, load_kw=3.0, tariff=10.0)
    battery = _battery()
    flows = dispatch_hour(inp, battery, _ChargeFromGridPolicy(0.0), _forecast(inp), **GRID_KWARGS)
    assert flows.batt_to_load_kw == 0.0
    assert flows.grid_to_load_kw == pytest.approx(3.0)
    assert battery.soc_kwh == pytest.approx(5.0)


def test_peak_tie_in_floor_is_billed() -> None:
    inp = HourInput(hour=19, solar_gen_kw=5.0, load_kw=1.0, tariff=15.0, is_peak=True)
    flows = dispatch_hour(inp, _battery(), BaselinePolicy(), _forecast(inp), **GRID_KWARGS)
    assert flows.grid_to_load_kw == pytest.approx(0.5)
    assert flows.grid_import_kw == pytest.approx(0.5)
    assert flows.cost == pytest.approx(0.5 * 15.0)


def test_peak_floor_can_be_disabled() -> None:
    inp = HourInput(hour=19, solar_gen_kw=5.0, load_kw=1.0, tariff=15.0, is_peak=True)
    flows = dispatch_hour(
        inp, _battery(), BaselinePolicy(), _forecast(inp), peak_min_grid_kw=0.0, **GRID_KWARGS
    )
    assert flows.grid_import_kw == 0.0


def test_grid_charge_bounded_by_grid_headroom() -> None:
    inp = HourInput(hour=1, solar_gen_kw=0.0, load_kw=4.0, tariff=10.0)
    battery = _battery(soc=3.0)
    flows = dispatch_hour(inp, battery, _ChargeFromGridPolicy(3.0), _forecast(inp), **GRID_KWARGS)

    assert flows.grid_to_load_kw == pytest.approx(4.0)
    assert flows.grid_to_batt_kw == pytest.approx(1.0)
    assert flows.grid_import_kw == pytest.approx(5.0)
    assert flows.cost == pytest.approx(5.0 * 10.0)
    assert flows.battery_power_kw == pytest.approx(-1.0)


def test_negative_desired_charge_is_ignored() -> None:
    inp = HourInput(hour=1, solar_gen_kw=0.0, load_kw=1.0, tariff=10.0)
    battery = _battery()
    flows = dispatch_hour(inp, battery, _ChargeFromGridPolicy(-4.0), _forecast(inp), **GRID_KWARGS)
    assert flows.grid_to_batt_kw == 0.0
    assert battery.soc_kwh == pytest.approx(5.0)


def test_valid_dispatch_never_leaves_load_unmet() -> None:
    inp = HourInput(hour=20, solar_gen_kw=0.0, load_kw=30.0, tariff=15.0, is_peak=True)
    with warnings.catch_warnings():
        warnings.simplefilter("error", UnmetLoadWarning)
        flows = dispatch_hour(inp, _battery(), BaselinePolicy(), _forecast(inp), **GRID_KWARGS)
    assert flows.unmet_load_kw == 0.0
    assert flows.diesel_to_load_kw == pytest.approx(30.0 - 5.0 - 2.5)

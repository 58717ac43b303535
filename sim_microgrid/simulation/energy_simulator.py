"""
Day-level simulation driver.

Threads one fresh :class:`BatteryState` through 24 calls of
:func:`dispatch_hour` for a given policy and accumulates the day's totals.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, AbstractSet, Dict, List, Mapping, Sequence, Tuple

from .battery import BatteryConfig, BatteryState
from .dispatch import DEFAULT_PEAK_MIN_GRID_KW, DayForecast, HourFlows, HourInput, dispatch_hour
from .policies import DispatchPolicy
from .prices import DEFAULT_PEAK_HOURS, HOURS_PER_DAY, TimeOfUseTariff

DEFAULT_C_RATE = 0.25


@dataclass
class MicrogridConfig:
    """
    Configuration of the microgrid and of the battery for one simulated day.

    Attributes:
        base_grid_price: Off-peak grid price (currency/kWh).
        peak_factor: Peak price multiplier (>= 1).
        diesel_price: Diesel generation price (currency/kWh).
        peak_hours: Hours of day belonging to the peak window.
        grid_limit_kw: Maximum grid import (kW).
        peak_min_grid_kw: Minimum grid draw enforced during peak hours (kW).
        co2_per_grid_kwh: Emission factor of grid energy (kg/kWh).
        co2_per_diesel_kwh: Emission factor of diesel energy (kg/kWh).
        battery_capacity_kwh: Battery usable capacity (kWh).
        initial_soc_pct: Battery SoC at hour 0 (%).
        min_soc_pct: Battery SoC floor (%).
        round_trip_efficiency: Battery round-trip efficiency (0, 1].
        max_charge_kw: Charge power limit (kW). Defaults to C/4.
        max_discharge_kw: Discharge power limit (kW). Defaults to C/4.

    Example:
        ```python
        config = MicrogridConfig(battery_capacity_kwh=13.5, initial_soc_pct=30.0)
        config.max_charge_kw  # 3.375 (C/4)
        ```

    Raises:
        ValueError: On any invariant violation (non-positive capacity,
            efficiency outside (0, 1], SoC floor above capacity, negative
            prices or limits, peak hours outside 0-23).
    """

    base_grid_price: float = 10.0
    peak_factor: float = 1.5
    diesel_price: float = 25.0
    peak_hours: AbstractSet[int] = DEFAULT_PEAK_HOURS
    grid_limit_kw: float = 5.0
    peak_min_grid_kw: float = DEFAULT_PEAK_MIN_GRID_KW
    co2_per_grid_kwh: float = 0.5
    co2_per_diesel_kwh: float = 0.8
    battery_capacity_kwh: float = 10.0
    initial_soc_pct: float = 50.0
    min_soc_pct: float = 20.0
    round_trip_efficiency: float = 0.88
    max_charge_kw: float | None = None
    max_discharge_kw: float | None = None

    def __post_init__(self) -> None:
        self.peak_hours = frozenset(int(h) for h in self.peak_hours)
        if self.max_charge_kw is None:
            self.max_charge_kw = self.battery_capacity_kwh * DEFAULT_C_RATE
        if self.max_discharge_kw is None:
            self.max_discharge_kw = self.battery_capacity_kwh * DEFAULT_C_RATE

        for name in (
            "diesel_price",
            "grid_limit_kw",
            "peak_min_grid_kw",
            "co2_per_grid_kwh",
            "co2_per_diesel_kwh",
        ):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be >= 0")
        if self.peak_min_grid_kw > self.grid_limit_kw:
            raise ValueError("peak_min_grid_kw must not exceed grid_limit_kw")
        # Both raise ValueError on invalid values.
        self.tariff_model()
        self.battery_config()

    def tariff_model(self) -> TimeOfUseTariff:
        return TimeOfUseTariff(self.base_grid_price, self.peak_factor, self.peak_hours)

    def battery_config(self) -> BatteryConfig:
        return BatteryConfig(
            capacity_kwh=self.battery_capacity_kwh,
            initial_soc_pct=self.initial_soc_pct,
            min_soc_pct=self.min_soc_pct,
            round_trip_efficiency=self.round_trip_efficiency,
            max_charge_kw=float(self.max_charge_kw),
            max_discharge_kw=float(self.max_discharge_kw),
        )

    def with_initial_soc(self, initial_soc_pct: float) -> "MicrogridConfig":
        """Copy of this configuration starting the day at another SoC."""
        return replace(self, initial_soc_pct=max(0.0, min(100.0, initial_soc_pct)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MicrogridConfig":
        """
        Build a configuration from a flat mapping of field names.

        Raises:
            ValueError: If the mapping contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown microgrid config keys: {sorted(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["peak_hours"] = sorted(self.peak_hours)
        return data


@dataclass
class DayTotals:
    """Energy, cost and emission totals of one simulated day."""

    cost: float = 0.0
    grid_kwh: float = 0.0
    diesel_kwh: float = 0.0
    solar_to_load_kwh: float = 0.0
    solar_to_batt_kwh: float = 0.0
    batt_to_load_kwh: float = 0.0
    co2_kg: float = 0.0
    load_kwh: float = 0.0
    unmet_kwh: float = 0.0

    def add(self, flows: HourFlows) -> None:
        self.cost += flows.cost
        self.grid_kwh += flows.grid_import_kw
        self.diesel_kwh += flows.diesel_to_load_kw
        self.solar_to_load_kwh += flows.solar_to_load_kw
        self.solar_to_batt_kwh += flows.solar_to_batt_kw
        self.batt_to_load_kwh += flows.batt_to_load_kw
        self.co2_kg += flows.co2_kg
        self.load_kwh += flows.load_kw
        self.unmet_kwh += flows.unmet_load_kw

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class DaySimulation:
    """
    Full-day trace of one policy.

    Attributes:
        policy_name: Name of the policy that produced the trace.
        inputs: The exact hourly inputs consumed (shared across policies).
        hourly: One HourFlows record per hour, in hour order.
        totals: Sum of the hourly records.
    """

    policy_name: str
    inputs: Tuple[HourInput, ...]
    hourly: List[HourFlows] = field(default_factory=list)
    totals: DayTotals = field(default_factory=DayTotals)

    @property
    def final_soc_pct(self) -> float:
        return self.hourly[-1].soc_pct if self.hourly else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy_name,
            "hourly": [h.to_dict() for h in self.hourly],
            "totals": self.totals.to_dict(),
        }


def _check_day_inputs(day_inputs: Sequence[HourInput]) -> Tuple[HourInput, ...]:
    inputs = tuple(day_inputs)
    if len(inputs) != HOURS_PER_DAY:
        raise ValueError(f"day_inputs must contain {HOURS_PER_DAY} hours, got {len(inputs)}")
    for expected, inp in enumerate(inputs):
        if inp.hour != expected:
            raise ValueError(f"day_inputs must be ordered by hour: position {expected} holds hour {inp.hour}")
    return inputs


def simulate_day(
    day_inputs: Sequence[HourInput] | DayForecast,
    config: MicrogridConfig,
    policy: DispatchPolicy,
) -> DaySimulation:
    """
    Simulate 24 hours of dispatch for one policy.

    A fresh battery is built from ``config`` and threaded through the hours in
    increasing order. The function has no hidden randomness or clock
    dependence: identical arguments give identical traces.

    Args:
        day_inputs: 24 HourInput records, ordered by hour 0-23.
        config: Microgrid configuration.
        policy: Dispatch policy for the day.

    Returns:
        DaySimulation with hourly records and totals.

    Raises:
        ValueError: If the inputs are not 24 hours in order.
    """
    if isinstance(day_inputs, DayForecast):
        day_inputs = day_inputs.inputs
    inputs = _check_day_inputs(day_inputs)
    forecast = DayForecast(inputs)
    battery = BatteryState.from_config(config.battery_config())

    result = DaySimulation(policy_name=policy.name, inputs=inputs)
    for hour_input in inputs:
        flows = dispatch_hour(
            hour_input,
            battery,
            policy,
            forecast,
            grid_limit_kw=config.grid_limit_kw,
            diesel_price=config.diesel_price,
            co2_per_grid_kwh=config.co2_per_grid_kwh,
            co2_per_diesel_kwh=config.co2_per_diesel_kwh,
            peak_min_grid_kw=config.peak_min_grid_kw,
        )
        result.hourly.append(flows)
        result.totals.add(flows)
    return result

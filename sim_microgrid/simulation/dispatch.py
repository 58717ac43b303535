"""
Hourly energy-flow allocation.

One call to :func:`dispatch_hour` allocates one hour of solar generation,
battery storage, grid import and diesel backup against the household load in
a fixed priority order and prices the result. The battery passed in is the
only thing mutated.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Sequence, Tuple

from .battery import BatteryState

if TYPE_CHECKING:
    from .policies import DispatchPolicy

logger = logging.getLogger(__name__)

DEFAULT_PEAK_MIN_GRID_KW = 0.5


class UnmetLoadWarning(RuntimeWarning):
    """Emitted when an hour ends with load that no source could serve."""


@dataclass(frozen=True)
class HourInput:
    """
    Exogenous conditions for one hour of the day.

    Built once per simulated day and shared, unchanged, by every policy that
    is evaluated on that day.

    Attributes:
        hour: Hour of day (0-23).
        solar_gen_kw: Solar generation (kW, >= 0).
        load_kw: Household demand (kW, >= 0).
        tariff: Grid price for this hour (currency/kWh).
        is_peak: Whether the hour falls in the peak window.
        active_appliances: Names of appliances running this hour (display only).
    """

    hour: int
    solar_gen_kw: float
    load_kw: float
    tariff: float
    is_peak: bool = False
    active_appliances: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.hour < 24:
            raise ValueError(f"hour must be within 0-23, got {self.hour}")
        for name in ("solar_gen_kw", "load_kw", "tariff"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"{name} must be a finite value >= 0, got {value}")

    @property
    def deficit_kw(self) -> float:
        """Load not covered by solar in this hour."""
        return max(0.0, self.load_kw - self.solar_gen_kw)


@dataclass(frozen=True)
class DayForecast:
    """
    Immutable view of the full day's hourly inputs for look-ahead policies.

    Example:
        ```python
        forecast = DayForecast(day_inputs)
        forecast.total_deficit_kwh()
        forecast.peak_deficit_kwh_from(hour=10)
        ```
    """

    inputs: Tuple[HourInput, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))

    def __len__(self) -> int:
        return len(self.inputs)

    def __getitem__(self, index: int) -> HourInput:
        return self.inputs[index]

    def deficit_kwh(self, hour: int) -> float:
        return self.inputs[hour].deficit_kw

    def total_deficit_kwh(self) -> float:
        """Sum over the day of max(0, load - solar)."""
        return sum(inp.deficit_kw for inp in self.inputs)

    def peak_deficit_kwh_from(self, hour: int) -> float:
        """Solar deficit summed over the peak hours from ``hour`` onwards."""
        return sum(inp.deficit_kw for inp in self.inputs[max(hour, 0):] if inp.is_peak)

    def diesel_risk_kwh_from(self, hour: int, grid_limit_kw: float) -> float:
        """Peak-hour deficit beyond the grid limit from ``hour`` onwards."""
        return sum(
            max(0.0, inp.deficit_kw - grid_limit_kw)
            for inp in self.inputs[max(hour, 0):]
            if inp.is_peak
        )


@dataclass(frozen=True)
class DispatchContext:
    """Read-only information handed to a policy for one decision."""

    hour: int
    is_peak: bool
    hour_input: HourInput
    battery: BatteryState
    forecast: DayForecast


@dataclass
class HourFlows:
    """
    Result of dispatching one hour. All flows are in kW over a one-hour step.

    ``soc_kwh`` stays within [min_soc_kwh, capacity_kwh], except for a battery
    configured below its floor: it keeps its initial charge until something
    charges it and never discharges below it.
    """

    hour: int
    solar_gen_kw: float
    load_kw: float
    tariff: float
    is_peak: bool
    solar_to_load_kw: float = 0.0
    solar_to_batt_kw: float = 0.0
    batt_to_load_kw: float = 0.0
    grid_to_load_kw: float = 0.0
    grid_to_batt_kw: float = 0.0
    diesel_to_load_kw: float = 0.0
    grid_import_kw: float = 0.0
    unmet_load_kw: float = 0.0
    soc_kwh: float = 0.0
    soc_pct: float = 0.0
    cost: float = 0.0
    co2_kg: float = 0.0

    @property
    def battery_power_kw(self) -> float:
        """Signed battery power: positive discharging to load, negative charging."""
        return self.batt_to_load_kw - (self.solar_to_batt_kw + self.grid_to_batt_kw)

    @property
    def curtailed_solar_kw(self) -> float:
        return max(0.0, self.solar_gen_kw - self.solar_to_load_kw - self.solar_to_batt_kw)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["battery_power_kw"] = self.battery_power_kw
        return data


def dispatch_hour(
    hour_input: HourInput,
    battery: BatteryState,
    policy: "DispatchPolicy",
    forecast: DayForecast | Sequence[HourInput],
    *,
    grid_limit_kw: float,
    diesel_price: float,
    co2_per_grid_kwh: float,
    co2_per_diesel_kwh: float,
    peak_min_grid_kw: float = DEFAULT_PEAK_MIN_GRID_KW,
) -> HourFlows:
    """
    Allocate one hour of energy flows in strict priority order.

    Order:
        1. Solar -> Load
        2. Excess solar -> Battery (anything the battery refuses is curtailed)
        3. Battery -> Load, only if the policy allows discharging
        4. Grid -> Load, capped at ``grid_limit_kw``
        5. Peak tie-in floor: during peak hours grid -> load is raised to at
           least ``peak_min_grid_kw`` even when nothing else needs it
        6. Diesel -> Load for whatever the grid cap left unserved
        7. Grid -> Battery if the policy asks for it, bounded by
           ``grid_limit_kw - grid_to_load``

    Args:
        hour_input: Conditions of the hour being dispatched.
        battery: Battery state, mutated in place.
        policy: Dispatch policy answering the discharge / grid-charge questions.
        forecast: Full day's inputs for look-ahead policies.
        grid_limit_kw: Grid import limit (kW).
        diesel_price: Diesel price per kWh.
        co2_per_grid_kwh: kg CO2 per kWh imported from the grid.
        co2_per_diesel_kwh: kg CO2 per kWh from diesel.
        peak_min_grid_kw: Minimum grid draw during peak hours (kW).

    Returns:
        HourFlows record for the hour, priced as
        ``grid_import * tariff + diesel * diesel_price``.
    """
    if not isinstance(forecast, DayForecast):
        forecast = DayForecast(tuple(forecast))

    hour = hour_input.hour
    is_peak = hour_input.is_peak
    tariff = hour_input.tariff

    remaining_load = hour_input.load_kw
    remaining_solar = hour_input.solar_gen_kw

    flows = HourFlows(
        hour=hour,
        solar_gen_kw=hour_input.solar_gen_kw,
        load_kw=hour_input.load_kw,
        tariff=tariff,
        is_peak=is_peak,
    )
    ctx = DispatchContext(
        hour=hour,
        is_peak=is_peak,
        hour_input=hour_input,
        battery=battery,
        forecast=forecast,
    )

    flows.solar_to_load_kw = min(remaining_solar, remaining_load)
    remaining_solar -= flows.solar_to_load_kw
    remaining_load -= flows.solar_to_load_kw

    if remaining_solar > 0.0:
        flows.solar_to_batt_kw = battery.charge(remaining_solar)
        remaining_solar -= flows.solar_to_batt_kw

    if remaining_load > 0.0 and policy.allow_discharge(ctx):
        flows.batt_to_load_kw = battery.discharge_to_load(remaining_load)
        remaining_load -= flows.batt_to_load_kw

    if remaining_load > 0.0:
        flows.grid_to_load_kw = min(remaining_load, grid_limit_kw)
        remaining_load -= flows.grid_to_load_kw

    if is_peak and flows.grid_to_load_kw < peak_min_grid_kw:
        flows.grid_to_load_kw = peak_min_grid_kw

    if remaining_load > 0.0:
        flows.diesel_to_load_kw = remaining_load
        remaining_load = 0.0

    if policy.allow_grid_charge(ctx):
        headroom_kw = max(0.0, grid_limit_kw - flows.grid_to_load_kw)
        if headroom_kw > 0.0:
            desired_kw = max(0.0, policy.desired_grid_charge_kw(ctx))
            flows.grid_to_batt_kw = battery.charge(min(headroom_kw, desired_kw))

    flows.grid_import_kw = flows.grid_to_load_kw + flows.grid_to_batt_kw
    flows.unmet_load_kw = max(0.0, remaining_load)
    flows.soc_kwh = battery.soc_kwh
    flows.soc_pct = battery.soc_pct

    flows.cost = flows.grid_import_kw * tariff + flows.diesel_to_load_kw * diesel_price
    flows.co2_kg = (
        flows.grid_import_kw * co2_per_grid_kwh
        + flows.diesel_to_load_kw * co2_per_diesel_kwh
    )

    if flows.unmet_load_kw > 0.0:
        message = f"hour {hour}: {flows.unmet_load_kw:.3f} kW of load left unserved"
        logger.warning(message)
        warnings.warn(message, UnmetLoadWarning, stacklevel=2)

    return flows

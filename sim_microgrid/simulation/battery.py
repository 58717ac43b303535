"""
Battery configuration and state-of-charge model.

Contains the :class:`BatteryConfig` dataclass describing the storage unit and
the :class:`BatteryState` that holds the state of charge for exactly one day
simulation while applying capacity, floor and rate limits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

MIN_ROUND_TRIP_EFFICIENCY = 0.01
MAX_ROUND_TRIP_EFFICIENCY = 0.999


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def split_round_trip_efficiency(round_trip_efficiency: float) -> Tuple[float, float]:
    """
    Split a round-trip efficiency into symmetric charge/discharge efficiencies.

    The round-trip efficiency η is first clamped into (0.01, 0.999), then both
    one-way efficiencies are set to √η so that a full charge-then-discharge
    cycle returns exactly η of the energy put in.

    Args:
        round_trip_efficiency: Round-trip efficiency as fraction.

    Returns:
        Tuple ``(eta_charge, eta_discharge)``.

    Example:
        ```python
        eta_c, eta_d = split_round_trip_efficiency(0.81)
        # eta_c == eta_d == 0.9
        ```
    """
    eta = _clamp(round_trip_efficiency, MIN_ROUND_TRIP_EFFICIENCY, MAX_ROUND_TRIP_EFFICIENCY)
    root = math.sqrt(eta)
    return root, root


@dataclass
class BatteryConfig:
    """
    Battery specifications used to build a fresh :class:`BatteryState`.

    Attributes:
        capacity_kwh: Usable capacity of the battery (kWh). Must be > 0.
        initial_soc_pct: State of charge at the start of the day (0-100 %).
        min_soc_pct: Minimum state of charge floor protecting the battery
            (0-100 %). Discharging never takes the SoC below this level.
        round_trip_efficiency: Round-trip efficiency η in (0, 1]. Split into
            √η charge and √η discharge efficiencies.
        max_charge_kw: Maximum charging power (kW), applied to the power drawn
            from the source before efficiency losses.
        max_discharge_kw: Maximum discharging power delivered to the load (kW).

    Example:
        ```python
        cfg = BatteryConfig(
            capacity_kwh=10.0,
            initial_soc_pct=50.0,
            min_soc_pct=20.0,
            round_trip_efficiency=0.88,
            max_charge_kw=2.5,
            max_discharge_kw=2.5,
        )
        battery = BatteryState.from_config(cfg)
        ```

    Raises:
        ValueError: If capacity is not positive, efficiency is outside (0, 1],
            a percentage is outside [0, 100] or a rate limit is negative.
    """

    capacity_kwh: float
    initial_soc_pct: float = 50.0
    min_soc_pct: float = 10.0
    round_trip_efficiency: float = 0.90
    max_charge_kw: float = 2.5
    max_discharge_kw: float = 2.5

    def __post_init__(self) -> None:
        if not self.capacity_kwh > 0.0:
            raise ValueError("capacity_kwh must be > 0")
        if not 0.0 < self.round_trip_efficiency <= 1.0:
            raise ValueError("round_trip_efficiency must be within (0, 1]")
        if not 0.0 <= self.initial_soc_pct <= 100.0:
            raise ValueError("initial_soc_pct must be within [0, 100]")
        if not 0.0 <= self.min_soc_pct <= 100.0:
            raise ValueError("min_soc_pct must be within [0, 100]")
        if self.max_charge_kw < 0.0:
            raise ValueError("max_charge_kw must be >= 0")
        if self.max_discharge_kw < 0.0:
            raise ValueError("max_discharge_kw must be >= 0")


class BatteryState:
    """
    Mutable battery state owned by a single day simulation.

    Holds the state of charge in kWh and exposes the two operators that are
    allowed to change it: :meth:`charge` and :meth:`discharge_to_load`. All
    requests are silently clamped to the physically feasible range and the
    returned power is the ground truth for how much actually moved.

    Energy Flow (one-hour steps, so kW and kWh coincide):
        Charging:    source kW -> [× eta_charge] -> stored kWh
        Discharging: stored kWh -> [× eta_discharge] -> load kW

    Attributes:
        capacity_kwh: Usable capacity (kWh).
        soc_kwh: Current state of charge (kWh).
        min_soc_kwh: State of charge floor for discharging (kWh).
        eta_charge: One-way charging efficiency (√η).
        eta_discharge: One-way discharging efficiency (√η).
        max_charge_kw: Charging power limit (kW).
        max_discharge_kw: Discharging power limit (kW).

    Notes:
        - Invariant after every operation: ``min_soc_kwh <= soc_kwh <= capacity_kwh``
          (when the day started at or above the floor)
        - A battery initialised below its floor cannot discharge; it is not
          lifted to the floor artificially
    """

    def __init__(
        self,
        capacity_kwh: float,
        soc_kwh: float,
        min_soc_kwh: float,
        eta_charge: float,
        eta_discharge: float,
        max_charge_kw: float,
        max_discharge_kw: float,
    ) -> None:
        if not capacity_kwh > 0.0:
            raise ValueError("capacity_kwh must be > 0")
        if not 0.0 < eta_charge <= 1.0 or not 0.0 < eta_discharge <= 1.0:
            raise ValueError("eta_charge and eta_discharge must be within (0, 1]")
        if min_soc_kwh > capacity_kwh:
            raise ValueError("min_soc_kwh must not exceed capacity_kwh")

        self.capacity_kwh = capacity_kwh
        self.soc_kwh = _clamp(soc_kwh, 0.0, capacity_kwh)
        self.min_soc_kwh = _clamp(min_soc_kwh, 0.0, capacity_kwh)
        self.eta_charge = eta_charge
        self.eta_discharge = eta_discharge
        self.max_charge_kw = max(0.0, max_charge_kw)
        self.max_discharge_kw = max(0.0, max_discharge_kw)

    @classmethod
    def from_config(cls, config: BatteryConfig) -> "BatteryState":
        """
        Build a fresh battery state from its configuration.

        Args:
            config: Validated battery configuration.

        Returns:
            New BatteryState with SoC set from ``initial_soc_pct``.
        """
        eta_c, eta_d = split_round_trip_efficiency(config.round_trip_efficiency)
        capacity = config.capacity_kwh
        return cls(
            capacity_kwh=capacity,
            soc_kwh=_clamp(config.initial_soc_pct / 100.0 * capacity, 0.0, capacity),
            min_soc_kwh=_clamp(config.min_soc_pct / 100.0 * capacity, 0.0, capacity),
            eta_charge=eta_c,
            eta_discharge=eta_d,
            max_charge_kw=config.max_charge_kw,
            max_discharge_kw=config.max_discharge_kw,
        )

    def charge(self, requested_kw: float) -> float:
        """
        Charge the battery for one hour.

        Args:
            requested_kw: Power offered to the battery (kW), before losses.

        Returns:
            Power actually accepted from the source (kW). The stored energy
            increases by ``accepted * eta_charge``.

        Example:
            ```python
            battery = BatteryState(10.0, 9.5, 1.0, 0.9, 0.9, 5.0, 5.0)
            accepted = battery.charge(3.0)
            # headroom 0.5 kWh -> accepted = 0.5 / 0.9 ≈ 0.556 kW
            ```
        """
        headroom_kwh = max(0.0, self.capacity_kwh - self.soc_kwh)
        max_by_capacity_kw = headroom_kwh / self.eta_charge
        actual_kw = _clamp(requested_kw, 0.0, min(self.max_charge_kw, max_by_capacity_kw))
        self.soc_kwh = min(self.capacity_kwh, self.soc_kwh + actual_kw * self.eta_charge)
        return actual_kw

    def discharge_to_load(self, requested_kw: float) -> float:
        """
        Discharge the battery towards the load for one hour.

        Args:
            requested_kw: Load deficit offered to the battery (kW).

        Returns:
            Power actually delivered to the load (kW). The stored energy
            decreases by ``delivered / eta_discharge``.
        """
        available_kwh = max(0.0, self.soc_kwh - self.min_soc_kwh)
        max_deliverable_kw = available_kwh * self.eta_discharge
        actual_kw = _clamp(requested_kw, 0.0, min(self.max_discharge_kw, max_deliverable_kw))
        if actual_kw <= 0.0:
            return 0.0
        floor = min(self.min_soc_kwh, self.soc_kwh)
        self.soc_kwh = max(floor, self.soc_kwh - actual_kw / self.eta_discharge)
        return actual_kw

    @property
    def soc_pct(self) -> float:
        """State of charge as a percentage of capacity."""
        return self.soc_kwh / self.capacity_kwh * 100.0

    @property
    def available_kwh(self) -> float:
        """Stored energy above the floor (kWh)."""
        return max(0.0, self.soc_kwh - self.min_soc_kwh)

    def __repr__(self) -> str:
        return (
            f"BatteryState(capacity_kwh={self.capacity_kwh!r}, soc_kwh={self.soc_kwh!r}, "
            f"min_soc_kwh={self.min_soc_kwh!r})"
        )

"""
Hour-by-hour replay of precomputed days for live display.

A :class:`SimulationSession` walks through the cached comparison of each day,
one hour per :meth:`SimulationSession.step`, and keeps the running metrics
that only make sense across days (battery wear, SoC carried into the next
morning).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .comparison import ComparisonOrchestrator, DayComparison, _check_mode
from .dispatch import HourFlows
from .energy_simulator import MicrogridConfig
from .profiles import HOURS_PER_DAY, SampleSource

logger = logging.getLogger(__name__)

MIN_SOH_PCT = 70.0
SOH_LOSS_PER_CYCLE_PCT = 0.5
CO2_PER_TREE_KG_YEAR = 21.0
CAR_KM_PER_KG_CO2 = 6.0


def environmental_equivalents(co2_kg: float) -> Dict[str, float]:
    """
    Express an amount of avoided CO2 in everyday terms.

    Returns:
        Dict with ``trees`` (tree-years of absorption) and ``car_km``.
    """
    co2_kg = max(0.0, co2_kg)
    return {
        "co2_kg": co2_kg,
        "trees": co2_kg / CO2_PER_TREE_KG_YEAR,
        "car_km": co2_kg * CAR_KM_PER_KG_CO2,
    }


class SimulationSession:
    """
    Live stepper over consecutive simulated days.

    Each day is computed once by a :class:`ComparisonOrchestrator`. When the
    day ends, the selected mode's final SoC becomes the next day's
    ``initial_soc_pct``.

    Args:
        config: Microgrid configuration of the first day.
        source: Provider of the hourly solar / load samples.
        mode: Policy whose trace drives the live view ("baseline" or "smart").
    """

    def __init__(
        self,
        config: MicrogridConfig,
        source: SampleSource,
        mode: str = "smart",
    ) -> None:
        self.config = config
        self.source = source
        self.mode = _check_mode(mode)
        self.orchestrator = ComparisonOrchestrator(config, source)
        self.day = 1
        self.hour = 0
        self.throughput_kwh = 0.0
        self._day_configs: Dict[int, MicrogridConfig] = {1: config}

    def set_mode(self, mode: str) -> None:
        self.mode = _check_mode(mode)

    def comparison(self, day: Optional[int] = None) -> DayComparison:
        day = self.day if day is None else day
        if day not in self._day_configs:
            raise ValueError(f"Day {day} has not been reached yet")
        return self.orchestrator.prepare(day, config=self._day_configs[day])

    def step(self) -> HourFlows:
        """
        Return the record of the current hour and advance the clock.

        Returns:
            HourFlows of the selected mode for the hour just played.
        """
        comparison = self.comparison()
        record = comparison.hour_record(self.hour, self.mode)
        self.throughput_kwh += abs(record.battery_power_kw)

        self.hour += 1
        if self.hour >= HOURS_PER_DAY:
            carried_soc = comparison.trace(self.mode).final_soc_pct
            self.day += 1
            self.hour = 0
            self._day_configs[self.day] = self.config.with_initial_soc(carried_soc)
            self.orchestrator.invalidate(self.day - 2)
            logger.info("Day %d starts at %.1f%% SoC", self.day, carried_soc)
        return record

    def run(self, hours: int) -> List[HourFlows]:
        if hours < 0:
            raise ValueError("hours must be >= 0")
        return [self.step() for _ in range(hours)]

    @property
    def cycles(self) -> float:
        """Equivalent full cycles: throughput over twice the capacity."""
        return self.throughput_kwh / (2.0 * self.config.battery_capacity_kwh)

    @property
    def soh_pct(self) -> float:
        return max(MIN_SOH_PCT, 100.0 - SOH_LOSS_PER_CYCLE_PCT * self.cycles)

    def co2_saved_kg(self, day: Optional[int] = None, upto_hour: Optional[int] = None) -> float:
        """
        CO2 avoided versus serving the same load entirely from the grid.

        Args:
            day: Day index, defaults to the current day.
            upto_hour: Number of hours counted from midnight. Defaults to the
                hours already played for the current day and to the whole day
                otherwise.

        Returns:
            Avoided emissions in kg, never negative.
        """
        day = self.day if day is None else day
        if upto_hour is None:
            upto_hour = self.hour if day == self.day else HOURS_PER_DAY
        upto_hour = max(0, min(HOURS_PER_DAY, upto_hour))

        records = self.comparison(day).trace(self.mode).hourly[:upto_hour]
        load_kwh = sum(r.load_kw for r in records)
        emitted_kg = sum(r.co2_kg for r in records)
        return max(0.0, load_kwh * self.config.co2_per_grid_kwh - emitted_kg)

    def status(self) -> Dict[str, object]:
        """Snapshot of the session for display; totals come from the cached day."""
        comparison = self.comparison()
        co2_saved = self.co2_saved_kg()
        return {
            "day": self.day,
            "hour": self.hour,
            "mode": self.mode,
            "soh_pct": self.soh_pct,
            "cycles": self.cycles,
            "co2_saved_kg": co2_saved,
            "equivalents": environmental_equivalents(co2_saved),
            "totals": comparison.summary(),
        }

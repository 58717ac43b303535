"""
Side-by-side evaluation of the baseline and smart policies on one day.

Both policies consume the exact same immutable hourly inputs. The resulting
:class:`DayComparison` is the only place totals and savings come from; live
views just read records out of it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from .dispatch import DayForecast, HourFlows, HourInput
from .energy_simulator import DaySimulation, MicrogridConfig, simulate_day
from .policies import POLICY_NAMES, BaselinePolicy, SmartPolicy
from .profiles import HOURS_PER_DAY, HourSample, SampleSource

logger = logging.getLogger(__name__)

SampleLike = Union[HourSample, Tuple[float, float]]


def _check_mode(mode: str) -> str:
    key = mode.strip().lower()
    if key not in POLICY_NAMES:
        raise ValueError(f"Unknown mode '{mode}', expected one of {POLICY_NAMES}")
    return key


def build_day_inputs(
    samples: Sequence[SampleLike],
    config: MicrogridConfig,
) -> Tuple[HourInput, ...]:
    """
    Turn 24 hourly ``(solar, load)`` samples into priced HourInput records.

    Args:
        samples: HourSample objects or ``(solar_gen_kw, load_kw)`` pairs.
        config: Microgrid configuration providing the tariff.

    Returns:
        Tuple of 24 HourInput records ordered by hour.

    Raises:
        ValueError: If there are not exactly 24 samples or a value is negative.
    """
    if len(samples) != HOURS_PER_DAY:
        raise ValueError(f"Expected {HOURS_PER_DAY} samples, got {len(samples)}")

    tariff = config.tariff_model()
    inputs = []
    for hour, sample in enumerate(samples):
        if isinstance(sample, HourSample):
            solar, load, appliances = sample.solar_gen_kw, sample.load_kw, sample.active_appliances
        else:
            solar, load = sample
            appliances = ()
        inputs.append(
            HourInput(
                hour=hour,
                solar_gen_kw=float(solar),
                load_kw=float(load),
                tariff=tariff.get_price(hour),
                is_peak=tariff.is_peak(hour),
                active_appliances=tuple(appliances),
            )
        )
    return tuple(inputs)


@dataclass
class DayComparison:
    """
    Baseline and smart traces of one day computed on shared inputs.

    Attributes:
        inputs: The 24 HourInput records both policies consumed.
        baseline: Baseline policy trace.
        smart: Smart policy trace.
    """

    inputs: Tuple[HourInput, ...]
    baseline: DaySimulation
    smart: DaySimulation

    @property
    def cost_savings(self) -> float:
        return self.baseline.totals.cost - self.smart.totals.cost

    @property
    def co2_savings_kg(self) -> float:
        return self.baseline.totals.co2_kg - self.smart.totals.co2_kg

    @property
    def savings_pct(self) -> float:
        """Cost savings as a percentage of the baseline cost (0 when free)."""
        if self.baseline.totals.cost <= 0.0:
            return 0.0
        return 100.0 * self.cost_savings / self.baseline.totals.cost

    @property
    def grid_kwh_delta(self) -> float:
        return self.smart.totals.grid_kwh - self.baseline.totals.grid_kwh

    def trace(self, mode: str) -> DaySimulation:
        return self.smart if _check_mode(mode) == "smart" else self.baseline

    def hour_record(self, hour: int, mode: str) -> HourFlows:
        if not 0 <= hour < HOURS_PER_DAY:
            raise ValueError(f"hour must be within 0-23, got {hour}")
        return self.trace(mode).hourly[hour]

    def summary(self) -> Dict[str, Any]:
        return {
            "baseline": self.baseline.totals.to_dict(),
            "smart": self.smart.totals.to_dict(),
            "cost_savings": self.cost_savings,
            "co2_savings_kg": self.co2_savings_kg,
            "savings_pct": self.savings_pct,
            "grid_kwh_delta": self.grid_kwh_delta,
            "final_soc_pct": {
                "baseline": self.baseline.final_soc_pct,
                "smart": self.smart.final_soc_pct,
            },
        }


def compare_day(
    day_inputs: Sequence[HourInput] | DayForecast,
    config: MicrogridConfig,
) -> DayComparison:
    """
    Run both policies over the same day.

    The smart policy is constructed fresh from this day's forecast, so no
    information leaks from a previous day.
    """
    forecast = day_inputs if isinstance(day_inputs, DayForecast) else DayForecast(tuple(day_inputs))
    baseline = simulate_day(forecast, config, BaselinePolicy())
    smart_policy = SmartPolicy(forecast, config.tariff_model(), config.grid_limit_kw)
    smart = simulate_day(forecast, config, smart_policy)
    return DayComparison(inputs=forecast.inputs, baseline=baseline, smart=smart)


class ComparisonOrchestrator:
    """
    Precompute and cache the comparison of each simulated day.

    Inputs are built once per day index from ``source`` and both policies are
    run on them. Live views (:meth:`live_hour`) return the stored records and
    never re-dispatch, so whatever is shown hour by hour adds up to the
    cached totals.

    Example:
        ```python
        orchestrator = ComparisonOrchestrator(MicrogridConfig(), DayProfileBuilder())
        comparison = orchestrator.prepare(day=1)
        orchestrator.live_hour(day=1, hour=18, mode="smart").cost
        ```
    """

    def __init__(self, config: MicrogridConfig, source: SampleSource) -> None:
        self.config = config
        self.source = source
        self._cache: Dict[int, DayComparison] = {}

    def prepare(self, day: int = 1, config: Optional[MicrogridConfig] = None) -> DayComparison:
        """
        Return the comparison of ``day``, computing it on first use.

        Args:
            day: Day index (1-based).
            config: Optional override used for this day only, for example to
                start from the SoC carried over from the previous day. Only
                consulted when the day is not cached yet.
        """
        cached = self._cache.get(day)
        if cached is not None:
            return cached

        day_config = config or self.config
        inputs = build_day_inputs(self.source.samples(day), day_config)
        comparison = compare_day(inputs, day_config)
        logger.info(
            "Day %d prepared: baseline cost %.2f, smart cost %.2f, savings %.2f",
            day,
            comparison.baseline.totals.cost,
            comparison.smart.totals.cost,
            comparison.cost_savings,
        )
        self._cache[day] = comparison
        return comparison

    def live_hour(self, day: int, hour: int, mode: str) -> HourFlows:
        return self.prepare(day).hour_record(hour, mode)

    def invalidate(self, day: Optional[int] = None) -> None:
        """Drop the cached comparison of ``day``, or of every day."""
        if day is None:
            self._cache.clear()
        else:
            self._cache.pop(day, None)

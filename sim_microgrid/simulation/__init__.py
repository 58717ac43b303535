"""
Core microgrid dispatch models.

This package collects all components of the deterministic day simulation:

* Physical building blocks: the battery model, the time-of-use tariff and the
  synthetic solar / household load profiles.
* Hourly dispatch (`dispatch`) allocating solar, battery, grid and diesel
  against the load, driven by the baseline and smart policies.
* Day simulation and the baseline-vs-smart comparison, plus the live session
  replaying precomputed days hour by hour.

Higher layers (`application`, FastAPI routes, CLI) import from this single
namespace.
"""

from __future__ import annotations

from .battery import BatteryConfig, BatteryState, split_round_trip_efficiency
from .comparison import ComparisonOrchestrator, DayComparison, build_day_inputs, compare_day
from .dispatch import (
    DayForecast,
    DispatchContext,
    HourFlows,
    HourInput,
    UnmetLoadWarning,
    dispatch_hour,
)
from .energy_simulator import DaySimulation, DayTotals, MicrogridConfig, simulate_day
from .policies import POLICY_NAMES, BaselinePolicy, DispatchPolicy, SmartPolicy, build_policy
from .prices import DEFAULT_PEAK_HOURS, TariffModel, TimeOfUseTariff, grid_tariff_for_hour
from .profiles import (
    DEFAULT_APPLIANCES,
    DEFAULT_LOAD_PROFILE_KW,
    WEATHER_IMPACT,
    Appliance,
    DayProfileBuilder,
    HourSample,
    StaticSampleSource,
    load_kw,
    solar_output_kw,
)
from .session import SimulationSession, environmental_equivalents

__all__ = [
    # Battery
    "BatteryConfig",
    "BatteryState",
    "split_round_trip_efficiency",
    # Tariff
    "DEFAULT_PEAK_HOURS",
    "TariffModel",
    "TimeOfUseTariff",
    "grid_tariff_for_hour",
    # Dispatch + policies
    "HourInput",
    "HourFlows",
    "DayForecast",
    "DispatchContext",
    "UnmetLoadWarning",
    "dispatch_hour",
    "POLICY_NAMES",
    "DispatchPolicy",
    "BaselinePolicy",
    "SmartPolicy",
    "build_policy",
    # Day simulation + comparison
    "MicrogridConfig",
    "DayTotals",
    "DaySimulation",
    "simulate_day",
    "build_day_inputs",
    "compare_day",
    "DayComparison",
    "ComparisonOrchestrator",
    # Profiles + live session
    "WEATHER_IMPACT",
    "DEFAULT_LOAD_PROFILE_KW",
    "DEFAULT_APPLIANCES",
    "Appliance",
    "HourSample",
    "DayProfileBuilder",
    "StaticSampleSource",
    "solar_output_kw",
    "load_kw",
    "SimulationSession",
    "environmental_equivalents",
]

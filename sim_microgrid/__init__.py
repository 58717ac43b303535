from .simulation.battery import BatteryConfig, BatteryState
from .simulation.comparison import ComparisonOrchestrator, DayComparison, build_day_inputs, compare_day
from .simulation.dispatch import DayForecast, HourFlows, HourInput, UnmetLoadWarning, dispatch_hour
from .simulation.energy_simulator import DaySimulation, DayTotals, MicrogridConfig, simulate_day
from .simulation.policies import BaselinePolicy, DispatchPolicy, SmartPolicy, build_policy
from .simulation.prices import TariffModel, TimeOfUseTariff
from .simulation.profiles import DayProfileBuilder, HourSample, StaticSampleSource
from .simulation.session import SimulationSession, environmental_equivalents
from .reporting import generate_report
from .result_builder import ResultBuilder
from .application import SimulationApplication

__all__ = [
    "BatteryConfig",
    "BatteryState",
    "TariffModel",
    "TimeOfUseTariff",
    "HourInput",
    "HourFlows",
    "DayForecast",
    "UnmetLoadWarning",
    "dispatch_hour",
    "DispatchPolicy",
    "BaselinePolicy",
    "SmartPolicy",
    "build_policy",
    "MicrogridConfig",
    "DayTotals",
    "DaySimulation",
    "simulate_day",
    "build_day_inputs",
    "compare_day",
    "DayComparison",
    "ComparisonOrchestrator",
    "DayProfileBuilder",
    "HourSample",
    "StaticSampleSource",
    "SimulationSession",
    "environmental_equivalents",
    "generate_report",
    "ResultBuilder",
    "SimulationApplication",
]

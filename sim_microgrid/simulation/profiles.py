"""
Synthetic solar and household load profiles for one day.

These builders are the default source of the 24 hourly ``(solar, load)``
samples consumed by the comparison orchestrator. Externally measured samples
(for example a parsed dataset) can be supplied through
:class:`StaticSampleSource` instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Protocol, Sequence, Tuple

import numpy as np

HOURS_PER_DAY = 24

WEATHER_IMPACT: dict[str, float] = {"sunny": 1.0, "cloudy": 0.4, "rainy": 0.15}

# Residential household demand (kW) with air conditioning, hours 0-23.
DEFAULT_LOAD_PROFILE_KW: Tuple[float, ...] = (
    1.5, 1.2, 1.2, 1.2, 1.4, 2.0, 3.0, 3.5, 2.5, 2.2, 2.0, 2.0,
    2.0, 2.0, 2.2, 2.8, 4.5, 6.0, 6.5, 6.0, 5.0, 3.5, 2.5, 2.0,
)

MIN_LOAD_KW = 0.5
SOLAR_PEAK_HOUR = 12
SOLAR_SPREAD = 18.0
SUNNY_AFTERNOON_LOAD_FACTOR = 1.3


@dataclass(frozen=True)
class Appliance:
    """
    Household appliance switched on during fixed hours.

    Attributes:
        key: Short identifier.
        name: Display name.
        hours: Hours of day during which the appliance runs.
        power_kw: Power drawn while running (kW).
    """

    key: str
    name: str
    hours: Tuple[int, ...]
    power_kw: float

    def is_active(self, hour: int) -> bool:
        return hour in self.hours


DEFAULT_APPLIANCES: Tuple[Appliance, ...] = (
    Appliance("coffee", "Coffee Maker", (7, 8), 1.5),
    Appliance("microwave", "Microwave", (12, 13, 20), 2.0),
    Appliance("washer", "Washing Machine", (10, 11), 2.5),
    Appliance("ac", "Air Conditioner", (14, 15, 16, 17, 18), 3.5),
    Appliance("tv", "Television", (19, 20, 21, 22), 0.5),
    Appliance("lights", "Lights", (18, 19, 20, 21, 22, 23, 0, 1, 2, 3, 4, 5, 6), 0.3),
    Appliance("ev", "EV Charger", (1, 2, 3, 4, 5), 7.0),
    Appliance("fridge", "Refrigerator", tuple(range(HOURS_PER_DAY)), 0.2),
)


@dataclass(frozen=True)
class HourSample:
    """One hour of exogenous generation and demand (kW)."""

    solar_gen_kw: float
    load_kw: float
    active_appliances: Tuple[str, ...] = ()


class SampleSource(Protocol):
    """Anything able to produce the 24 hourly samples of a simulated day."""

    def samples(self, day: int = 1) -> List[HourSample]:
        ...


def weather_factor(weather: str) -> float:
    """
    Solar derating factor for a weather condition.

    Raises:
        ValueError: If the weather is not one of ``WEATHER_IMPACT``.
    """
    try:
        return WEATHER_IMPACT[weather.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown weather '{weather}', expected one of {sorted(WEATHER_IMPACT)}"
        ) from exc


def solar_output_kw(hour: int, solar_capacity_kw: float, weather: str = "sunny") -> float:
    """
    Bell-shaped clear-sky output centred on noon, derated by weather.

    Zero before 06:00 and after 18:00.
    """
    if hour < 6 or hour > 18:
        return 0.0
    base = solar_capacity_kw * math.exp(-((hour - SOLAR_PEAK_HOUR) ** 2) / SOLAR_SPREAD)
    return max(0.0, base * weather_factor(weather))


def load_kw(
    hour: int,
    weather: str = "sunny",
    base_profile_kw: Sequence[float] = DEFAULT_LOAD_PROFILE_KW,
    appliances: Iterable[Appliance] = DEFAULT_APPLIANCES,
) -> float:
    """
    Household demand: base profile plus running appliances.

    Sunny afternoons (12:00-18:00) add 30% for cooling. Demand never drops
    below a 0.5 kW standby load.
    """
    appliance_kw = sum(app.power_kw for app in appliances if app.is_active(hour))
    factor = 1.0
    if weather.lower() == "sunny" and 12 <= hour <= 18:
        factor = SUNNY_AFTERNOON_LOAD_FACTOR
    return max(MIN_LOAD_KW, (base_profile_kw[hour] + appliance_kw) * factor)


class DayProfileBuilder:
    """
    Deterministic synthetic day built from PV size, weather and appliances.

    Example:
        ```python
        builder = DayProfileBuilder(solar_capacity_kw=5.0, weather="cloudy")
        samples = builder.samples()
        samples[12].solar_gen_kw  # 2.0 (5 kW * 0.4)
        ```
    """

    def __init__(
        self,
        solar_capacity_kw: float = 5.0,
        weather: str = "sunny",
        base_profile_kw: Sequence[float] = DEFAULT_LOAD_PROFILE_KW,
        appliances: Iterable[Appliance] = DEFAULT_APPLIANCES,
    ) -> None:
        if solar_capacity_kw < 0.0:
            raise ValueError("solar_capacity_kw must be >= 0")
        if len(base_profile_kw) != HOURS_PER_DAY:
            raise ValueError("base_profile_kw must have 24 values")
        weather_factor(weather)

        self.solar_capacity_kw = float(solar_capacity_kw)
        self.weather = weather.lower()
        self.base_profile_kw = tuple(float(v) for v in base_profile_kw)
        self.appliances = tuple(appliances)

    def active_appliances(self, hour: int) -> Tuple[str, ...]:
        return tuple(app.name for app in self.appliances if app.is_active(hour))

    def solar_profile_kw(self) -> np.ndarray:
        return np.array(
            [solar_output_kw(h, self.solar_capacity_kw, self.weather) for h in range(HOURS_PER_DAY)]
        )

    def load_profile_kw(self) -> np.ndarray:
        return np.array(
            [
                load_kw(h, self.weather, self.base_profile_kw, self.appliances)
                for h in range(HOURS_PER_DAY)
            ]
        )

    def samples(self, day: int = 1) -> List[HourSample]:
        """
        Build the 24 hourly samples. The same day is returned for every
        ``day`` index since the synthetic profile has no randomness.
        """
        solar = self.solar_profile_kw()
        load = self.load_profile_kw()
        return [
            HourSample(float(solar[h]), float(load[h]), self.active_appliances(h))
            for h in range(HOURS_PER_DAY)
        ]


class StaticSampleSource:
    """
    Externally supplied samples, one list of 24 hours per day.

    Days cycle through the provided sequence, so a single day of samples is
    repeated for every simulated day.

    Raises:
        ValueError: If a day does not hold 24 samples or a value is negative.
    """

    def __init__(self, days: Sequence[Sequence[HourSample | Mapping[str, float]]]) -> None:
        if not days:
            raise ValueError("At least one day of samples is required")
        self.days: List[List[HourSample]] = [self._coerce_day(day) for day in days]

    @classmethod
    def from_arrays(cls, solar_kw: Sequence[float], load_kw_values: Sequence[float]) -> "StaticSampleSource":
        if len(solar_kw) != len(load_kw_values):
            raise ValueError("solar and load arrays must have the same length")
        samples = [HourSample(float(s), float(l)) for s, l in zip(solar_kw, load_kw_values)]
        return cls([samples])

    @staticmethod
    def _coerce_day(day: Sequence[HourSample | Mapping[str, float]]) -> List[HourSample]:
        if len(day) != HOURS_PER_DAY:
            raise ValueError(f"Each day must contain {HOURS_PER_DAY} samples, got {len(day)}")
        samples: List[HourSample] = []
        for raw in day:
            if isinstance(raw, HourSample):
                sample = raw
            else:
                sample = HourSample(
                    solar_gen_kw=float(raw["solar_gen_kw"]),
                    load_kw=float(raw["load_kw"]),
                    active_appliances=tuple(raw.get("active_appliances", ())),
                )
            if sample.solar_gen_kw < 0.0 or sample.load_kw < 0.0:
                raise ValueError("solar_gen_kw and load_kw must be >= 0")
            samples.append(sample)
        return samples

    def samples(self, day: int = 1) -> List[HourSample]:
        return list(self.days[(day - 1) % len(self.days)])

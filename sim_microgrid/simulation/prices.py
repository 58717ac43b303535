"""
Time-of-use grid tariff.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AbstractSet, Iterable

HOURS_PER_DAY = 24

# Evening peak, 17:00-22:59
DEFAULT_PEAK_HOURS: frozenset[int] = frozenset({17, 18, 19, 20, 21, 22})


def _check_hour(hour: int) -> None:
    if not 0 <= hour < HOURS_PER_DAY:
        raise ValueError(f"hour must be within 0-23, got {hour}")


def is_peak_hour(hour: int, peak_hours: AbstractSet[int] = DEFAULT_PEAK_HOURS) -> bool:
    """Return True when ``hour`` belongs to the peak window."""
    return hour in peak_hours


def grid_tariff_for_hour(
    hour: int,
    base_price: float,
    peak_factor: float,
    peak_hours: AbstractSet[int] = DEFAULT_PEAK_HOURS,
) -> float:
    """
    Grid price for an hour of the day: flat off-peak, flat multiplied peak.

    Args:
        hour: Hour of day (0-23).
        base_price: Off-peak price per kWh.
        peak_factor: Multiplier applied during peak hours.
        peak_hours: Set of peak hours.

    Returns:
        Price per kWh for that hour.
    """
    return base_price * peak_factor if hour in peak_hours else base_price


class TariffModel(ABC):
    """
    Interface for grid tariffs as a function of the hour of day.

    Dispatch policies reason about the gap between the peak and off-peak
    price, so implementations expose both alongside the hourly lookup.
    """

    @abstractmethod
    def get_price(self, hour: int) -> float:
        """
        Get the grid price for an hour of the day.

        Args:
            hour: Hour of day (0-23).

        Returns:
            Price per kWh.
        """
        raise NotImplementedError

    @abstractmethod
    def is_peak(self, hour: int) -> bool:
        raise NotImplementedError

    @property
    @abstractmethod
    def off_peak_price(self) -> float:
        raise NotImplementedError

    @property
    @abstractmethod
    def peak_price(self) -> float:
        raise NotImplementedError

    @property
    def price_gap(self) -> float:
        """Difference between the peak and the off-peak price."""
        return self.peak_price - self.off_peak_price

    def hourly_prices(self) -> list[float]:
        """Prices for hours 0-23."""
        return [self.get_price(h) for h in range(HOURS_PER_DAY)]


class TimeOfUseTariff(TariffModel):
    """
    price(hour) = base_price * peak_factor if hour in peak_hours else base_price

    Example:
        ```python
        tariff = TimeOfUseTariff(base_price=10.0, peak_factor=1.5)
        tariff.get_price(3)    # 10.0
        tariff.get_price(19)   # 15.0
        ```
    """

    def __init__(
        self,
        base_price: float,
        peak_factor: float = 1.5,
        peak_hours: Iterable[int] = DEFAULT_PEAK_HOURS,
    ) -> None:
        if base_price < 0.0:
            raise ValueError("base_price must be >= 0")
        if peak_factor < 1.0:
            raise ValueError("peak_factor must be >= 1")
        hours = frozenset(int(h) for h in peak_hours)
        for hour in hours:
            _check_hour(hour)

        self.base_price = float(base_price)
        self.peak_factor = float(peak_factor)
        self.peak_hours = hours

    def get_price(self, hour: int) -> float:
        _check_hour(hour)
        return grid_tariff_for_hour(hour, self.base_price, self.peak_factor, self.peak_hours)

    def is_peak(self, hour: int) -> bool:
        _check_hour(hour)
        return is_peak_hour(hour, self.peak_hours)

    @property
    def off_peak_price(self) -> float:
        return self.base_price

    @property
    def peak_price(self) -> float:
        return self.base_price * self.peak_factor

    def __repr__(self) -> str:
        return (
            f"TimeOfUseTariff(base_price={self.base_price!r}, peak_factor={self.peak_factor!r}, "
            f"peak_hours={sorted(self.peak_hours)!r})"
        )

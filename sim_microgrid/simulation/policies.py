"""
Dispatch policies deciding when the battery may discharge and when it should
be charged from the grid.

The set of strategies is closed: :class:`BaselinePolicy` (naive) and
:class:`SmartPolicy` (tariff-aware with a look-ahead over the day's
forecast). Both implement the :class:`DispatchPolicy` interface consumed by
:func:`~sim_microgrid.simulation.dispatch.dispatch_hour`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from .dispatch import DayForecast, DispatchContext, HourInput
from .prices import TariffModel

if TYPE_CHECKING:
    from .energy_simulator import MicrogridConfig

POLICY_NAMES = ("baseline", "smart")


class DispatchPolicy(ABC):
    """
    Interface for hourly dispatch decisions.

    Policies hold no mutable state; every answer depends only on the
    :class:`DispatchContext` and on what was passed to the constructor.

    Subclasses must implement:
    - allow_discharge(): may the battery serve the remaining deficit now?
    - allow_grid_charge(): may the battery be charged from the grid now?
    - desired_grid_charge_kw(): how much grid power to offer the battery.
    """

    name: str = "policy"

    @abstractmethod
    def allow_discharge(self, ctx: DispatchContext) -> bool:
        raise NotImplementedError

    @abstractmethod
    def allow_grid_charge(self, ctx: DispatchContext) -> bool:
        raise NotImplementedError

    @abstractmethod
    def desired_grid_charge_kw(self, ctx: DispatchContext) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BaselinePolicy(DispatchPolicy):
    """
    Naive strategy ignoring time-of-use prices.

    Discharges whenever there is a deficit and never pre-charges from the grid.
    """

    name = "baseline"

    def allow_discharge(self, ctx: DispatchContext) -> bool:
        return True

    def allow_grid_charge(self, ctx: DispatchContext) -> bool:
        return False

    def desired_grid_charge_kw(self, ctx: DispatchContext) -> float:
        return 0.0


class SmartPolicy(DispatchPolicy):
    """
    Tariff-aware strategy with a look-ahead over the day's forecast.

    Built fresh for every simulated day from that day's :class:`DayForecast`.

    Decisions:
        Discharge:
            - allowed whenever solar cannot cover the current load
            - allowed during peak hours
            - refused off-peak when solar already covers the load
        Grid charging:
            - never during peak hours
            - never when the whole day's deficit is below
              ``deficit_threshold_kwh`` (solar covers the day)
            - never when the current tariff exceeds the off-peak price by
              more than ``tariff_epsilon``
        Grid charge power:
            target_kwh = clamp(peak_weight * peak_deficit_from(hour + 1)
                               + diesel_weight * diesel_risk_from(hour + 1),
                               0, target_fraction * capacity)
            power = min(target_kwh - soc_kwh, max_charge_kw), or 0 when the
            peak-vs-current price gap is below ``min_price_gap``.

    Args:
        forecast: The day's inputs (DayForecast or sequence of HourInput).
        tariff: Tariff model giving the off-peak and peak price.
        grid_limit_kw: Grid import limit used to estimate diesel risk.
        peak_weight: Share of the remaining peak deficit to pre-store.
        diesel_weight: Share of the remaining diesel risk to pre-store.
        target_fraction: Upper bound of the target SoC as capacity fraction.
        deficit_threshold_kwh: Minimum day deficit that justifies grid charging.
        tariff_epsilon: Tolerance when comparing the tariff to off-peak.
        min_price_gap: Minimum peak-minus-current price gap worth arbitraging.

    Example:
        ```python
        forecast = DayForecast(day_inputs)
        policy = SmartPolicy(forecast, TimeOfUseTariff(10.0, 1.5), grid_limit_kw=5.0)
        result = simulate_day(day_inputs, config, policy)
        ```
    """

    name = "smart"

    def __init__(
        self,
        forecast: DayForecast | Sequence[HourInput],
        tariff: TariffModel,
        grid_limit_kw: float,
        *,
        peak_weight: float = 0.6,
        diesel_weight: float = 0.8,
        target_fraction: float = 0.9,
        deficit_threshold_kwh: float = 0.5,
        tariff_epsilon: float = 0.01,
        min_price_gap: float = 0.5,
    ) -> None:
        if not isinstance(forecast, DayForecast):
            forecast = DayForecast(tuple(forecast))
        self.forecast = forecast
        self.off_peak_tariff = tariff.off_peak_price
        self.peak_tariff = tariff.peak_price
        self.grid_limit_kw = grid_limit_kw
        self.peak_weight = peak_weight
        self.diesel_weight = diesel_weight
        self.target_fraction = target_fraction
        self.deficit_threshold_kwh = deficit_threshold_kwh
        self.tariff_epsilon = tariff_epsilon
        self.min_price_gap = min_price_gap

        self.day_deficit_kwh = forecast.total_deficit_kwh()
        self.day_has_deficit = self.day_deficit_kwh > deficit_threshold_kwh

    def allow_discharge(self, ctx: DispatchContext) -> bool:
        if ctx.hour_input.load_kw > ctx.hour_input.solar_gen_kw:
            return True
        return ctx.is_peak

    def allow_grid_charge(self, ctx: DispatchContext) -> bool:
        if ctx.is_peak:
            return False
        if not self.day_has_deficit:
            return False
        if ctx.hour_input.tariff > self.off_peak_tariff + self.tariff_epsilon:
            return False
        return True

    def target_soc_kwh(self, ctx: DispatchContext) -> float:
        """SoC the battery should hold to cover the rest of the day's peak."""
        remaining_peak_deficit = self.forecast.peak_deficit_kwh_from(ctx.hour + 1)
        diesel_risk = self.forecast.diesel_risk_kwh_from(ctx.hour + 1, self.grid_limit_kw)
        target = self.peak_weight * remaining_peak_deficit + self.diesel_weight * diesel_risk
        return max(0.0, min(target, ctx.battery.capacity_kwh * self.target_fraction))

    def desired_grid_charge_kw(self, ctx: DispatchContext) -> float:
        if not self.day_has_deficit:
            return 0.0
        need_kwh = max(0.0, self.target_soc_kwh(ctx) - ctx.battery.soc_kwh)
        price_gap = self.peak_tariff - ctx.hour_input.tariff
        if price_gap < self.min_price_gap:
            return 0.0
        return min(need_kwh, ctx.battery.max_charge_kw)

    def __repr__(self) -> str:
        return (
            f"SmartPolicy(day_deficit_kwh={self.day_deficit_kwh:.3f}, "
            f"off_peak_tariff={self.off_peak_tariff!r}, peak_tariff={self.peak_tariff!r})"
        )


def build_policy(
    name: str,
    forecast: DayForecast | Sequence[HourInput],
    config: "MicrogridConfig",
) -> DispatchPolicy:
    """
    Construct a policy by name for one day.

    Args:
        name: "baseline" or "smart".
        forecast: The day's inputs (only used by the smart policy).
        config: Microgrid configuration providing tariff and grid limit.

    Returns:
        Fresh DispatchPolicy instance.

    Raises:
        ValueError: If ``name`` is not a known policy.
    """
    key = name.strip().lower()
    if key == "baseline":
        return BaselinePolicy()
    if key == "smart":
        return SmartPolicy(forecast, config.tariff_model(), config.grid_limit_kw)
    raise ValueError(f"Unknown policy '{name}', expected one of {POLICY_NAMES}")

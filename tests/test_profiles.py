from __future__ import annotations

import math

import numpy as np
import pytest

from sim_microgrid.simulation.profiles import (
    DEFAULT_APPLIANCES,
    DayProfileBuilder,
    HourSample,
    StaticSampleSource,
    load_kw,
    solar_output_kw,
    weather_factor,
)


def test_weather_factor_lookup() -> None:
    assert weather_factor("sunny") == 1.0
    assert weather_factor("Cloudy") == pytest.approx(0.4)
    with pytest.raises(ValueError):
        weather_factor("snowy")


def test_solar_output_bell_shape() -> None:
    assert solar_output_kw(12, 5.0, "cloudy") == pytest.approx(2.0)
    assert solar_output_kw(18, 5.0) == pytest.approx(5.0 * math.exp(-2.0))
    assert solar_output_kw(5, 5.0) == 0.0
    assert solar_output_kw(19, 5.0) == 0.0
    assert solar_output_kw(10, 5.0) == pytest.approx(solar_output_kw(14, 5.0))


def test_load_adds_running_appliances() -> None:
    assert load_kw(3, "cloudy", appliances=()) == pytest.approx(1.2)
    # EV charger, lights and fridge run at 03:00
    assert load_kw(3, "cloudy") == pytest.approx(1.2 + 7.0 + 0.3 + 0.2)


def test_sunny_afternoon_cooling_factor() -> None:
    assert load_kw(14, "sunny") == pytest.approx((2.2 + 3.5 + 0.2) * 1.3)
    assert load_kw(14, "cloudy") == pytest.approx(2.2 + 3.5 + 0.2)


def test_load_never_drops_below_standby() -> None:
    assert load_kw(4, "rainy", base_profile_kw=[0.0] * 24, appliances=()) == pytest.approx(0.5)


def test_day_profile_builder_samples() -> None:
    builder = DayProfileBuilder(solar_capacity_kw=5.0, weather="cloudy")
    samples = builder.samples()
    assert len(samples) == 24
    assert samples[12].solar_gen_kw == pytest.approx(2.0)
    assert "Refrigerator" in samples[0].active_appliances
    assert "EV Charger" in samples[2].active_appliances
    assert builder.samples(day=7) == samples

    solar = builder.solar_profile_kw()
    assert isinstance(solar, np.ndarray)
    assert solar.shape == (24,)
    assert float(solar.max()) == pytest.approx(2.0)


def test_day_profile_builder_filters_appliances() -> None:
    fridge_only = [app for app in DEFAULT_APPLIANCES if app.key == "fridge"]
    builder = DayProfileBuilder(weather="rainy", appliances=fridge_only)
    assert builder.active_appliances(2) == ("Refrigerator",)
    assert builder.load_profile_kw()[2] == pytest.approx(1.2 + 0.2)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"solar_capacity_kw": -1.0},
        {"weather": "foggy"},
        {"base_profile_kw": [1.0] * 23},
    ],
)
def test_day_profile_builder_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        DayProfileBuilder(**kwargs)


def test_static_source_cycles_days() -> None:
    first = [HourSample(0.0, 1.0)] * 24
    second = [{"solar_gen_kw": 2.0, "load_kw": 1.0} for _ in range(24)]
    source = StaticSampleSource([first, second])
    assert source.samples(1)[0].solar_gen_kw == 0.0
    assert source.samples(2)[0].solar_gen_kw == 2.0
    assert source.samples(3)[0].solar_gen_kw == 0.0


def test_static_source_from_arrays() -> None:
    source = StaticSampleSource.from_arrays([1.0] * 24, [2.0] * 24)
    assert source.samples()[5] == HourSample(1.0, 2.0)
    with pytest.raises(ValueError):
        StaticSampleSource.from_arrays([1.0] * 24, [2.0] * 23)


def test_static_source_validation() -> None:
    with pytest.raises(ValueError):
        StaticSampleSource([])
    with pytest.raises(ValueError):
        StaticSampleSource([[HourSample(0.0, 1.0)] * 12])
    with pytest.raises(ValueError):
        StaticSampleSource([[HourSample(0.0, -1.0)] * 24])

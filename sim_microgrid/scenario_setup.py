from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from .simulation import (
    DEFAULT_APPLIANCES,
    DEFAULT_LOAD_PROFILE_KW,
    DayProfileBuilder,
    MicrogridConfig,
    StaticSampleSource,
)
from .simulation.profiles import SampleSource

DEFAULT_SCENARIO_PATH = Path(__file__).resolve().parent / "scenarios" / "default_day.json"

ScenarioSource = Mapping[str, Any] | str | Path | None


def load_scenario_data(source: ScenarioSource = None) -> dict[str, Any]:
    """
    Load scenario data from JSON or return the provided mapping.

    Args:
        source: Path to a JSON file, mapping, or None for the bundled default.

    Returns:
        Dictionary containing scenario configuration.
    """
    if source is None:
        path = DEFAULT_SCENARIO_PATH
        return json.loads(path.read_text(encoding="utf-8"))
    if isinstance(source, (str, Path)):
        path = Path(source)
        return json.loads(path.read_text(encoding="utf-8"))
    return dict(source)


def build_microgrid_config(scenario_data: ScenarioSource = None) -> MicrogridConfig:
    """
    Build the MicrogridConfig from the tariff, grid, emissions and battery
    sections. Missing sections or keys keep the dataclass defaults.

    Raises:
        ValueError: If a value violates a configuration invariant.
    """
    data = load_scenario_data(scenario_data)
    tariff_cfg = data.get("tariff", {})
    grid_cfg = data.get("grid", {})
    emissions_cfg = data.get("emissions", {})
    battery_cfg = data.get("battery", {})

    defaults = MicrogridConfig()
    return MicrogridConfig(
        base_grid_price=tariff_cfg.get("base_grid_price", defaults.base_grid_price),
        peak_factor=tariff_cfg.get("peak_factor", defaults.peak_factor),
        peak_hours=tariff_cfg.get("peak_hours", defaults.peak_hours),
        diesel_price=grid_cfg.get("diesel_price", defaults.diesel_price),
        grid_limit_kw=grid_cfg.get("grid_limit_kw", defaults.grid_limit_kw),
        peak_min_grid_kw=grid_cfg.get("peak_min_grid_kw", defaults.peak_min_grid_kw),
        co2_per_grid_kwh=emissions_cfg.get("co2_per_grid_kwh", defaults.co2_per_grid_kwh),
        co2_per_diesel_kwh=emissions_cfg.get("co2_per_diesel_kwh", defaults.co2_per_diesel_kwh),
        battery_capacity_kwh=battery_cfg.get("capacity_kwh", defaults.battery_capacity_kwh),
        initial_soc_pct=battery_cfg.get("initial_soc_pct", defaults.initial_soc_pct),
        min_soc_pct=battery_cfg.get("min_soc_pct", defaults.min_soc_pct),
        round_trip_efficiency=battery_cfg.get("round_trip_efficiency", defaults.round_trip_efficiency),
        max_charge_kw=battery_cfg.get("max_charge_kw"),
        max_discharge_kw=battery_cfg.get("max_discharge_kw"),
    )


def build_sample_source(scenario_data: ScenarioSource = None) -> SampleSource:
    """
    Build the provider of hourly solar / load samples.

    Explicit ``samples`` (24 ``{solar_gen_kw, load_kw}`` entries) win over
    the synthetic ``solar`` / ``load`` sections.
    """
    data = load_scenario_data(scenario_data)
    if data.get("samples"):
        samples = data["samples"]
        # A flat list is a single day.
        days = samples if isinstance(samples[0], list) else [samples]
        return StaticSampleSource(days)

    solar_cfg = data.get("solar", {})
    load_cfg = data.get("load", {})

    appliances = DEFAULT_APPLIANCES
    if "appliances" in load_cfg:
        by_key = {app.key: app for app in DEFAULT_APPLIANCES}
        unknown = [key for key in load_cfg["appliances"] if key not in by_key]
        if unknown:
            raise ValueError(f"Unknown appliances: {unknown}")
        appliances = tuple(by_key[key] for key in load_cfg["appliances"])

    return DayProfileBuilder(
        solar_capacity_kw=solar_cfg.get("capacity_kw", 5.0),
        weather=solar_cfg.get("weather", "sunny"),
        base_profile_kw=load_cfg.get("base_profile_kw", DEFAULT_LOAD_PROFILE_KW),
        appliances=appliances,
    )


def describe_scenario(scenario_data: ScenarioSource = None) -> dict[str, Any]:
    """Profile settings stored alongside a recorded scenario."""
    data = load_scenario_data(scenario_data)
    solar_cfg = data.get("solar", {})
    return {
        "scenario_name": data.get("scenario_name", "custom_scenario"),
        "weather": solar_cfg.get("weather", "sunny"),
        "solar_capacity_kw": solar_cfg.get("capacity_kw", 5.0),
        "explicit_samples": bool(data.get("samples")),
    }

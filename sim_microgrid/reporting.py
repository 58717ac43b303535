from __future__ import annotations

from datetime import datetime
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .simulation.comparison import DayComparison
from .simulation.energy_simulator import DaySimulation, MicrogridConfig
from .simulation.session import environmental_equivalents

FLOW_COLUMNS = [
    "solar_to_load_kw",
    "batt_to_load_kw",
    "grid_to_load_kw",
    "diesel_to_load_kw",
]

FLOW_COLORS = {
    "solar_to_load_kw": "#f2b701",
    "batt_to_load_kw": "#2ca02c",
    "grid_to_load_kw": "#1f77b4",
    "diesel_to_load_kw": "#7f7f7f",
}


def _slugify(value: str) -> str:
    return "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in value.strip()).strip("_")


def _create_results_directory(scenario_name: str, base_dir: Path) -> Path:
    timestamp = datetime.now().strftime("%y%m%d_%H%M%S")
    slug = _slugify(scenario_name) or "scenario"
    output_dir = base_dir / f"{timestamp}_{slug}"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def hourly_frame(simulation: DaySimulation) -> pd.DataFrame:
    """
    One row per hour of a policy trace, indexed by hour.

    Adds the signed ``battery_power_kw`` and the ``curtailed_solar_kw``
    columns to the HourFlows fields.
    """
    rows = []
    for flows in simulation.hourly:
        row = flows.to_dict()
        row["curtailed_solar_kw"] = flows.curtailed_solar_kw
        rows.append(row)
    df = pd.DataFrame(rows)
    if not df.empty:
        df = df.set_index("hour")
    return df


def comparison_frame(comparison: DayComparison) -> pd.DataFrame:
    """
    Hourly cost, grid import, diesel and SoC of both policies side by side.

    Columns are suffixed ``_baseline`` / ``_smart``; ``cost_delta`` is the
    per-hour saving of the smart policy.
    """
    baseline = hourly_frame(comparison.baseline)
    smart = hourly_frame(comparison.smart)
    shared = baseline[["solar_gen_kw", "load_kw", "tariff", "is_peak"]]
    columns = ["cost", "grid_import_kw", "diesel_to_load_kw", "batt_to_load_kw", "soc_pct", "co2_kg"]
    df = shared.join(baseline[columns].add_suffix("_baseline")).join(smart[columns].add_suffix("_smart"))
    df["cost_delta"] = df["cost_baseline"] - df["cost_smart"]
    return df


def export_comparison_csv(comparison: DayComparison, output_dir: Path | str) -> dict[str, Path]:
    """
    Write hourly traces and the side-by-side table to ``output_dir``.

    Returns:
        Mapping of table name to written CSV path.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "baseline": output_dir / "hourly_baseline.csv",
        "smart": output_dir / "hourly_smart.csv",
        "comparison": output_dir / "comparison.csv",
    }
    hourly_frame(comparison.baseline).to_csv(paths["baseline"])
    hourly_frame(comparison.smart).to_csv(paths["smart"])
    comparison_frame(comparison).to_csv(paths["comparison"])
    return paths


def plot_dispatch(simulation: DaySimulation, save_path: Path, title: str | None = None) -> None:
    """Stacked supply of the load by source with the SoC on a twin axis."""
    df = hourly_frame(simulation)
    hours = df.index.values

    fig, ax = plt.subplots(figsize=(10, 5))
    bottom = np.zeros(len(df))
    for column in FLOW_COLUMNS:
        values = df[column].values
        ax.bar(
            hours,
            values,
            bottom=bottom,
            color=FLOW_COLORS[column],
            label=column.replace("_kw", "").replace("_", " "),
        )
        bottom = bottom + values
    ax.plot(hours, df["load_kw"].values, color="black", linewidth=1.5, label="load")
    ax.plot(hours, df["solar_gen_kw"].values, color="#ff7f0e", linestyle="--", label="solar generation")
    ax.set_xlabel("Hour of day")
    ax.set_ylabel("Power [kW]")
    ax.set_xticks(range(0, 24, 2))
    ax.grid(True, alpha=0.2)

    ax_soc = ax.twinx()
    ax_soc.plot(hours, df["soc_pct"].values, color="#9467bd", marker="o", markersize=3, label="SoC")
    ax_soc.set_ylabel("State of charge [%]")
    ax_soc.set_ylim(0, 100)

    handles, labels = ax.get_legend_handles_labels()
    soc_handles, soc_labels = ax_soc.get_legend_handles_labels()
    ax.legend(handles + soc_handles, labels + soc_labels, fontsize=8, loc="upper left")
    ax.set_title(title or f"Dispatch ({simulation.policy_name})")
    fig.tight_layout()
    fig.savefig(save_path, dpi=150)
    plt.close(fig)


def plot_cost_comparison(comparison: DayComparison, save_path: Path) -> None:
    """Cumulative cost of both policies over the day."""
    df = comparison_frame(comparison)
    fig, ax = plt.subplots(figsize=(9, 4.5))
    ax.plot(df.index, df["cost_baseline"].cumsum(), label="baseline", color="#d62728")
    ax.plot(df.index, df["cost_smart"].cumsum(), label="smart", color="#2ca02c")
    peak_hours = df.index[df["is_peak"].astype(bool)]
    if len(peak_hours) > 0:
        ax.axvspan(peak_hours.min() - 0.5, peak_hours.max() + 0.5, color="orange", alpha=0.1, label="peak")
    ax.set_xlabel("Hour of day")
    ax.set_ylabel("Cumulative cost")
    ax.set_title("Baseline vs smart cumulative cost")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(save_path, dpi=150)
    plt.close(fig)


def _write_text_report(
    output_path: Path,
    scenario_name: str,
    comparison: DayComparison,
    config: MicrogridConfig,
) -> None:
    base = comparison.baseline.totals
    smart = comparison.smart.totals
    equivalents = environmental_equivalents(comparison.co2_savings_kg)

    lines = []
    lines.append(f"Scenario: {scenario_name}")
    lines.append("== Microgrid configuration ==")
    lines.append(
        f"- Tariff: {config.base_grid_price:.2f}/kWh off-peak, x{config.peak_factor:.2f} during "
        f"hours {sorted(config.peak_hours)}"
    )
    lines.append(f"- Grid limit: {config.grid_limit_kw:.2f} kW, diesel {config.diesel_price:.2f}/kWh")
    lines.append(
        f"- Battery: {config.battery_capacity_kwh:.2f} kWh, start {config.initial_soc_pct:.1f}%, "
        f"floor {config.min_soc_pct:.1f}%, round trip {config.round_trip_efficiency:.2f}"
    )
    lines.append("")
    lines.append("== Daily totals ==")
    lines.append(f"{'':>22} | {'baseline':>10} | {'smart':>10}")
    lines.append("-" * 48)
    for label, attr in (
        ("Cost", "cost"),
        ("Grid import [kWh]", "grid_kwh"),
        ("Diesel [kWh]", "diesel_kwh"),
        ("Battery to load [kWh]", "batt_to_load_kwh"),
        ("CO2 [kg]", "co2_kg"),
    ):
        lines.append(f"{label:>22} | {getattr(base, attr):10.2f} | {getattr(smart, attr):10.2f}")
    lines.append("")
    lines.append("== Savings ==")
    lines.append(f"Cost savings: {comparison.cost_savings:.2f} ({comparison.savings_pct:.1f}%)")
    lines.append(f"CO2 savings: {comparison.co2_savings_kg:.2f} kg")
    lines.append(
        f"Equivalent to {equivalents['trees']:.2f} tree-years or {equivalents['car_km']:.1f} km by car"
    )
    output_path.write_text("\n".join(lines), encoding="utf-8")


def generate_report(
    scenario_name: str,
    comparison: DayComparison,
    config: MicrogridConfig,
    output_root: Path | str = "results",
) -> Path:
    """
    Generate the full comparison report: CSV tables, plots and a textual
    summary, saved to a timestamped directory under ``output_root``.
    """
    output_dir = _create_results_directory(scenario_name, Path(output_root))

    export_comparison_csv(comparison, output_dir)
    plot_dispatch(comparison.baseline, output_dir / "dispatch_baseline.png")
    plot_dispatch(comparison.smart, output_dir / "dispatch_smart.png")
    plot_cost_comparison(comparison, output_dir / "cost_comparison.png")
    _write_text_report(output_dir / "report.txt", scenario_name, comparison, config)

    return output_dir

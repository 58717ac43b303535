from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pandas as pd

from .reporting import _create_results_directory, generate_report
from .simulation.comparison import DayComparison
from .simulation.energy_simulator import MicrogridConfig


def _save_days_summary(comparisons: List[DayComparison], save_path: Path) -> None:
    """
    Save one CSV row per simulated day with both totals and the savings.
    """
    rows = []
    for day, comparison in enumerate(comparisons, start=1):
        rows.append(
            {
                "day": day,
                "baseline_cost": round(comparison.baseline.totals.cost, 2),
                "smart_cost": round(comparison.smart.totals.cost, 2),
                "cost_savings": round(comparison.cost_savings, 2),
                "savings_pct": round(comparison.savings_pct, 2),
                "co2_savings_kg": round(comparison.co2_savings_kg, 3),
                "smart_final_soc_pct": round(comparison.smart.final_soc_pct, 1),
            }
        )
    pd.DataFrame(rows).to_csv(save_path, index=False)


class ResultBuilder:
    """
    Handle persistence of comparison deliverables.
    """

    def __init__(self, output_root: str | Path = "results") -> None:
        """
        Args:
            output_root: Base directory for generated assets.
        """
        self.output_root = Path(output_root)

    def build_comparison(
        self,
        scenario_name: str,
        *,
        comparison: DayComparison,
        config: MicrogridConfig,
    ) -> Path:
        """
        Save the report of a single-day comparison.

        Args:
            scenario_name: Name used for the output directory.
            comparison: Baseline and smart traces of the day.
            config: Microgrid configuration used for the run.
        """
        output_dir = generate_report(
            scenario_name=scenario_name,
            comparison=comparison,
            config=config,
            output_root=self.output_root,
        )
        (output_dir / "config.json").write_text(
            json.dumps(config.to_dict(), indent=2), encoding="utf-8"
        )
        return output_dir

    def build_days_bundle(
        self,
        scenario_name: str,
        comparisons: List[DayComparison],
        config: MicrogridConfig,
    ) -> Path:
        """
        Persist a summary of consecutive days plus one report per day.

        Raises:
            ValueError: If ``comparisons`` is empty.
        """
        if not comparisons:
            raise ValueError("No comparisons available to build results.")

        run_dir = _create_results_directory(f"{scenario_name}_days", self.output_root)
        _save_days_summary(comparisons, run_dir / "days_summary.csv")
        for day, comparison in enumerate(comparisons, start=1):
            generate_report(
                scenario_name=f"day_{day:02d}",
                comparison=comparison,
                config=config,
                output_root=run_dir,
            )
        return run_dir

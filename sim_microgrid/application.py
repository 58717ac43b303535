from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .persistence import PersistenceService
from .result_builder import ResultBuilder
from .scenario_setup import (
    build_microgrid_config,
    build_sample_source,
    describe_scenario,
    load_scenario_data,
)
from .simulation.comparison import ComparisonOrchestrator, DayComparison
from .simulation.session import SimulationSession, environmental_equivalents

logger = logging.getLogger(__name__)

ScenarioData = Mapping[str, Any] | str | Path | None


def _build_plots_data(comparison: DayComparison) -> Dict[str, Any]:
    """
    Hourly series of both policies for charting clients.
    """
    def series(simulation, attr: str) -> List[float]:
        return [getattr(flows, attr) for flows in simulation.hourly]

    return {
        "hours": list(range(len(comparison.inputs))),
        "solar_gen_kw": [inp.solar_gen_kw for inp in comparison.inputs],
        "load_kw": [inp.load_kw for inp in comparison.inputs],
        "tariff": [inp.tariff for inp in comparison.inputs],
        "is_peak": [inp.is_peak for inp in comparison.inputs],
        "baseline": {
            "cost": series(comparison.baseline, "cost"),
            "grid_import_kw": series(comparison.baseline, "grid_import_kw"),
            "diesel_to_load_kw": series(comparison.baseline, "diesel_to_load_kw"),
            "soc_pct": series(comparison.baseline, "soc_pct"),
        },
        "smart": {
            "cost": series(comparison.smart, "cost"),
            "grid_import_kw": series(comparison.smart, "grid_import_kw"),
            "diesel_to_load_kw": series(comparison.smart, "diesel_to_load_kw"),
            "soc_pct": series(comparison.smart, "soc_pct"),
        },
    }


class SimulationApplication:
    """
    High-level orchestrator used by the CLI and the FastAPI surface.
    """

    def __init__(
        self,
        *,
        save_outputs: bool = False,
        persistence: PersistenceService | None = None,
        result_builder: ResultBuilder | None = None,
    ) -> None:
        """
        Args:
            save_outputs: When True, ResultBuilder saves plots/reports.
            persistence: Optional PersistenceService for DB storage.
            result_builder: Optional ResultBuilder for CLI outputs.
        """
        self.save_outputs = save_outputs
        self.persistence = persistence
        self.result_builder = result_builder

    def run_comparison(
        self,
        *,
        scenario_data: ScenarioData = None,
        day: int = 1,
    ) -> Dict[str, Any]:
        """
        Simulate one day under both policies and summarize the outcome.

        Args:
            scenario_data: Optional mapping/path overriding the default scenario definition.
            day: Day index requested from the sample source.

        Returns:
            Summary dictionary with both totals, the savings, hourly series
            for plotting and the optional output path.

        Raises:
            ValueError: If the scenario violates a configuration invariant.
        """
        scenario_payload = load_scenario_data(scenario_data)
        config = build_microgrid_config(scenario_payload)
        source = build_sample_source(scenario_payload)
        scenario_name = scenario_payload.get("scenario_name", "custom_scenario")

        orchestrator = ComparisonOrchestrator(config, source)
        comparison = orchestrator.prepare(day)
        logger.info(
            "Scenario %s day %d: savings %.2f (%.1f%%)",
            scenario_name,
            day,
            comparison.cost_savings,
            comparison.savings_pct,
        )

        summary: Dict[str, Any] = {
            "scenario": scenario_name,
            "day": day,
            **comparison.summary(),
            "equivalents": environmental_equivalents(comparison.co2_savings_kg),
            "plots_data": _build_plots_data(comparison),
        }

        output_dir = None
        if self.save_outputs and self.result_builder:
            output_dir = self.result_builder.build_comparison(
                scenario_name,
                comparison=comparison,
                config=config,
            )

        if self.persistence:
            self.persistence.record_comparison(
                scenario_name,
                config=config,
                summary={key: value for key, value in summary.items() if key != "plots_data"},
                day=day,
                metadata=describe_scenario(scenario_payload),
                output_dir=str(output_dir) if output_dir else None,
            )

        summary["output_dir"] = str(output_dir) if output_dir else None
        return summary

    def live_hour(
        self,
        *,
        hour: int,
        mode: str = "smart",
        scenario_data: ScenarioData = None,
        day: int = 1,
    ) -> Dict[str, Any]:
        """
        Return the precomputed record of one hour for one policy.
        """
        scenario_payload = load_scenario_data(scenario_data)
        orchestrator = ComparisonOrchestrator(
            build_microgrid_config(scenario_payload),
            build_sample_source(scenario_payload),
        )
        record = orchestrator.live_hour(day, hour, mode)
        inputs = orchestrator.prepare(day).inputs[hour]
        return {
            "day": day,
            "mode": mode,
            **record.to_dict(),
            "active_appliances": list(inputs.active_appliances),
        }

    def step_session(
        self,
        *,
        hours: int,
        mode: str = "smart",
        scenario_data: ScenarioData = None,
    ) -> Dict[str, Any]:
        """
        Replay ``hours`` consecutive hours from midnight of day 1, carrying
        the battery SoC across days.

        Returns:
            Dictionary with the played records and the final session status.
        """
        scenario_payload = load_scenario_data(scenario_data)
        session = SimulationSession(
            build_microgrid_config(scenario_payload),
            build_sample_source(scenario_payload),
            mode=mode,
        )
        records = []
        for _ in range(hours):
            day = session.day
            flows = session.step()
            records.append({"day": day, **flows.to_dict()})
        return {"records": records, "status": session.status()}

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from .application import SimulationApplication
from .config import get_results_dir
from .db.session import init_db
from .persistence import PersistenceService
from .result_builder import ResultBuilder
from .simulation.policies import POLICY_NAMES


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser used by entry points.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(description="Microgrid dispatch simulator CLI")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command")

    compare = sub.add_parser("compare", help="Compare baseline and smart dispatch over one day")
    compare.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write CSV/plot reports to the results directory",
    )
    compare.add_argument(
        "--scenario-file",
        type=str,
        default=None,
        help="Path to a JSON scenario definition",
    )
    compare.add_argument("--day", type=int, default=1, help="Day index to simulate (default 1)")

    step = sub.add_parser("step", help="Replay consecutive hours with SoC carried across days")
    step.add_argument("--hours", type=int, default=24, help="Number of hours to play")
    step.add_argument("--mode", choices=list(POLICY_NAMES), default="smart")
    step.add_argument("--scenario-file", type=str, default=None)

    # Scenario management
    scenario = sub.add_parser("scenario", help="Manage saved scenarios")
    scenario_sub = scenario.add_subparsers(dest="scenario_command")

    scenario_list = scenario_sub.add_parser("list", help="List saved scenarios")
    scenario_list.add_argument(
        "--json",
        action="store_true",
        help="Print the full scenario documents as JSON",
    )

    scenario_save = scenario_sub.add_parser("save", help="Save/update a scenario from a JSON file")
    scenario_save.add_argument("--name", required=True, help="Configuration name")
    scenario_save.add_argument("--file", required=True, help="JSON file path")

    scenario_run = scenario_sub.add_parser("run", help="Run a scenario comparison")
    run_group = scenario_run.add_mutually_exclusive_group(required=True)
    run_group.add_argument("--file", help="Inline JSON scenario (not saved)")
    run_group.add_argument("--name", help="Saved scenario name")
    run_group.add_argument("--id", type=int, help="Saved scenario ID")
    scenario_run.add_argument("--day", type=int, default=1)
    scenario_run.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write reports to disk",
    )

    runs = sub.add_parser("runs", help="Inspect stored comparison results")
    runs_sub = runs.add_subparsers(dest="runs_command")
    runs_list = runs_sub.add_parser("list", help="List the latest results")
    runs_list.add_argument("--limit", type=int, default=20)

    return parser


def _load_json_file(path: str | Path) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise SystemExit(f"File not found: {file_path}")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON file ({file_path}): {exc}") from exc


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _select_configuration(
    persistence: PersistenceService,
    *,
    config_id: int | None,
    name: str | None,
) -> Any:
    record = None
    if config_id is not None:
        record = persistence.get_configuration_by_id(config_id)
    elif name:
        record = persistence.get_configuration_by_name(name)
    if record is None:
        target = f"ID={config_id}" if config_id is not None else f"name '{name}'"
        raise SystemExit(f"Configuration not found ({target}).")
    if record.config_type != "scenario":
        raise SystemExit(
            f"Configuration '{record.name}' has type {record.config_type}, expected scenario."
        )
    return record


def _scenario_payload_from_args(
    args: argparse.Namespace,
    persistence: PersistenceService,
) -> dict[str, Any]:
    if args.file:
        return _load_json_file(args.file)
    record = _select_configuration(persistence, config_id=args.id, name=args.name)
    return {**record.data, "scenario_name": record.name}


def _configure_outputs(app: SimulationApplication, save_outputs: bool) -> None:
    app.save_outputs = save_outputs
    app.result_builder = ResultBuilder(get_results_dir()) if save_outputs else None


def _run_comparison(app: SimulationApplication, scenario_data: Any, day: int) -> None:
    try:
        summary = app.run_comparison(scenario_data=scenario_data, day=day)
    except ValueError as exc:
        raise SystemExit(f"Invalid scenario: {exc}") from exc
    summary.pop("plots_data", None)
    _print_json(summary)


def main(argv: Sequence[str] | None = None) -> None:
    """
    CLI entry point for comparisons, live stepping and saved scenarios.

    Args:
        argv: Optional sequence of CLI args (defaults to sys.argv).
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    init_db()
    persistence = PersistenceService()
    app = SimulationApplication(
        save_outputs=False,
        persistence=persistence,
        result_builder=None,
    )

    if args.command == "compare":
        _configure_outputs(app, not args.no_save)
        scenario_data = _load_json_file(args.scenario_file) if args.scenario_file else None
        _run_comparison(app, scenario_data, args.day)
        return

    if args.command == "step":
        if args.hours < 0:
            parser.error("--hours must be >= 0")
        scenario_data = _load_json_file(args.scenario_file) if args.scenario_file else None
        try:
            result = app.step_session(hours=args.hours, mode=args.mode, scenario_data=scenario_data)
        except ValueError as exc:
            raise SystemExit(f"Invalid scenario: {exc}") from exc
        for record in result["records"]:
            print(
                f"day {record['day']:>2} h{record['hour']:02d} | "
                f"load {record['load_kw']:5.2f} kW | solar {record['solar_gen_kw']:5.2f} kW | "
                f"grid {record['grid_import_kw']:5.2f} kW | diesel {record['diesel_to_load_kw']:5.2f} kW | "
                f"SoC {record['soc_pct']:5.1f}% | cost {record['cost']:7.2f}"
            )
        _print_json(result["status"])
        return

    if args.command == "scenario":
        if not args.scenario_command:
            parser.error("Specify a scenario subcommand (list/save/run).")

        if args.scenario_command == "list":
            configs = persistence.list_configurations("scenario")
            if args.json:
                data = [
                    {"id": cfg.id, "name": cfg.name, "data": cfg.data}
                    for cfg in configs
                ]
            else:
                data = [{"id": cfg.id, "name": cfg.name} for cfg in configs]
            _print_json(data)
            return

        if args.scenario_command == "save":
            data = _load_json_file(args.file)
            record = persistence.save_configuration(args.name, "scenario", data)
            print(f"Scenario '{record.name}' saved with ID {record.id}.")
            return

        if args.scenario_command == "run":
            _configure_outputs(app, not args.no_save)
            payload = _scenario_payload_from_args(args, persistence)
            _run_comparison(app, payload, args.day)
            return

        parser.error(f"Unknown scenario subcommand: {args.scenario_command}")

    if args.command == "runs":
        if args.runs_command != "list":
            parser.error("Specify a runs subcommand (list).")
        records = persistence.list_run_results(limit=args.limit)
        _print_json(
            [
                {
                    "id": rec.id,
                    "result_type": rec.result_type,
                    "scenario_id": rec.scenario_id,
                    "day": rec.day,
                    "cost_savings": rec.cost_savings,
                    "output_dir": rec.output_dir,
                    "created_at": rec.created_at,
                }
                for rec in records
            ]
        )
        return

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    main()

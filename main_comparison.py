from __future__ import annotations

import logging

from sim_microgrid import ComparisonOrchestrator, generate_report
from sim_microgrid.scenario_setup import build_microgrid_config, build_sample_source


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = build_microgrid_config()
    source = build_sample_source()

    orchestrator = ComparisonOrchestrator(config, source)
    comparison = orchestrator.prepare(day=1)

    output_dir = generate_report(
        scenario_name="default_day",
        comparison=comparison,
        config=config,
    )
    print(
        f"Baseline cost {comparison.baseline.totals.cost:.2f}, "
        f"smart cost {comparison.smart.totals.cost:.2f} "
        f"(savings {comparison.cost_savings:.2f}, {comparison.savings_pct:.1f}%)"
    )
    print(f"Report saved to: {output_dir}")


if __name__ == "__main__":
    main()

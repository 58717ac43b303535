"""
Database persistence layer for microgrid scenarios and comparison results.

Every comparison run is stored as a scenario row (the flattened
MicrogridConfig plus profile metadata) linked to a run row holding the
summary JSON and its headline costs. Scenario documents can also be saved by
name and executed later.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterator, Mapping

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from .db.models import RunResultRecord, SavedConfigurationModel, ScenarioRecord
from .db.session import SessionLocal

logger = logging.getLogger(__name__)


def _asdict_safe(obj: Any) -> Dict[str, Any]:
    """
    Convert configuration objects to plain dictionaries for JSON storage.

    Supports objects exposing ``to_dict()`` (MicrogridConfig), dataclasses,
    Pydantic v2 models, mappings and None (empty dict).

    Raises:
        TypeError: If the object type is not supported.
    """
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return dict(obj.to_dict())
    if is_dataclass(obj):
        return asdict(obj)
    if isinstance(obj, Mapping):
        return dict(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    raise TypeError(f"Unsupported object type for serialization: {type(obj)!r}")


def _headline_costs(summary: Mapping[str, Any]) -> Dict[str, float | None]:
    """Pull the per-policy daily costs out of a comparison summary."""
    def cost_of(policy: str) -> float | None:
        totals = summary.get(policy)
        if isinstance(totals, Mapping) and "cost" in totals:
            return float(totals["cost"])
        return None

    savings = summary.get("cost_savings")
    return {
        "baseline_cost": cost_of("baseline"),
        "smart_cost": cost_of("smart"),
        "cost_savings": float(savings) if savings is not None else None,
    }


class PersistenceService:
    """
    Database persistence service for scenarios, saved configurations and
    comparison results.

    All operations use transactional sessions with automatic commit/rollback
    handling. Saved configurations are upserted by name.

    Example:
        ```python
        service = PersistenceService()
        run = service.record_comparison(
            "Sunny day",
            config=MicrogridConfig(),
            summary=comparison.summary(),
            day=1,
            metadata={"weather": "sunny"},
        )
        service.list_run_results(limit=10)
        ```

    Notes:
        - Each operation uses an independent session
        - Records are detached with expire_on_commit=False, so attributes stay
          readable after the session closes
    """

    def __init__(self, session_factory: type[Session] | None = None) -> None:
        """
        Args:
            session_factory: SQLAlchemy session factory. Defaults to the
                SessionLocal of ``db.session``; tests pass an in-memory one.
        """
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Context manager providing a transactional database session.

        Commits on success, rolls back and re-raises on error, always closes.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _new_scenario(name: str, config: Any, metadata: Mapping[str, Any] | None) -> ScenarioRecord:
        return ScenarioRecord(
            name=name,
            config=_asdict_safe(config),
            extra_metadata=dict(metadata or {}),
        )

    @staticmethod
    def _new_run(
        result_type: str,
        summary: Mapping[str, Any],
        day: int | None,
        output_dir: str | None,
    ) -> RunResultRecord:
        return RunResultRecord(
            result_type=result_type,
            summary=dict(summary),
            day=day,
            output_dir=output_dir,
            **_headline_costs(summary),
        )

    def record_scenario(
        self,
        name: str,
        config: Any,
        metadata: Mapping[str, Any] | None = None,
    ) -> ScenarioRecord:
        """
        Persist the configuration a comparison was run with.

        Args:
            name: Scenario name.
            config: MicrogridConfig, dataclass or mapping.
            metadata: Optional profile info (weather, PV size, day index).
        """
        with self.session() as session:
            record = self._new_scenario(name, config, metadata)
            session.add(record)
            session.flush()
            return record

    def record_run_result(
        self,
        result_type: str,
        summary: Mapping[str, Any],
        *,
        scenario: ScenarioRecord | None = None,
        day: int | None = None,
        output_dir: str | None = None,
    ) -> RunResultRecord:
        """
        Store the outcome of a run, optionally linked to a recorded scenario.

        Baseline/smart costs and the savings are copied into columns when the
        summary carries them.
        """
        with self.session() as session:
            record = self._new_run(result_type, summary, day, output_dir)
            record.scenario_id = scenario.id if scenario else None
            session.add(record)
            session.flush()
            return record

    def record_comparison(
        self,
        name: str,
        *,
        config: Any,
        summary: Mapping[str, Any],
        day: int,
        metadata: Mapping[str, Any] | None = None,
        output_dir: str | None = None,
    ) -> RunResultRecord:
        """
        Store a scenario and its comparison result in a single transaction.

        Args:
            name: Scenario name.
            config: MicrogridConfig the day was simulated with.
            summary: ``DayComparison.summary()`` plus any extra keys.
            day: Simulated day index.
            metadata: Profile settings stored with the scenario.
            output_dir: Directory of the saved report, if any.

        Returns:
            The RunResultRecord, with ``scenario_id`` set.
        """
        with self.session() as session:
            scenario = self._new_scenario(name, config, metadata)
            run = self._new_run("comparison", summary, day, output_dir)
            run.scenario = scenario
            session.add_all([scenario, run])
            session.flush()
            logger.debug(
                "Recorded comparison %s day %d (scenario id=%s, run id=%s)",
                name,
                day,
                scenario.id,
                run.id,
            )
            return run

    def list_run_results(
        self,
        limit: int = 50,
        result_type: str | None = None,
    ) -> list[RunResultRecord]:
        """
        Fetch the latest run results, newest first.

        Args:
            limit: Maximum number of records to return.
            result_type: Optional filter, e.g. "comparison".
        """
        with self.session() as session:
            stmt = select(RunResultRecord)
            if result_type:
                stmt = stmt.where(RunResultRecord.result_type == result_type)
            stmt = stmt.order_by(desc(RunResultRecord.created_at), desc(RunResultRecord.id)).limit(limit)
            return list(session.execute(stmt).scalars().all())

    def list_scenarios(self) -> list[ScenarioRecord]:
        with self.session() as session:
            stmt = select(ScenarioRecord).order_by(desc(ScenarioRecord.created_at), desc(ScenarioRecord.id))
            return list(session.execute(stmt).scalars().all())

    def save_configuration(self, name: str, config_type: str, data: dict) -> SavedConfigurationModel:
        """Create or replace the saved configuration called ``name``."""
        with self.session() as session:
            record = self._find_configuration(session, name=name)
            if record is None:
                record = SavedConfigurationModel(name=name, config_type=config_type, data=data)
                session.add(record)
                logger.info("Saved new %s configuration '%s'", config_type, name)
            else:
                record.config_type = config_type
                record.data = data
            session.flush()
            return record

    def list_configurations(self, config_type: str | None = None) -> list[SavedConfigurationModel]:
        with self.session() as session:
            stmt = select(SavedConfigurationModel).order_by(SavedConfigurationModel.name)
            if config_type:
                stmt = stmt.where(SavedConfigurationModel.config_type == config_type)
            return list(session.execute(stmt).scalars().all())

    def get_configuration_by_id(self, config_id: int) -> SavedConfigurationModel | None:
        with self.session() as session:
            return self._find_configuration(session, id=config_id)

    def get_configuration_by_name(self, name: str) -> SavedConfigurationModel | None:
        with self.session() as session:
            return self._find_configuration(session, name=name)

    @staticmethod
    def _find_configuration(session: Session, **criteria: Any) -> SavedConfigurationModel | None:
        stmt = select(SavedConfigurationModel).filter_by(**criteria)
        return session.execute(stmt).scalar_one_or_none()

"""
SQLAlchemy database models for microgrid comparison persistence.

Defines the schema storing scenario configurations, saved configuration
templates and comparison results. All models inherit automatic timestamp
tracking via TimestampMixin.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


class TimestampMixin:
    """
    Mixin adding automatic created_at and updated_at timestamps.

    Notes:
        - Timestamps managed by the database (server_default, onupdate)
        - created_at immutable after insert
        - updated_at changes on every UPDATE
    """
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ScenarioRecord(Base, TimestampMixin):
    """
    Database model for an executed microgrid scenario.

    Attributes:
        id: Primary key (auto-increment).
        name: Scenario label.
        config: Flat MicrogridConfig mapping used for the run (JSON).
        extra_metadata: Profile settings such as weather and PV size (JSON).
        runs: Comparison results produced from this scenario.

    Example:
        ```python
        scenario = ScenarioRecord(
            name="Cloudy day, 13.5 kWh battery",
            config={"battery_capacity_kwh": 13.5, "grid_limit_kw": 5.0},
            extra_metadata={"weather": "cloudy", "solar_capacity_kw": 5.0},
        )
        ```
    """
    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    config = Column(JSON, nullable=False)
    extra_metadata = Column("metadata", JSON, nullable=True)

    runs = relationship("RunResultRecord", back_populates="scenario")


class RunResultRecord(Base, TimestampMixin):
    """
    Database model for comparison results.

    The headline figures are duplicated out of ``summary`` into plain columns
    so runs can be sorted and filtered without reading the JSON.

    Attributes:
        id: Primary key (auto-increment).
        result_type: Type of result ("comparison").
        summary: Totals of both policies and the savings (JSON).
        day: Simulated day index.
        baseline_cost: Daily cost of the baseline policy.
        smart_cost: Daily cost of the smart policy.
        cost_savings: baseline_cost - smart_cost.
        output_dir: Filesystem path to exported report files (optional).
        scenario_id: Foreign key to the scenario that was simulated.
        scenario: Related scenario record.

    Example:
        ```python
        result = RunResultRecord(
            result_type="comparison",
            summary={"cost_savings": 42.5, "savings_pct": 12.1},
            output_dir="results/comparison_2025-01-15_143022",
            scenario_id=3,
        )
        ```
    """
    __tablename__ = "run_results"

    id = Column(Integer, primary_key=True)
    result_type = Column(String(50), nullable=False)
    summary = Column(JSON, nullable=False)
    day = Column(Integer, nullable=True)
    baseline_cost = Column(Float, nullable=True)
    smart_cost = Column(Float, nullable=True)
    cost_savings = Column(Float, nullable=True)
    output_dir = Column(Text, nullable=True)

    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=True, index=True)

    scenario = relationship("ScenarioRecord", back_populates="runs")


class SavedConfigurationModel(Base, TimestampMixin):
    """
    Database model for reusable scenario definitions.

    Attributes:
        id: Primary key (auto-increment).
        name: Unique configuration identifier.
        config_type: Configuration type ("scenario").
        data: Scenario document with tariff / grid / battery / solar / load
            sections (JSON).

    Notes:
        - name is unique constraint
    """
    __tablename__ = "saved_configurations"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    config_type = Column(String(50), nullable=False)
    data = Column(JSON, nullable=False)

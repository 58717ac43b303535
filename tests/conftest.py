from __future__ import annotations

import pytest
from pathlib import Path
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sim_microgrid.db.session import Base  # noqa: E402
from sim_microgrid.persistence import PersistenceService  # noqa: E402
from sim_microgrid.simulation.comparison import build_day_inputs  # noqa: E402
from sim_microgrid.simulation.energy_simulator import MicrogridConfig  # noqa: E402


@pytest.fixture()
def sqlite_session_factory():
    """Provide a session factory bound to an in-memory SQLite database."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    yield Session
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def persistence(sqlite_session_factory):
    """Provide a PersistenceService bound to the temporary SQLite DB."""
    return PersistenceService(session_factory=sqlite_session_factory)


@pytest.fixture()
def make_day_inputs():
    """
    Factory turning two 24-value lists (or scalars) into priced HourInputs.
    """
    def _make(solar, load, config: MicrogridConfig | None = None):
        config = config or MicrogridConfig()
        solar_values = solar if isinstance(solar, (list, tuple)) else [solar] * 24
        load_values = load if isinstance(load, (list, tuple)) else [load] * 24
        return build_day_inputs(list(zip(solar_values, load_values)), config)

    return _make


def _build_simple_scenario_data() -> dict:
    return {
        "scenario_name": "test_minimal",
        "description": "Evening-peaked household on a cloudy day",
        "tariff": {
            "base_grid_price": 10.0,
            "peak_factor": 1.5,
            "peak_hours": [17, 18, 19, 20, 21, 22],
        },
        "grid": {
            "grid_limit_kw": 5.0,
            "peak_min_grid_kw": 0.5,
            "diesel_price": 25.0,
        },
        "emissions": {
            "co2_per_grid_kwh": 0.5,
            "co2_per_diesel_kwh": 0.8,
        },
        "battery": {
            "capacity_kwh": 10.0,
            "initial_soc_pct": 50.0,
            "min_soc_pct": 20.0,
            "round_trip_efficiency": 0.88,
        },
        "solar": {
            "capacity_kw": 5.0,
            "weather": "cloudy",
        },
        "load": {
            "appliances": ["fridge", "lights", "tv", "microwave"],
        },
    }


@pytest.fixture()
def simple_scenario_data() -> dict:
    """Return a lightweight scenario definition used by the application tests."""
    return _build_simple_scenario_data()

from __future__ import annotations

from functools import lru_cache

from ..application import SimulationApplication
from ..config import api_saves_outputs, get_results_dir
from ..db.session import init_db
from ..persistence import PersistenceService
from ..result_builder import ResultBuilder


@lru_cache()
def get_persistence_service() -> PersistenceService:
    """
    Provide a cached PersistenceService instance for API routes.
    """
    init_db()
    return PersistenceService()


def get_application_service() -> SimulationApplication:
    """
    Provide a SimulationApplication configured for API usage.

    Reports are written to the results directory only when
    ``SIM_MICROGRID_API_SAVE_OUTPUTS`` is enabled.
    """
    save_outputs = api_saves_outputs()
    return SimulationApplication(
        save_outputs=save_outputs,
        persistence=get_persistence_service(),
        result_builder=ResultBuilder(get_results_dir()) if save_outputs else None,
    )

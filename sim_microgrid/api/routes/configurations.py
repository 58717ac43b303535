"""
Saved configuration management API endpoints.

Users can save scenario documents by name, list them, and execute a saved
configuration by ID.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...application import SimulationApplication
from ...persistence import PersistenceService
from .. import dependencies
from ..schemas import configurations as config_schemas
from ..schemas import simulation as sim_schemas

router = APIRouter(prefix="/api", tags=["configurations"])


@router.get("/configurations", response_model=list[config_schemas.SavedConfigurationResponse])
def list_configurations(
    type: str | None = None,
    persistence: PersistenceService = Depends(dependencies.get_persistence_service),
) -> list[config_schemas.SavedConfigurationResponse]:
    """
    List saved configurations, optionally filtered by type.
    """
    return persistence.list_configurations(config_type=type)


@router.post("/configurations", response_model=config_schemas.SavedConfigurationResponse)
def create_configuration(
    payload: config_schemas.SavedConfigurationCreate,
    persistence: PersistenceService = Depends(dependencies.get_persistence_service),
) -> config_schemas.SavedConfigurationResponse:
    """
    Create or update a saved configuration (upsert on name).
    """
    return persistence.save_configuration(
        payload.name,
        payload.config_type,
        payload.data,
    )


@router.post("/configurations/{config_id}/run", response_model=sim_schemas.ComparisonResponse)
def run_saved_configuration(
    config_id: int,
    day: int = 1,
    persistence: PersistenceService = Depends(dependencies.get_persistence_service),
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.ComparisonResponse:
    """
    Execute a saved scenario configuration by ID.

    Raises:
        HTTPException 404: If the configuration does not exist.
        HTTPException 400: If the configuration is not a scenario.
        HTTPException 422: If the stored scenario is invalid.
    """
    config = persistence.get_configuration_by_id(config_id)
    if not config:
        raise HTTPException(
            status_code=404,
            detail=f"Configuration {config_id} not found",
        )
    if config.config_type != "scenario":
        raise HTTPException(
            status_code=400,
            detail=f"Configuration {config_id} is a {config.config_type}, not a scenario",
        )

    scenario = {**config.data, "scenario_name": config.name}
    try:
        summary = app_service.run_comparison(scenario_data=scenario, day=day)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return sim_schemas.ComparisonResponse(**summary)

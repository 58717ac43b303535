"""
Direct simulation execution API endpoints.

Endpoints:
- POST /comparison: simulate one day under both policies
- POST /comparison/hour: precomputed record of one hour for one policy
- GET /runs: historical execution results

These endpoints accept inline scenario documents. Invalid configurations are
reported as HTTP 422.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ...application import SimulationApplication
from ...persistence import PersistenceService
from .. import dependencies
from ..schemas import simulation as sim_schemas

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/comparison", response_model=sim_schemas.ComparisonResponse)
def trigger_comparison(
    payload: sim_schemas.ComparisonRequest | None = None,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.ComparisonResponse:
    """
    Simulate one day under the baseline and smart policies.

    Both policies consume the same hourly inputs; the response carries both
    totals and the savings of the smart policy.

    Raises:
        HTTPException 422: If the scenario violates a configuration invariant.
    """
    payload = payload or sim_schemas.ComparisonRequest()
    try:
        summary = app_service.run_comparison(scenario_data=payload.scenario, day=payload.day)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return sim_schemas.ComparisonResponse(**summary)


@router.post("/comparison/hour", response_model=sim_schemas.HourRecordResponse)
def live_hour(
    payload: sim_schemas.HourRecordRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.HourRecordResponse:
    """
    Return the record of one hour for one policy.

    The record is read from the precomputed day, so summing every hour of a
    mode gives exactly the totals of POST /comparison.
    """
    try:
        record = app_service.live_hour(
            hour=payload.hour,
            mode=payload.mode,
            scenario_data=payload.scenario,
            day=payload.day,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return sim_schemas.HourRecordResponse(**record)


@router.get("/runs", response_model=list[sim_schemas.RunResult])
def list_runs(
    limit: int = Query(20, ge=1, le=200),
    result_type: str | None = None,
    persistence: PersistenceService = Depends(dependencies.get_persistence_service),
) -> list[sim_schemas.RunResult]:
    """
    List historical execution results, newest first, optionally filtered by
    result type.
    """
    return persistence.list_run_results(limit=limit, result_type=result_type)

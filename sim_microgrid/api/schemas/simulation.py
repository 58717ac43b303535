"""
Simulation execution schemas for API validation.

This module contains Pydantic models for:
- Comparison: one day simulated under the baseline and smart policies
- HourRecord: the precomputed record of one hour for one policy
- RunResult: historical execution results
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ComparisonRequest(BaseModel):
    """
    Request schema for a baseline-vs-smart comparison.

    Attributes:
        day: Day index requested from the sample source.
        scenario: Scenario document (tariff, grid, emissions, battery, solar,
            load, optional samples). None runs the bundled default.

    Example:
        ```python
        {
            "day": 1,
            "scenario": {
                "battery": {"capacity_kwh": 13.5, "initial_soc_pct": 30},
                "solar": {"capacity_kw": 6.0, "weather": "cloudy"}
            }
        }
        ```
    """

    day: int = Field(default=1, ge=1, description="Day index (1-based)")
    scenario: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Scenario configuration (JSON), or None for default",
    )


class PolicyTotals(BaseModel):
    """Energy, cost and emission totals of one policy over the day."""

    cost: float
    grid_kwh: float
    diesel_kwh: float
    solar_to_load_kwh: float
    solar_to_batt_kwh: float
    batt_to_load_kwh: float
    co2_kg: float
    load_kwh: float
    unmet_kwh: float


class ComparisonResponse(BaseModel):
    """
    Response schema for a completed comparison.

    Attributes:
        scenario: Scenario name.
        day: Simulated day index.
        baseline: Totals of the baseline policy.
        smart: Totals of the smart policy.
        cost_savings: Baseline cost minus smart cost.
        co2_savings_kg: Baseline emissions minus smart emissions.
        savings_pct: Cost savings relative to the baseline cost.
        grid_kwh_delta: Smart grid import minus baseline grid import.
        final_soc_pct: End-of-day SoC per policy.
        equivalents: CO2 savings expressed as trees and car km.
        output_dir: Directory of saved reports (if enabled).
        plots_data: Hourly series for charting.
    """

    scenario: str = Field(..., description="Scenario name or identifier")
    day: int
    baseline: PolicyTotals
    smart: PolicyTotals
    cost_savings: float
    co2_savings_kg: float
    savings_pct: float
    grid_kwh_delta: float
    final_soc_pct: Dict[str, float]
    equivalents: Dict[str, float]
    output_dir: Optional[str] = Field(None, description="Output directory path (if saved)")
    plots_data: Optional[Dict[str, Any]] = Field(None, description="Hourly series for charting")


class HourRecordRequest(BaseModel):
    """Request schema for the live record of one hour."""

    hour: int = Field(..., ge=0, le=23, description="Hour of day")
    mode: Literal["baseline", "smart"] = Field(default="smart", description="Policy to display")
    day: int = Field(default=1, ge=1)
    scenario: Optional[Dict[str, Any]] = None


class HourRecordResponse(BaseModel):
    """
    One hour of dispatch as computed for the cached day.

    All flows are kW over a one-hour step (numerically kWh).
    """

    day: int
    mode: str
    hour: int
    solar_gen_kw: float
    load_kw: float
    tariff: float
    is_peak: bool
    solar_to_load_kw: float
    solar_to_batt_kw: float
    batt_to_load_kw: float
    grid_to_load_kw: float
    grid_to_batt_kw: float
    diesel_to_load_kw: float
    grid_import_kw: float
    unmet_load_kw: float
    soc_kwh: float
    soc_pct: float
    cost: float
    co2_kg: float
    battery_power_kw: float
    active_appliances: List[str] = Field(default_factory=list)


class RunResult(BaseModel):
    """
    Historical execution result record.

    Runs are ordered by created_at descending (newest first) in GET /api/runs.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    result_type: str = Field(..., description="Type of execution, e.g. 'comparison'")
    summary: Dict[str, Any] = Field(..., description="Execution results")
    day: Optional[int] = Field(None, description="Simulated day index")
    baseline_cost: Optional[float] = None
    smart_cost: Optional[float] = None
    cost_savings: Optional[float] = None
    scenario_id: Optional[int] = Field(None, description="Link to the recorded scenario")
    output_dir: Optional[str] = None
    created_at: datetime = Field(..., description="Timestamp of result creation")

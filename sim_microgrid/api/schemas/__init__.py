"""
Pydantic schemas for API request/response validation, organized by domain.
"""

from __future__ import annotations

from .configurations import SavedConfigurationCreate, SavedConfigurationResponse
from .simulation import (
    ComparisonRequest,
    ComparisonResponse,
    HourRecordRequest,
    HourRecordResponse,
    RunResult,
)

__all__ = [
    "ComparisonRequest",
    "ComparisonResponse",
    "HourRecordRequest",
    "HourRecordResponse",
    "RunResult",
    "SavedConfigurationCreate",
    "SavedConfigurationResponse",
]

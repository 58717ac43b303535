"""
Saved configuration schemas for API validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SavedConfigurationResponse(BaseModel):
    """
    Response schema for a saved scenario configuration.

    Attributes:
        id: Database identifier.
        name: Unique configuration name.
        config_type: Configuration type ("scenario").
        data: Scenario document with tariff / grid / emissions / battery /
            solar / load sections.
        created_at: Creation timestamp.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(..., description="Unique configuration name")
    config_type: str = Field(..., description="Configuration type")
    data: Dict[str, Any] = Field(..., description="Scenario document")
    created_at: Optional[datetime] = None


class SavedConfigurationCreate(BaseModel):
    """
    Request schema for creating or updating a saved configuration.

    Upsert is keyed on ``name``.

    Example:
        ```python
        {
            "name": "Cloudy winter day",
            "config_type": "scenario",
            "data": {
                "solar": {"capacity_kw": 5.0, "weather": "cloudy"},
                "battery": {"capacity_kwh": 10.0}
            }
        }
        ```
    """

    name: str = Field(..., min_length=1, description="Unique configuration name")
    config_type: str = Field(default="scenario", description="Configuration type")
    data: Dict[str, Any] = Field(..., description="Complete scenario document")

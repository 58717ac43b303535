"""
API route modules, organized by domain:
- simulation: comparison execution, live hour records, run history
- configurations: saved scenario management and execution

All routers are prefixed with /api.
"""

from __future__ import annotations

from .configurations import router as configurations_router
from .simulation import router as simulation_router

__all__ = [
    "simulation_router",
    "configurations_router",
]

"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.packing import router as packing_router
from routes.statistics import router as statistics_router

__all__ = [
    "packing_router",
    "statistics_router",
]

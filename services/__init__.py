"""
Business logic services.

Each service handles one domain area.
"""

from services.pallet_allocation_service import (
    PalletAllocationService,
    get_pallet_allocation_service,
)
from services.packing_plan_service import PackingPlanService, get_packing_plan_service
from services.packing_session_service import PackingSessionService, get_packing_session_service
from services.pallet_navigator import PalletNavigator, PagerAction
from services.recalc_scheduler import RecalcScheduler
from services.export_service import ExportService, get_export_service
from services.statistics_service import StatisticsService, get_statistics_service

__all__ = [
    "PalletAllocationService",
    "get_pallet_allocation_service",
    "PackingPlanService",
    "get_packing_plan_service",
    "PackingSessionService",
    "get_packing_session_service",
    "PalletNavigator",
    "PagerAction",
    "RecalcScheduler",
    "ExportService",
    "get_export_service",
    "StatisticsService",
    "get_statistics_service",
]

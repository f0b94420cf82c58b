"""
Packing plan service — one full, pure recalculation of a snapshot.

snapshot → global index → pallets → labels → summary → pager view.
The same snapshot and pager state always produce the same plan.
"""

from typing import Optional

import structlog

from config import settings
from exceptions import PalletLimitExceededError
from models.packing import PackingPlan, PackingSnapshot, PagerState
from services.packing_summary_service import short_fill_units, summarize
from services.pallet_allocation_service import get_pallet_allocation_service, whole_cases
from services.pallet_navigator import PalletNavigator

logger = structlog.get_logger(__name__)


class PackingPlanService:
    """Builds a PackingPlan from a PackingSnapshot."""

    def __init__(self):
        self.allocation = get_pallet_allocation_service()
        self.max_pallets = settings.max_pallets

    def check_pallet_limit(self, snapshot: PackingSnapshot) -> None:
        """
        Reject snapshots whose plan would exceed the pallet limit.

        Raises:
            PalletLimitExceededError: ceil(indexed cases / case_per_pallet) > max_pallets
        """
        case_per_pallet = snapshot.case_per_pallet
        if not case_per_pallet or case_per_pallet <= 0:
            return

        indexed_cases = sum(whole_cases(b.quantity) for b in snapshot.ordered_buckets())
        pallet_count = -(-indexed_cases // case_per_pallet)
        if pallet_count > self.max_pallets:
            logger.warning(
                "pallet_limit_exceeded",
                pallet_count=pallet_count,
                max_pallets=self.max_pallets,
            )
            raise PalletLimitExceededError(pallet_count, self.max_pallets)

    def calculate(
        self,
        snapshot: PackingSnapshot,
        pager: Optional[PagerState] = None,
    ) -> PackingPlan:
        """
        Recalculate everything for a snapshot.

        Args:
            snapshot: Current form inputs
            pager: Previous cursor; clamped to the new pallet list

        Returns:
            PackingPlan with summary, ranges, pallets and pager view

        Raises:
            PalletLimitExceededError: Too many pallets for one plan
        """
        self.check_pallet_limit(snapshot)

        buckets = snapshot.ordered_buckets()
        short_fill = short_fill_units(snapshot.extras)

        ranges, indexed_cases, pallets = self.allocation.allocate(
            buckets,
            case_per_pallet=snapshot.case_per_pallet,
            bottles_per_case=snapshot.bottles_per_case,
            short_fill=short_fill,
        )

        summary = summarize(
            buckets,
            snapshot.extras,
            bottles_per_case=snapshot.bottles_per_case,
            case_per_pallet=snapshot.case_per_pallet,
        )

        navigator = PalletNavigator(pallets, pager)

        logger.info(
            "packing_plan_calculated",
            bucket_count=summary.bucket_count,
            total_cases=str(summary.total_cases),
            pallet_count=len(pallets),
            pager_current=navigator.current,
        )

        return PackingPlan(
            summary=summary,
            global_ranges=ranges,
            indexed_cases=indexed_cases,
            pallets=pallets,
            pager=navigator.view(),
        )


# Singleton
_packing_plan_service: Optional[PackingPlanService] = None


def get_packing_plan_service() -> PackingPlanService:
    """Get the singleton packing plan service instance."""
    global _packing_plan_service
    if _packing_plan_service is None:
        _packing_plan_service = PackingPlanService()
    return _packing_plan_service

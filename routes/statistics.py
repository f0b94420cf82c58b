"""
Statistics API routes.

Stateless calculators: inner-pack yield and standard deviation.
"""

from fastapi import APIRouter

from models.statistics import (
    InnerYieldInput,
    InnerYieldResult,
    StdDevInput,
    StdDevResult,
)
from routes.packing import handle_error
from services.statistics_service import get_statistics_service

router = APIRouter(prefix="/api/statistics", tags=["Statistics"])


@router.post("/inner-yield", response_model=InnerYieldResult)
async def inner_yield(data: InnerYieldInput):
    """Yield rate, weighing balance and expected bottle range."""
    try:
        return get_statistics_service().calculate_inner_yield(data)
    except Exception as e:
        return handle_error(e)


@router.post("/std-dev", response_model=StdDevResult)
async def std_dev(data: StdDevInput):
    """Count, mean and sample standard deviation of the entered numbers."""
    try:
        return get_statistics_service().calculate_std_dev(data)
    except Exception as e:
        return handle_error(e)

"""
Statistics calculators that sit beside the packing tool.

Inner-pack:
    yield   = in_stock × spec / mixed × 100
    balance = (in_stock × spec + waste) / mixed × 100
    range   = floor(mid × 0.98) ~ ceil(mid × 1.02), mid = mixed / spec

Standard deviation:
    sample std with divisor (count - 1), or 1 for a single value
"""

from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

import pandas as pd
import structlog

from config.packing import UNIT_WORD
from models.statistics import (
    InnerYieldInput,
    InnerYieldResult,
    StdDevInput,
    StdDevResult,
)

logger = structlog.get_logger(__name__)

RANGE_LOWER_FACTOR = Decimal("0.98")
RANGE_UPPER_FACTOR = Decimal("1.02")
TWO_PLACES = Decimal("0.01")


def _percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    return (numerator / denominator * 100).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class StatisticsService:
    """Inner-pack yield and standard deviation calculators."""

    def calculate_inner_yield(self, data: InnerYieldInput) -> InnerYieldResult:
        """
        Calculate yield, weighing balance and expected bottle range.

        All results are unknown while mixed weight or spec weight is
        missing or zero; missing counts and waste count as 0.
        """
        mixed = data.mixed_weight or Decimal("0")
        spec = data.spec_weight or Decimal("0")
        if not mixed or not spec:
            return InnerYieldResult()

        in_stock = data.in_stock_count or Decimal("0")
        waste = data.waste_weight or Decimal("0")
        product_weight = in_stock * spec

        yield_rate = _percent(product_weight, mixed)
        balance_rate = _percent(product_weight + waste, mixed)

        mid = mixed / spec
        range_min = int((mid * RANGE_LOWER_FACTOR).to_integral_value(rounding=ROUND_FLOOR))
        range_max = int((mid * RANGE_UPPER_FACTOR).to_integral_value(rounding=ROUND_CEILING))

        logger.debug(
            "inner_yield_calculated",
            yield_rate=str(yield_rate),
            balance_rate=str(balance_rate),
        )

        return InnerYieldResult(
            yield_rate=yield_rate,
            balance_rate=balance_rate,
            yield_text=f"{yield_rate}%",
            balance_text=f"{balance_rate}%",
            range_min=range_min,
            range_max=range_max,
            range_text=f"{range_min} ~ {range_max} {UNIT_WORD}",
        )

    def calculate_std_dev(self, data: StdDevInput) -> StdDevResult:
        """
        Sample statistics of whitespace-separated numbers.

        Tokens that are not numbers are dropped. No numbers → all unknown.
        """
        tokens = data.input.split()
        values = pd.to_numeric(pd.Series(tokens, dtype="object"), errors="coerce").dropna()
        values = values[values.abs() != float("inf")]
        if values.empty:
            return StdDevResult()

        count = int(values.size)
        mean = float(values.mean())
        std = float(values.std(ddof=1)) if count > 1 else 0.0

        return StdDevResult(
            count=count,
            mean=Decimal(repr(mean)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
            std=Decimal(repr(std)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        )


# Singleton
_statistics_service: Optional[StatisticsService] = None


def get_statistics_service() -> StatisticsService:
    """Get the singleton statistics service instance."""
    global _statistics_service
    if _statistics_service is None:
        _statistics_service = StatisticsService()
    return _statistics_service

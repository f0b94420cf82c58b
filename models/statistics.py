"""
Statistics calculator schemas.

Inner-pack yield and sample standard deviation. None means unknown.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from models.base import BaseSchema
from utils.text_utils import parse_decimal


class InnerYieldInput(BaseSchema):
    """Inner-pack figures as typed by the operator (kg and bottles)."""

    sample_weight: Optional[Decimal] = Field(None, description="Partial-tank sample weight (kg)")
    spec_weight: Optional[Decimal] = Field(None, description="Fill weight per bottle (kg)")
    mixed_weight: Optional[Decimal] = Field(None, description="Material weight after mixing (kg)")
    in_stock_count: Optional[Decimal] = Field(None, description="Bottles put into stock")
    sample_count: Optional[Decimal] = Field(None, description="Bottles pulled as samples")
    waste_weight: Optional[Decimal] = Field(None, description="Waste powder weight (kg)")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Optional[Decimal]:
        return parse_decimal(v)


class InnerYieldResult(BaseSchema):
    """Yield, weighing balance and expected bottle range."""

    yield_rate: Optional[Decimal] = Field(None, description="Percent, 2 decimals")
    balance_rate: Optional[Decimal] = Field(None, description="Percent, 2 decimals")
    yield_text: str = Field(default="-", description="e.g. '97.50%'")
    balance_text: str = Field(default="-", description="e.g. '99.10%'")
    range_min: Optional[int] = Field(None, description="Lower bound of expected bottles")
    range_max: Optional[int] = Field(None, description="Upper bound of expected bottles")
    range_text: str = Field(default="-", description="e.g. '392 ~ 408 units'")


class StdDevInput(BaseSchema):
    """Numbers separated by spaces or new lines."""

    input: str = Field(default="", max_length=100000)


class StdDevResult(BaseSchema):
    """Sample count, mean and sample standard deviation."""

    count: Optional[int] = None
    mean: Optional[Decimal] = Field(None, description="2 decimals")
    std: Optional[Decimal] = Field(None, description="Sample standard deviation, 2 decimals")

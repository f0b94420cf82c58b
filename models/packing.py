"""
Packing schemas: allocation inputs and derived pallet plan.

The snapshot is the flat, persisted/shared shape of the operator's
form. Everything else is derived from it and rebuilt on every
recalculation.
"""

from decimal import Decimal
from typing import Any, Optional, List, Dict

from pydantic import Field, field_validator

from config.packing import (
    BUCKET_NAMES,
    BUCKET_DECIMAL_PLACES,
    DEFAULT_TEMPLATE_NAME,
)
from models.base import BaseSchema
from utils.text_utils import parse_decimal, parse_whole_number, truncate_decimal


# ===================
# INPUT SCHEMAS
# ===================

class Bucket(BaseSchema):
    """A named source of packed cases. `quantity=None` means unset."""

    name: str = Field(..., description="Bucket name (A-J)")
    quantity: Optional[Decimal] = Field(
        None,
        description="Cases packed, one decimal place at most; None when unset"
    )


class PackingExtras(BaseSchema):
    """
    Auxiliary counters.

    Kept as typed by the operator (None when unset). The summary decides
    which values are usable: only positive whole numbers count.
    """

    zero_case: Optional[Decimal] = Field(None, description="Short-fill units after the last case")
    sample: Optional[Decimal] = Field(None, description="Units pulled as samples")
    label: Optional[Decimal] = Field(None, description="Extra labels consumed")

    @field_validator("zero_case", "sample", "label", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Optional[Decimal]:
        """Empty or non-numeric input means unset."""
        return parse_decimal(v)


class PackingSnapshot(BaseSchema):
    """
    Flat snapshot of the packing form.

    This is the only shape persisted or shared. Buckets missing from the
    map are unset.
    """

    buckets: Dict[str, Optional[Decimal]] = Field(
        default_factory=dict,
        description="Bucket name → quantity (None when unset)"
    )
    extras: PackingExtras = Field(default_factory=PackingExtras)
    bottles_per_case: Optional[int] = Field(None, description="Bottles per case")
    case_per_pallet: Optional[int] = Field(None, description="Cases per pallet")
    template_name: Optional[str] = Field(
        DEFAULT_TEMPLATE_NAME,
        max_length=100,
        description="Free-text label of the packing template"
    )
    global_count: Optional[Decimal] = Field(
        None,
        description="Value applied to every bucket by the fill action"
    )

    @field_validator("buckets", mode="before")
    @classmethod
    def normalize_buckets(cls, v: Any) -> Dict[str, Optional[Decimal]]:
        """
        Normalize bucket names and quantities.

        Names are upper-cased and must belong to the fixed alphabet.
        Quantities are truncated to one decimal; unparseable ones are unset.
        """
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("buckets must be a mapping of bucket name to quantity")

        normalized: Dict[str, Optional[Decimal]] = {}
        for raw_name, raw_quantity in v.items():
            name = str(raw_name).strip().upper()
            if name not in BUCKET_NAMES:
                raise ValueError(f"unknown bucket '{raw_name}' (expected one of A-J)")

            quantity = parse_decimal(raw_quantity)
            if quantity is not None:
                quantity = truncate_decimal(quantity, BUCKET_DECIMAL_PLACES)
            normalized[name] = quantity
        return normalized

    @field_validator("bottles_per_case", "case_per_pallet", mode="before")
    @classmethod
    def coerce_capacity(cls, v: Any) -> Optional[int]:
        """Empty, non-numeric or fractional capacity means unset."""
        return parse_whole_number(v)

    @field_validator("global_count", mode="before")
    @classmethod
    def coerce_global_count(cls, v: Any) -> Optional[Decimal]:
        return parse_decimal(v)

    def ordered_buckets(self) -> List[Bucket]:
        """All ten buckets in fixed order, unset ones included."""
        return [
            Bucket(name=name, quantity=self.buckets.get(name))
            for name in BUCKET_NAMES
        ]


# ===================
# DERIVED SCHEMAS
# ===================

class GlobalCaseRange(BaseSchema):
    """Global case numbers owned by one bucket (inclusive, 1-based)."""

    bucket_name: str = Field(..., description="Bucket name")
    start_index: int = Field(..., ge=1, description="First global case number")
    end_index: int = Field(..., ge=1, description="Last global case number")

    @property
    def size(self) -> int:
        return self.end_index - self.start_index + 1


class PalletWindow(BaseSchema):
    """Global case numbers loaded on one pallet (inclusive, 1-based)."""

    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1)

    @property
    def size(self) -> int:
        return self.end - self.start + 1


class Pallet(BaseSchema):
    """One pallet of the plan with its rendered label."""

    index: int = Field(..., ge=1, description="Pallet number (1-based)")
    case_start: int = Field(..., ge=1, description="First global case number")
    case_end: int = Field(..., ge=1, description="Last global case number")
    size: int = Field(..., ge=1, description="Cases on this pallet")
    segments: List[str] = Field(default_factory=list, description="Bucket ranges, e.g. ['A9-A10', 'B1-B5']")
    text: str = Field(..., description="Rendered label, short-fill annotation included")
    bottle_count: int = Field(..., ge=0, description="Bottles on this pallet")
    is_tail: bool = Field(default=False, description="Last pallet of the plan")
    short_fill_label: Optional[str] = Field(
        None,
        description="Case label of the short-fill case (tail pallet only)"
    )


class PackingSummary(BaseSchema):
    """Aggregate yield figures. None means unknown."""

    bucket_count: int = Field(default=0, ge=0, description="Buckets with a quantity entered")
    total_cases: Decimal = Field(default=Decimal("0"), description="Sum of bucket quantities")
    case_text: str = Field(..., description="e.g. '15 units+3 units'")
    total_bottles: Decimal = Field(default=Decimal("0"), description="Cases × bottles per case + short-fill")
    bottle_with_sample: Optional[Decimal] = Field(None, description="Bottles including samples")
    label_count: Optional[Decimal] = Field(None, description="Labels used")
    full_pallets: Optional[int] = Field(None, description="Completely filled pallets")
    remainder_cases: Optional[Decimal] = Field(None, description="Cases on the partial pallet")
    pallet_text: str = Field(..., description="e.g. '1 full pallets+7 units'")


class PagerState(BaseSchema):
    """Cursor position in the pallet list. current is 0 only when empty."""

    current: int = Field(default=1, ge=0)
    total: int = Field(default=0, ge=0)


class PagerView(BaseSchema):
    """The pallet under the cursor."""

    current: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    range_text: str = Field(default="", description="Label of the current pallet")
    bottle_count: int = Field(default=0, ge=0, description="Bottles on the current pallet")

    @property
    def state(self) -> PagerState:
        return PagerState(current=self.current, total=self.total)


class PackingPlan(BaseSchema):
    """Complete output of one recalculation."""

    summary: PackingSummary
    global_ranges: List[GlobalCaseRange] = Field(default_factory=list)
    indexed_cases: int = Field(default=0, ge=0, description="Whole cases that received a global number")
    pallets: List[Pallet] = Field(default_factory=list)
    pager: PagerView = Field(default_factory=PagerView)

"""
Packing summary — aggregate yield figures for one snapshot.

Stateless: always recomputed in full from the snapshot.

Formulas:
    total_bottles      = total_cases × bottles_per_case + short_fill
    bottle_with_sample = total_bottles + sample          (sample a positive whole number)
    label_count        = bottle_with_sample + label      (both known)
    pallets            = floor(total_cases / case_per_pallet) full + remainder
"""

from decimal import Decimal, ROUND_FLOOR
from typing import Optional, Sequence

from config.packing import (
    FULL_PALLET_WORD,
    PALLET_TEXT_UNAVAILABLE,
    UNIT_WORD,
    UNKNOWN_TEXT,
)
from models.packing import Bucket, PackingExtras, PackingSummary
from utils.text_utils import format_quantity


def positive_whole(value: Optional[Decimal]) -> Optional[int]:
    """Value as int when it is a positive whole number, else None."""
    if value is None or value <= 0 or value != value.to_integral_value():
        return None
    return int(value)


def short_fill_units(extras: PackingExtras) -> int:
    """Short-fill units, 0 when unset or not a positive whole number."""
    return positive_whole(extras.zero_case) or 0


def _units(value) -> str:
    return f"{format_quantity(value)} {UNIT_WORD}"


def summarize(
    buckets: Sequence[Bucket],
    extras: PackingExtras,
    bottles_per_case: Optional[int],
    case_per_pallet: Optional[int],
) -> PackingSummary:
    """
    Compute the summary block.

    Args:
        buckets: Buckets in fixed order (unset ones included)
        extras: Short-fill, sample and label counters
        bottles_per_case: Bottles per case; unset counts as 0
        case_per_pallet: Pallet capacity; unset or 0 → "unavailable"

    Returns:
        PackingSummary with None for unknown totals
    """
    valid = [b for b in buckets if b.quantity is not None and b.quantity >= 0]
    bucket_count = len(valid)
    total_cases = sum((b.quantity for b in valid), Decimal("0"))

    short_fill = short_fill_units(extras)
    per_case = bottles_per_case if bottles_per_case and bottles_per_case > 0 else 0

    case_text = _units(total_cases)
    if short_fill > 0:
        case_text += f"+{_units(short_fill)}"

    total_bottles = total_cases * per_case + short_fill

    bottle_with_sample = None
    sample = positive_whole(extras.sample)
    if sample is not None:
        bottle_with_sample = total_bottles + sample

    label_count = None
    label = positive_whole(extras.label)
    if bottle_with_sample is not None and label is not None:
        label_count = bottle_with_sample + label

    full_pallets = None
    remainder_cases = None
    pallet_text = PALLET_TEXT_UNAVAILABLE
    if case_per_pallet and case_per_pallet > 0:
        full_pallets = int((total_cases / case_per_pallet).to_integral_value(rounding=ROUND_FLOOR))
        remainder_cases = total_cases - full_pallets * case_per_pallet
        pallet_text = f"{full_pallets} {FULL_PALLET_WORD}"
        if remainder_cases:
            pallet_text += f"+{_units(remainder_cases)}"
        if short_fill > 0:
            pallet_text += f"+{_units(short_fill)}"

    return PackingSummary(
        bucket_count=bucket_count,
        total_cases=total_cases,
        case_text=case_text,
        total_bottles=total_bottles,
        bottle_with_sample=bottle_with_sample,
        label_count=label_count,
        full_pallets=full_pallets,
        remainder_cases=remainder_cases,
        pallet_text=pallet_text,
    )


def format_known(value: Optional[Decimal]) -> str:
    """Quantity text, '-' when unknown."""
    return UNKNOWN_TEXT if value is None else format_quantity(value)


def render_summary_text(summary: PackingSummary) -> str:
    """
    Clipboard text of the summary, one figure per line.

    Buckets: 2
    Cases: 15 units+3 units
    Bottles: 183
    Bottles incl. samples: -
    Labels used: -
    Pallets: 1 full pallets+7 units+3 units
    """
    return "\n".join([
        f"Buckets: {summary.bucket_count}",
        f"Cases: {summary.case_text}",
        f"Bottles: {format_quantity(summary.total_bottles)}",
        f"Bottles incl. samples: {format_known(summary.bottle_with_sample)}",
        f"Labels used: {format_known(summary.label_count)}",
        f"Pallets: {summary.pallet_text}",
    ])

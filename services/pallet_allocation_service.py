"""
Pallet Allocation Service — Numbers every case and cuts the numbering into pallets.

Algorithm:
1. INDEX cases globally: walk buckets A..J, give each bucket a contiguous
   block of 1-based case numbers (whole cases only)
2. PARTITION the numbering into windows of `case_per_pallet`, last may be partial
3. LABEL each window: overlap it with every bucket block and render the
   bucket-local numbers ("A9-A10、B1-B5")
4. ANNOTATE the tail pallet with the short-fill case that follows the last
   real case ("short-fill B6(3 units)")

Everything here is pure. Unset or non-positive inputs contribute nothing;
nothing raises.
"""

from decimal import Decimal, ROUND_FLOOR
from math import ceil
from typing import List, Optional, Sequence, Tuple

import structlog

from config.packing import SEGMENT_SEPARATOR, SHORT_FILL_WORD, UNIT_WORD
from models.packing import Bucket, GlobalCaseRange, Pallet, PalletWindow

logger = structlog.get_logger(__name__)


def whole_cases(quantity: Optional[Decimal]) -> int:
    """
    Whole cases in a bucket quantity.

    Fractional cases count towards totals but never get a case number:
    10.5 → 10, None → 0, -2 → 0.
    """
    if quantity is None or quantity <= 0:
        return 0
    return int(quantity.to_integral_value(rounding=ROUND_FLOOR))


# ===================
# STEP 1: GLOBAL INDEX
# ===================

def build_global_ranges(buckets: Sequence[Bucket]) -> Tuple[List[GlobalCaseRange], int]:
    """
    Assign contiguous global case numbers to each bucket, in the given order.

    Args:
        buckets: Buckets in fixed A..J order

    Returns:
        (ranges, indexed_cases) where ranges cover [1, indexed_cases]
        without gaps or overlaps
    """
    ranges: List[GlobalCaseRange] = []
    running = 1

    for bucket in buckets:
        count = whole_cases(bucket.quantity)
        if count <= 0:
            continue
        start = running
        end = start + count - 1
        ranges.append(GlobalCaseRange(
            bucket_name=bucket.name,
            start_index=start,
            end_index=end,
        ))
        running = end + 1

    return ranges, running - 1


def locate_case(ranges: Sequence[GlobalCaseRange], case_number: int) -> Optional[Tuple[str, int]]:
    """
    Find which bucket owns a global case number.

    Returns:
        (bucket_name, local_index), or None when outside every range
    """
    for case_range in ranges:
        if case_range.start_index <= case_number <= case_range.end_index:
            return case_range.bucket_name, case_number - case_range.start_index + 1
    return None


# ===================
# STEP 2: PARTITION
# ===================

def partition_pallets(indexed_cases: int, case_per_pallet: Optional[int]) -> List[PalletWindow]:
    """
    Split [1, indexed_cases] into pallet windows.

    Args:
        indexed_cases: Total numbered cases
        case_per_pallet: Pallet capacity; unset or <= 0 yields no pallets

    Returns:
        ceil(indexed_cases / case_per_pallet) windows, all full except
        possibly the last
    """
    if not case_per_pallet or case_per_pallet <= 0 or indexed_cases <= 0:
        return []

    pallet_count = ceil(indexed_cases / case_per_pallet)
    return [
        PalletWindow(
            start=i * case_per_pallet + 1,
            end=min((i + 1) * case_per_pallet, indexed_cases),
        )
        for i in range(pallet_count)
    ]


# ===================
# STEP 3: LABELS
# ===================

def render_segment(bucket_name: str, local_start: int, local_end: int) -> str:
    """'A3' for a single case, 'A3-A7' for a run."""
    if local_start == local_end:
        return f"{bucket_name}{local_start}"
    return f"{bucket_name}{local_start}-{bucket_name}{local_end}"


def render_short_fill(label: str, short_fill: int) -> str:
    """Tail annotation, e.g. 'short-fill B6(3 units)'."""
    return f"{SHORT_FILL_WORD} {label}({short_fill} {UNIT_WORD})"


def label_window(
    window: PalletWindow,
    ranges: Sequence[GlobalCaseRange],
) -> Tuple[List[str], Optional[Tuple[str, int]]]:
    """
    Render the bucket segments loaded on one pallet.

    Returns:
        (segments, last) where last is (bucket_name, local_end) of the
        segment that reaches the end of the window
    """
    segments: List[str] = []
    last: Optional[Tuple[str, int]] = None

    for case_range in ranges:
        overlap_start = max(window.start, case_range.start_index)
        overlap_end = min(window.end, case_range.end_index)
        if overlap_start > overlap_end:
            continue

        local_start = overlap_start - case_range.start_index + 1
        local_end = overlap_end - case_range.start_index + 1
        segments.append(render_segment(case_range.bucket_name, local_start, local_end))

        if last is None or overlap_end >= window.end:
            last = (case_range.bucket_name, local_end)

    return segments, last


def build_pallets(
    windows: Sequence[PalletWindow],
    ranges: Sequence[GlobalCaseRange],
    indexed_cases: int,
    bottles_per_case: Optional[int],
    short_fill: int,
) -> List[Pallet]:
    """
    Build labelled pallets from windows.

    The tail pallet (the one ending at `indexed_cases`) alone carries the
    short-fill units in its bottle count, and the short-fill annotation
    when `bottles_per_case` is set.

    Args:
        windows: Output of partition_pallets
        ranges: Output of build_global_ranges
        indexed_cases: Total numbered cases
        bottles_per_case: Bottles per case; unset counts as 0
        short_fill: Short-fill units (0 when none)

    Returns:
        Pallets in window order
    """
    per_case = bottles_per_case if bottles_per_case and bottles_per_case > 0 else 0
    pallets: List[Pallet] = []

    for number, window in enumerate(windows, start=1):
        segments, last = label_window(window, ranges)
        text = SEGMENT_SEPARATOR.join(segments)
        is_tail = window.end == indexed_cases
        bottle_count = window.size * per_case

        short_fill_label = None
        if is_tail:
            bottle_count += short_fill
            if short_fill > 0 and per_case > 0:
                short_fill_label = f"{last[0]}{last[1] + 1}" if last else ""
                text = f"{text} {render_short_fill(short_fill_label, short_fill)}"

        pallets.append(Pallet(
            index=number,
            case_start=window.start,
            case_end=window.end,
            size=window.size,
            segments=segments,
            text=text,
            bottle_count=bottle_count,
            is_tail=is_tail,
            short_fill_label=short_fill_label,
        ))

    return pallets


class PalletAllocationService:
    """Runs index → partition → labels for one set of inputs."""

    def allocate(
        self,
        buckets: Sequence[Bucket],
        case_per_pallet: Optional[int],
        bottles_per_case: Optional[int],
        short_fill: int = 0,
    ) -> Tuple[List[GlobalCaseRange], int, List[Pallet]]:
        """
        Allocate every numbered case to a pallet.

        Args:
            buckets: Buckets in fixed A..J order
            case_per_pallet: Pallet capacity
            bottles_per_case: Bottles per case
            short_fill: Short-fill units appended after the last case

        Returns:
            (global_ranges, indexed_cases, pallets)
        """
        ranges, indexed_cases = build_global_ranges(buckets)
        windows = partition_pallets(indexed_cases, case_per_pallet)
        pallets = build_pallets(
            windows,
            ranges,
            indexed_cases,
            bottles_per_case,
            short_fill,
        )

        logger.debug(
            "pallets_allocated",
            buckets_indexed=len(ranges),
            indexed_cases=indexed_cases,
            case_per_pallet=case_per_pallet,
            pallet_count=len(pallets),
        )

        return ranges, indexed_cases, pallets


# Singleton
_pallet_allocation_service: Optional[PalletAllocationService] = None


def get_pallet_allocation_service() -> PalletAllocationService:
    """Get the singleton pallet allocation service instance."""
    global _pallet_allocation_service
    if _pallet_allocation_service is None:
        _pallet_allocation_service = PalletAllocationService()
    return _pallet_allocation_service

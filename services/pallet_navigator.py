"""
Pallet navigator — a cursor over the pallet list.

Out-of-range requests are clamped, never rejected. An empty list yields
an empty view (current 0, no text, 0 bottles).
"""

from enum import Enum
from typing import Any, List, Optional, Sequence

import structlog

from models.packing import PagerState, PagerView, Pallet
from utils.text_utils import parse_decimal

logger = structlog.get_logger(__name__)


class PagerAction(str, Enum):
    """Navigator operations."""
    FIRST = "first"
    PREV = "prev"
    NEXT = "next"
    LAST = "last"
    JUMP = "jump"


def clamp_position(current: Optional[int], total: int) -> int:
    """
    Clamp a cursor position to a list of `total` pallets.

    0 when the list is empty; otherwise within [1, total], with a missing
    position starting at 1.
    """
    if total <= 0:
        return 0
    return min(max(current or 1, 1), total)


def parse_jump_target(n: Any) -> int:
    """Jump target as typed: non-numeric, missing or 0 → 1; fractions floor."""
    number = parse_decimal(n)
    if number is None:
        return 1
    return int(number) or 1


class PalletNavigator:
    """
    Stateful cursor over an ordered pallet list.

    Usage:
        navigator = PalletNavigator(plan.pallets, previous_state)
        view = navigator.next()
    """

    def __init__(self, pallets: Sequence[Pallet], state: Optional[PagerState] = None):
        self._pallets: List[Pallet] = list(pallets)
        self._current = clamp_position(state.current if state else None, len(self._pallets))

    @property
    def total(self) -> int:
        return len(self._pallets)

    @property
    def current(self) -> int:
        return self._current

    @property
    def state(self) -> PagerState:
        return PagerState(current=self._current, total=self.total)

    def view(self) -> PagerView:
        """The pallet under the cursor."""
        if not self._pallets:
            return PagerView()
        pallet = self._pallets[self._current - 1]
        return PagerView(
            current=self._current,
            total=self.total,
            range_text=pallet.text,
            bottle_count=pallet.bottle_count,
        )

    def _move_to(self, position: int) -> PagerView:
        self._current = clamp_position(position, self.total)
        return self.view()

    def first(self) -> PagerView:
        return self._move_to(1)

    def last(self) -> PagerView:
        return self._move_to(self.total)

    def prev(self) -> PagerView:
        return self._move_to(self._current - 1 if self._current > 1 else 1)

    def next(self) -> PagerView:
        return self._move_to(self._current + 1)

    def jump(self, n: Any = None) -> PagerView:
        """Jump to pallet `n`, clamped to [1, total]."""
        return self._move_to(parse_jump_target(n))

    def apply(self, action: PagerAction, n: Any = None) -> PagerView:
        """Dispatch a navigator operation by name."""
        if action == PagerAction.FIRST:
            view = self.first()
        elif action == PagerAction.PREV:
            view = self.prev()
        elif action == PagerAction.NEXT:
            view = self.next()
        elif action == PagerAction.LAST:
            view = self.last()
        else:
            view = self.jump(n)

        logger.debug(
            "pager_moved",
            action=action.value,
            current=view.current,
            total=view.total,
        )
        return view

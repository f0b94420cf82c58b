"""
Debounced recalculation.

Every schedule() cancels the pending run and starts a new delayed one, so
a burst of edits costs a single recalculation. The recalculation itself
is synchronous; only the waiting is asynchronous.
"""

import asyncio
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class RecalcScheduler:
    """
    Cancellable, delayed recalculation.

    Usage:
        scheduler = RecalcScheduler(session.recalculate, delay_seconds=0.2)
        scheduler.schedule()   # on every edit
        scheduler.flush()      # before reading results
    """

    def __init__(self, recalculate: Callable[[], None], delay_seconds: float):
        self._recalculate = recalculate
        self.delay_seconds = delay_seconds
        self._task: Optional[asyncio.Task] = None
        self.run_count = 0

    @property
    def pending(self) -> bool:
        """True while a scheduled run has neither fired nor been cancelled."""
        return self._task is not None and not self._task.done()

    def schedule(self) -> None:
        """
        Schedule a recalculation after the debounce delay.

        Supersedes any pending run. Without a running event loop the
        recalculation runs inline.
        """
        superseded = self.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._run()
            return

        self._task = loop.create_task(self._run_later())
        logger.debug(
            "recalc_scheduled",
            delay_seconds=self.delay_seconds,
            superseded=superseded,
        )

    def cancel(self) -> bool:
        """Drop the pending run. Returns True if one was pending."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        # A closed loop will never run the task; it still counts as pending.
        if not task.get_loop().is_closed():
            task.cancel()
        return True

    def flush(self) -> bool:
        """
        Run a pending recalculation now.

        Returns:
            True if a pending run was executed, False if nothing was pending
        """
        if not self.cancel():
            return False
        self._run()
        return True

    async def _run_later(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._task = None
        self._run()

    def _run(self) -> None:
        self.run_count += 1
        self._recalculate()

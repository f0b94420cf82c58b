"""
Packing sessions — in-memory working state of the packing form.

Each session owns one immutable snapshot at a time, the last calculated
plan, the pager cursor and a debounced recalculation. Edits replace the
snapshot and schedule a recalculation; reads flush it first.

Single-process only: sessions live in memory with TTL expiration.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

import structlog

from config import settings
from config.packing import BUCKET_NAMES, BUCKET_DECIMAL_PLACES
from exceptions import InvalidQuantityError, PackingSessionNotFoundError
from models.packing import PackingPlan, PackingSnapshot, PagerState, PagerView
from models.packing_session import PackingEdit
from services.packing_plan_service import get_packing_plan_service
from services.pallet_navigator import PagerAction, PalletNavigator
from services.recalc_scheduler import RecalcScheduler
from utils.text_utils import (
    parse_decimal,
    sanitize_count_input,
    sanitize_quantity_input,
    truncate_decimal,
)

logger = structlog.get_logger(__name__)


def _count_as_decimal(raw: Any) -> Optional[Decimal]:
    count = sanitize_count_input(raw)
    return None if count is None else Decimal(count)


def apply_edit(snapshot: PackingSnapshot, edit: PackingEdit) -> PackingSnapshot:
    """
    Produce the snapshot that results from a form edit.

    Sanitizing follows the form:
    - bucket quantities keep digits and one decimal point, one decimal place
    - extras and capacities keep digits only
    - global count is any number, 0 when not numeric

    Raises:
        ValueError: A quantity too large to hold one decimal place
    """
    provided = edit.model_fields_set
    update: Dict[str, Any] = {}

    if "buckets" in provided and edit.buckets is not None:
        buckets = dict(snapshot.buckets)
        for name, raw in edit.buckets.items():
            buckets[name] = sanitize_quantity_input(raw, BUCKET_DECIMAL_PLACES)
        update["buckets"] = buckets

    if "extras" in provided and edit.extras is not None:
        extras_update = {key: _count_as_decimal(raw) for key, raw in edit.extras.items()}
        update["extras"] = snapshot.extras.model_copy(update=extras_update)

    if "bottles_per_case" in provided:
        update["bottles_per_case"] = sanitize_count_input(edit.bottles_per_case)

    if "case_per_pallet" in provided:
        update["case_per_pallet"] = sanitize_count_input(edit.case_per_pallet)

    if "global_count" in provided:
        update["global_count"] = parse_decimal(edit.global_count) or Decimal("0")

    if "template_name" in provided:
        update["template_name"] = edit.template_name or ""

    return snapshot.model_copy(update=update)


def fill_buckets(snapshot: PackingSnapshot) -> PackingSnapshot:
    """
    Set every bucket to the snapshot's global count.

    Raises:
        ValueError: Global count too large to hold one decimal place
    """
    value = snapshot.global_count
    if value is not None:
        value = truncate_decimal(max(value, Decimal("0")), BUCKET_DECIMAL_PLACES)
    return snapshot.model_copy(update={
        "buckets": {name: value for name in BUCKET_NAMES},
    })


class PackingSession:
    """One operator's working form."""

    def __init__(self, session_id: str, snapshot: PackingSnapshot, ttl_minutes: int):
        self.session_id = session_id
        self.snapshot = snapshot
        self.pager = PagerState()
        self.ttl_minutes = ttl_minutes
        self.expires_at = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
        self.scheduler = RecalcScheduler(
            self.recalculate,
            delay_seconds=settings.recalc_debounce_seconds,
        )
        self.plan: PackingPlan = get_packing_plan_service().calculate(snapshot, self.pager)
        self.pager = self.plan.pager.state

    def recalculate(self) -> None:
        """Rebuild the plan from the current snapshot, keeping the cursor where possible."""
        self.plan = get_packing_plan_service().calculate(self.snapshot, self.pager)
        self.pager = self.plan.pager.state

    def touch(self) -> None:
        self.expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.ttl_minutes)

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) > self.expires_at


class PackingSessionService:
    """
    Session store and form operations.

    Handles create, read, edit, fill, clear, navigate and delete.
    """

    def __init__(self):
        self._sessions: Dict[str, PackingSession] = {}
        self.ttl_minutes = settings.session_ttl_minutes
        self.max_sessions = settings.max_sessions

    # ===================
    # STORE
    # ===================

    def create_session(self, snapshot: Optional[PackingSnapshot] = None) -> PackingSession:
        """
        Open a new session.

        Args:
            snapshot: Initial inputs (empty form when omitted)

        Returns:
            Session with its plan already calculated
        """
        self._cleanup_expired()
        self._evict_oldest()

        session = PackingSession(
            session_id=str(uuid.uuid4()),
            snapshot=snapshot or PackingSnapshot(),
            ttl_minutes=self.ttl_minutes,
        )
        self._sessions[session.session_id] = session

        logger.info(
            "packing_session_created",
            session_id=session.session_id,
            pallet_count=len(session.plan.pallets),
        )
        return session

    def get_session(self, session_id: str) -> PackingSession:
        """
        Get a session with an up-to-date plan.

        Flushes any pending recalculation so the plan always matches the
        snapshot.

        Raises:
            PackingSessionNotFoundError: Unknown or expired session
        """
        session = self._sessions.get(session_id)
        if session is None or session.is_expired:
            if session is not None:
                self._drop(session_id)
            raise PackingSessionNotFoundError(session_id)

        if session.scheduler.flush():
            logger.debug("recalc_flushed", session_id=session_id)
        session.touch()
        return session

    def peek_session(self, session_id: str) -> PackingSession:
        """Get a session without flushing a pending recalculation."""
        session = self._sessions.get(session_id)
        if session is None or session.is_expired:
            raise PackingSessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> None:
        """Drop a session.

        Raises:
            PackingSessionNotFoundError: Unknown session
        """
        if session_id not in self._sessions:
            raise PackingSessionNotFoundError(session_id)
        self._drop(session_id)
        logger.info("packing_session_deleted", session_id=session_id)

    def _drop(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.scheduler.cancel()

    def _cleanup_expired(self) -> None:
        """Remove all expired sessions."""
        expired = [sid for sid, s in self._sessions.items() if s.is_expired]
        for sid in expired:
            self._drop(sid)
        if expired:
            logger.info("packing_sessions_expired", count=len(expired))

    def _evict_oldest(self) -> None:
        """Make room for one more session."""
        while len(self._sessions) >= self.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.expires_at)
            self._drop(oldest.session_id)
            logger.warning("packing_session_evicted", session_id=oldest.session_id)

    # ===================
    # FORM OPERATIONS
    # ===================

    def _checked(self, build: Callable[[], PackingSnapshot]) -> PackingSnapshot:
        """
        Build an edited snapshot, validated before it replaces the current one.

        Raises:
            InvalidQuantityError: A quantity cannot be represented
            PalletLimitExceededError: Too many pallets for one plan
        """
        try:
            snapshot = build()
        except ValueError as e:
            raise InvalidQuantityError(str(e)) from e
        get_packing_plan_service().check_pallet_limit(snapshot)
        return snapshot

    def edit(self, session_id: str, edit: PackingEdit) -> PackingSession:
        """
        Apply a form edit and schedule a debounced recalculation.

        Returns:
            Session with the new snapshot; its plan may still be pending
        """
        session = self.peek_session(session_id)
        session.snapshot = self._checked(lambda: apply_edit(session.snapshot, edit))
        session.touch()
        session.scheduler.schedule()

        logger.debug(
            "packing_session_edited",
            session_id=session_id,
            fields=sorted(edit.model_fields_set),
            recalc_pending=session.scheduler.pending,
        )
        return session

    def fill(self, session_id: str) -> PackingSession:
        """Set every bucket to the global count and schedule a recalculation."""
        session = self.peek_session(session_id)
        session.snapshot = self._checked(lambda: fill_buckets(session.snapshot))
        session.touch()
        session.scheduler.schedule()

        logger.info(
            "packing_session_filled",
            session_id=session_id,
            global_count=str(session.snapshot.global_count),
        )
        return session

    def clear(self, session_id: str) -> PackingSession:
        """Reset every input and move the pager back to the first pallet."""
        session = self.peek_session(session_id)
        session.scheduler.cancel()
        session.snapshot = PackingSnapshot(template_name="")
        session.pager = PagerState(current=1, total=0)
        session.recalculate()
        session.touch()

        logger.info("packing_session_cleared", session_id=session_id)
        return session

    def navigate(self, session_id: str, action: PagerAction, n: Any = None) -> PagerView:
        """
        Move the pager cursor.

        Args:
            session_id: Session UUID
            action: first / prev / next / last / jump
            n: Jump target (jump only)

        Returns:
            The pallet under the cursor after the move
        """
        session = self.get_session(session_id)
        navigator = PalletNavigator(session.plan.pallets, session.pager)
        view = navigator.apply(action, n)

        session.pager = navigator.state
        session.plan = session.plan.model_copy(update={"pager": view})
        return view


# Singleton
_packing_session_service: Optional[PackingSessionService] = None


def get_packing_session_service() -> PackingSessionService:
    """Get the singleton packing session service instance."""
    global _packing_session_service
    if _packing_session_service is None:
        _packing_session_service = PackingSessionService()
    return _packing_session_service

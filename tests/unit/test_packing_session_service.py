"""
Unit tests for packing sessions: form edits, fill, clear and navigation.

Run: pytest tests/unit/test_packing_session_service.py -v
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from exceptions import InvalidQuantityError, PackingSessionNotFoundError, PalletLimitExceededError
from models.packing import PackingSnapshot
from models.packing_session import PackingEdit
from services.packing_session_service import (
    PackingSessionService,
    apply_edit,
    fill_buckets,
    get_packing_session_service,
)
from services.pallet_navigator import PagerAction


# ===================
# PURE HELPERS
# ===================

class TestApplyEdit:
    """Tests for apply_edit()"""

    def test_bucket_quantities_sanitized(self):
        edit = PackingEdit(buckets={"a": "12.34", "B": "1a2", "C": ""})

        snapshot = apply_edit(PackingSnapshot(), edit)

        assert snapshot.buckets == {"A": Decimal("12.3"), "B": Decimal("12"), "C": None}

    def test_other_buckets_kept(self, two_bucket_snapshot):
        snapshot = apply_edit(two_bucket_snapshot, PackingEdit(buckets={"B": "7"}))

        assert snapshot.buckets["A"] == Decimal("10")
        assert snapshot.buckets["B"] == Decimal("7")

    def test_extras_keep_digits_only(self):
        edit = PackingEdit(extras={"zero_case": "3 pcs", "sample": "-2", "label": ""})

        snapshot = apply_edit(PackingSnapshot(), edit)

        assert snapshot.extras.zero_case == Decimal("3")
        assert snapshot.extras.sample == Decimal("2")
        assert snapshot.extras.label is None

    def test_capacities(self):
        edit = PackingEdit(bottles_per_case="12", case_per_pallet="8 cases")

        snapshot = apply_edit(PackingSnapshot(), edit)

        assert snapshot.bottles_per_case == 12
        assert snapshot.case_per_pallet == 8

    def test_global_count_not_numeric_is_zero(self):
        snapshot = apply_edit(PackingSnapshot(), PackingEdit(global_count="abc"))

        assert snapshot.global_count == Decimal("0")

    def test_empty_template_name_clears(self, two_bucket_snapshot):
        snapshot = apply_edit(two_bucket_snapshot, PackingEdit(template_name=""))

        assert snapshot.template_name == ""

    def test_float_quantities_in_scientific_notation(self):
        edit = PackingEdit(buckets={"A": 1e-7, "B": 1e20})

        snapshot = apply_edit(PackingSnapshot(), edit)

        assert snapshot.buckets["A"] == Decimal("0")
        assert snapshot.buckets["B"] == Decimal("100000000000000000000")

    def test_oversized_quantity_raises(self):
        with pytest.raises(ValueError):
            apply_edit(PackingSnapshot(), PackingEdit(buckets={"A": "9" * 30}))

    def test_only_provided_fields_change(self, two_bucket_snapshot):
        snapshot = apply_edit(two_bucket_snapshot, PackingEdit(template_name="Line 3"))

        assert snapshot.template_name == "Line 3"
        assert snapshot.buckets == two_bucket_snapshot.buckets
        assert snapshot.case_per_pallet == 8

    def test_input_snapshot_unchanged(self, two_bucket_snapshot):
        apply_edit(two_bucket_snapshot, PackingEdit(buckets={"A": "1"}))

        assert two_bucket_snapshot.buckets["A"] == Decimal("10")

    def test_unknown_bucket_rejected(self):
        with pytest.raises(ValueError):
            PackingEdit(buckets={"K": "1"})

    def test_unknown_extra_rejected(self):
        with pytest.raises(ValueError):
            PackingEdit(extras={"pallets": "1"})


class TestFillBuckets:
    """Tests for fill_buckets()"""

    def test_every_bucket_gets_global_count(self):
        snapshot = PackingSnapshot(global_count="4.56")

        filled = fill_buckets(snapshot)

        assert len(filled.buckets) == 10
        assert set(filled.buckets.values()) == {Decimal("4.5")}

    def test_negative_global_count_fills_zero(self):
        filled = fill_buckets(PackingSnapshot(global_count=-3))

        assert set(filled.buckets.values()) == {Decimal("0.0")}

    def test_unset_global_count_unsets_buckets(self, two_bucket_snapshot):
        filled = fill_buckets(two_bucket_snapshot)

        assert set(filled.buckets.values()) == {None}


# ===================
# SESSION STORE
# ===================

class TestPackingSessionStore:
    """Create, read and delete."""

    def setup_method(self):
        self.service = PackingSessionService()

    def test_create_calculates_plan(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)

        assert len(session.plan.pallets) == 2
        assert session.plan.pager.current == 1
        assert session.expires_at > datetime.now(timezone.utc)

    def test_create_empty(self):
        session = self.service.create_session()

        assert session.plan.pallets == []
        assert session.plan.summary.pallet_text == "unavailable"

    def test_get_unknown_session(self):
        with pytest.raises(PackingSessionNotFoundError) as exc_info:
            self.service.get_session("missing")

        assert exc_info.value.status_code == 404

    def test_expired_session_is_dropped(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)
        session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

        with pytest.raises(PackingSessionNotFoundError):
            self.service.get_session(session.session_id)
        assert session.session_id not in self.service._sessions

    def test_delete(self):
        session = self.service.create_session()

        self.service.delete_session(session.session_id)

        with pytest.raises(PackingSessionNotFoundError):
            self.service.get_session(session.session_id)

    def test_delete_unknown(self):
        with pytest.raises(PackingSessionNotFoundError):
            self.service.delete_session("missing")

    def test_oldest_evicted_when_full(self):
        self.service.max_sessions = 2
        first = self.service.create_session()
        second = self.service.create_session()
        first.expires_at -= timedelta(minutes=1)

        third = self.service.create_session()

        assert set(self.service._sessions) == {second.session_id, third.session_id}


# ===================
# FORM OPERATIONS
# ===================

class TestPackingSessionOperations:
    """Edit, fill, clear and navigate (no event loop: recalculation runs inline)."""

    def setup_method(self):
        self.service = PackingSessionService()

    def test_edit_recalculates(self):
        session = self.service.create_session()

        self.service.edit(session.session_id, PackingEdit(
            buckets={"A": "10", "B": "5"},
            bottles_per_case="12",
            case_per_pallet="8",
            extras={"zero_case": "3"},
        ))
        session = self.service.get_session(session.session_id)

        assert [p.text for p in session.plan.pallets] == [
            "A1-A8",
            "A9-A10、B1-B5 short-fill B6(3 units)",
        ]
        assert session.plan.pallets[-1].bottle_count == 87

    def test_fill(self):
        session = self.service.create_session(PackingSnapshot(case_per_pallet=4))
        self.service.edit(session.session_id, PackingEdit(global_count="2"))

        session = self.service.fill(session.session_id)

        assert session.plan.indexed_cases == 20
        assert len(session.plan.pallets) == 5
        assert session.plan.pallets[0].text == "A1-A2、B1-B2"

    def test_clear(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)
        self.service.navigate(session.session_id, PagerAction.LAST)

        session = self.service.clear(session.session_id)

        assert session.snapshot.buckets == {}
        assert session.snapshot.case_per_pallet is None
        assert session.snapshot.template_name == ""
        assert session.plan.pallets == []
        assert session.plan.pager.current == 0

    def test_navigate(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)

        view = self.service.navigate(session.session_id, PagerAction.NEXT)

        assert view.current == 2
        assert view.range_text == "A9-A10、B1-B5"
        assert view.bottle_count == 84
        assert self.service.get_session(session.session_id).plan.pager.current == 2

    def test_navigate_jump_clamped(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)

        assert self.service.navigate(session.session_id, PagerAction.JUMP, "9").current == 2
        assert self.service.navigate(session.session_id, PagerAction.JUMP, "abc").current == 1

    def test_cursor_survives_edit(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)
        self.service.navigate(session.session_id, PagerAction.LAST)

        self.service.edit(session.session_id, PackingEdit(buckets={"C": "20"}))
        session = self.service.get_session(session.session_id)

        assert session.plan.pager.current == 2
        assert session.plan.pager.total == 5

    def test_edit_with_oversized_quantity_rejected(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)

        with pytest.raises(InvalidQuantityError) as exc_info:
            self.service.edit(session.session_id, PackingEdit(buckets={"A": "9" * 30}))

        assert exc_info.value.status_code == 422
        assert session.snapshot.buckets["A"] == Decimal("10")

    def test_fill_with_oversized_global_count_rejected(self):
        session = self.service.create_session(PackingSnapshot(global_count="1e30"))

        with pytest.raises(InvalidQuantityError):
            self.service.fill(session.session_id)

        assert session.snapshot.buckets == {}

    def test_edit_over_pallet_limit_rejected(self, two_bucket_snapshot):
        session = self.service.create_session(two_bucket_snapshot)

        with pytest.raises(PalletLimitExceededError):
            self.service.edit(session.session_id, PackingEdit(
                buckets={"A": "20000"},
                case_per_pallet="1",
            ))

        assert session.snapshot.case_per_pallet == 8
        assert len(session.plan.pallets) == 2

    def test_edit_unknown_session(self):
        with pytest.raises(PackingSessionNotFoundError):
            self.service.edit("missing", PackingEdit(buckets={"A": "1"}))


class TestPackingSessionDebounce:
    """Inside an event loop edits are debounced."""

    @pytest.mark.asyncio
    async def test_burst_of_edits_matches_single_edit(self, two_bucket_snapshot):
        service = PackingSessionService()
        session = service.create_session(PackingSnapshot(bottles_per_case=12, case_per_pallet=8))
        session.scheduler.delay_seconds = 0.02

        for value in ("1", "10"):
            service.edit(session.session_id, PackingEdit(buckets={"A": value}))
        service.edit(session.session_id, PackingEdit(buckets={"B": "5"}))

        assert session.scheduler.pending is True
        assert session.plan.pallets == []

        await asyncio.sleep(0.1)

        assert session.scheduler.run_count == 1
        expected = PackingSessionService().create_session(two_bucket_snapshot).plan
        assert session.plan.model_dump_json() == expected.model_dump_json()

    @pytest.mark.asyncio
    async def test_get_flushes_pending(self):
        service = PackingSessionService()
        session = service.create_session(PackingSnapshot(case_per_pallet=8))
        session.scheduler.delay_seconds = 10

        service.edit(session.session_id, PackingEdit(buckets={"A": "9"}))
        assert session.scheduler.pending is True

        session = service.get_session(session.session_id)

        assert session.scheduler.pending is False
        assert len(session.plan.pallets) == 2


class TestPackingSessionServiceInstance:
    """Tests for service instance creation."""

    def test_get_service_returns_singleton(self, reset_session_store):
        assert get_packing_session_service() is get_packing_session_service()

"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from decimal import Decimal

from models.packing import PackingExtras, PackingSnapshot


# ===================
# SNAPSHOTS
# ===================

@pytest.fixture
def two_bucket_snapshot() -> PackingSnapshot:
    """A=10, B=5, 12 bottles/case, 8 cases/pallet, no extras."""
    return PackingSnapshot(
        buckets={"A": 10, "B": 5},
        bottles_per_case=12,
        case_per_pallet=8,
    )


@pytest.fixture
def short_fill_snapshot(two_bucket_snapshot) -> PackingSnapshot:
    """Same as two_bucket_snapshot with 3 short-fill units."""
    return two_bucket_snapshot.model_copy(
        update={"extras": PackingExtras(zero_case=Decimal("3"))}
    )


@pytest.fixture
def empty_snapshot() -> PackingSnapshot:
    """All buckets unset, capacity set."""
    return PackingSnapshot(bottles_per_case=12, case_per_pallet=8)


# ===================
# SERVICE SINGLETONS
# ===================

@pytest.fixture
def reset_session_store():
    """Fresh in-memory session store for each test."""
    import services.packing_session_service as session_module

    session_module._packing_session_service = None
    yield
    session_module._packing_session_service = None


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(reset_session_store):
    """
    Create FastAPI test client.

    Runs inside the client context so one event loop serves every request
    of a test (debounced recalculations survive between requests).

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/packing/calculate", json={...})
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as client:
        yield client

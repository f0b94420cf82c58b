"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.packing import (
    Bucket,
    PackingExtras,
    PackingSnapshot,
    GlobalCaseRange,
    PalletWindow,
    Pallet,
    PackingSummary,
    PagerState,
    PagerView,
    PackingPlan,
)
from models.packing_session import (
    PackingEdit,
    PackingSessionResponse,
    ShareRequest,
    SharePayloadResponse,
    SummaryTextResponse,
)
from models.statistics import (
    InnerYieldInput,
    InnerYieldResult,
    StdDevInput,
    StdDevResult,
)

__all__ = [
    # Base
    "BaseSchema",

    # Packing
    "Bucket",
    "PackingExtras",
    "PackingSnapshot",
    "GlobalCaseRange",
    "PalletWindow",
    "Pallet",
    "PackingSummary",
    "PagerState",
    "PagerView",
    "PackingPlan",

    # Sessions
    "PackingEdit",
    "PackingSessionResponse",
    "ShareRequest",
    "SharePayloadResponse",
    "SummaryTextResponse",

    # Statistics
    "InnerYieldInput",
    "InnerYieldResult",
    "StdDevInput",
    "StdDevResult",
]

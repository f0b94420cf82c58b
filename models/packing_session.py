"""
Packing session schemas: form edits and API responses.

See models/packing.py for the snapshot and plan.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import Field, field_validator

from config.packing import BUCKET_NAMES, EXTRA_KEYS
from models.base import BaseSchema
from models.packing import PackingPlan, PackingSnapshot

RawInput = Union[str, int, float, None]


class PackingEdit(BaseSchema):
    """
    Form-style edit of a session.

    Values are raw operator input and are sanitized the way the form
    does. Only fields present in the request are applied; an empty
    string clears a value.
    """

    buckets: Optional[Dict[str, RawInput]] = Field(
        None,
        description="Bucket name → raw quantity, e.g. {'A': '10', 'B': '5.5'}"
    )
    extras: Optional[Dict[str, RawInput]] = Field(
        None,
        description="zero_case / sample / label → raw count"
    )
    bottles_per_case: RawInput = None
    case_per_pallet: RawInput = None
    global_count: RawInput = None
    template_name: Optional[str] = Field(None, max_length=100)

    @field_validator("buckets")
    @classmethod
    def validate_bucket_names(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Upper-case names; reject names outside A-J."""
        if v is None:
            return v
        normalized = {}
        for name, raw in v.items():
            key = name.strip().upper()
            if key not in BUCKET_NAMES:
                raise ValueError(f"unknown bucket '{name}' (expected one of A-J)")
            normalized[key] = raw
        return normalized

    @field_validator("extras")
    @classmethod
    def validate_extra_keys(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Reject keys other than zero_case, sample and label."""
        if v is None:
            return v
        unknown = sorted(set(v) - set(EXTRA_KEYS))
        if unknown:
            raise ValueError(f"unknown extras {unknown} (expected {list(EXTRA_KEYS)})")
        return v


class PackingSessionResponse(BaseSchema):
    """Session state returned by the session endpoints."""

    session_id: str = Field(..., description="Session UUID")
    snapshot: PackingSnapshot
    plan: PackingPlan
    recalc_pending: bool = Field(
        default=False,
        description="True when an edit is waiting for the debounced recalculation"
    )
    expires_at: datetime = Field(..., description="When the idle session is dropped")


class ShareRequest(BaseSchema):
    """Open a shared snapshot."""

    data: str = Field(..., min_length=1, description="Percent-encoded JSON from a share link")


class SharePayloadResponse(BaseSchema):
    """Share link for a session."""

    title: str
    query: str = Field(..., description="'data=<percent-encoded JSON>'")
    path: str = Field(..., description="Page path including the query")


class SummaryTextResponse(BaseSchema):
    """Clipboard text of the summary."""

    text: str

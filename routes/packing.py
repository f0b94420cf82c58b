"""
Packing API routes.

Stateless calculation plus in-memory working sessions: edit, fill,
clear, browse pallets, share and export.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, StreamingResponse
import structlog

from exceptions import AppError
from models.packing import PackingPlan, PackingSnapshot, PagerView
from models.packing_session import (
    PackingEdit,
    PackingSessionResponse,
    SharePayloadResponse,
    ShareRequest,
    SummaryTextResponse,
)
from services.export_service import export_filename, get_export_service
from services.packing_plan_service import get_packing_plan_service
from services.packing_session_service import PackingSession, get_packing_session_service
from services.packing_summary_service import render_summary_text
from services.pallet_navigator import PagerAction
from services.share_service import build_share_payload, decode_snapshot

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/packing", tags=["Packing"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def to_response(session: PackingSession) -> PackingSessionResponse:
    """Session → API response."""
    return PackingSessionResponse(
        session_id=session.session_id,
        snapshot=session.snapshot,
        plan=session.plan,
        recalc_pending=session.scheduler.pending,
        expires_at=session.expires_at,
    )


# ===================
# STATELESS
# ===================

@router.post("/calculate", response_model=PackingPlan)
async def calculate(snapshot: PackingSnapshot):
    """
    Calculate a pallet plan for a snapshot.

    Pure: the same snapshot always returns the same plan.
    """
    try:
        return get_packing_plan_service().calculate(snapshot)
    except Exception as e:
        return handle_error(e)


# ===================
# SESSIONS
# ===================

@router.post("/sessions", response_model=PackingSessionResponse, status_code=201)
async def create_session(snapshot: Optional[PackingSnapshot] = None):
    """
    Open a working session.

    Starts from the given snapshot, or an empty form.
    """
    try:
        session = get_packing_session_service().create_session(snapshot)
        return to_response(session)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/from-share", response_model=PackingSessionResponse, status_code=201)
async def create_session_from_share(data: ShareRequest):
    """
    Open a session from a share link payload.

    Raises:
        422: Payload cannot be decoded
    """
    try:
        snapshot = decode_snapshot(data.data)
        session = get_packing_session_service().create_session(snapshot)
        return to_response(session)
    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}", response_model=PackingSessionResponse)
async def get_session(session_id: str):
    """
    Get a session with an up-to-date plan.

    A pending debounced recalculation runs before responding.
    """
    try:
        return to_response(get_packing_session_service().get_session(session_id))
    except Exception as e:
        return handle_error(e)


@router.patch("/sessions/{session_id}", response_model=PackingSessionResponse)
async def edit_session(session_id: str, edit: PackingEdit):
    """
    Apply a form edit.

    Values are raw operator input. The recalculation is debounced:
    `recalc_pending` is true until it runs, and `plan` is the previous
    plan until then. GET the session to force it.
    """
    try:
        session = get_packing_session_service().edit(session_id, edit)
        return to_response(session)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/fill", response_model=PackingSessionResponse)
async def fill_session(session_id: str):
    """Set every bucket to the session's global count."""
    try:
        return to_response(get_packing_session_service().fill(session_id))
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/clear", response_model=PackingSessionResponse)
async def clear_session(session_id: str):
    """Reset every input of the session."""
    try:
        return to_response(get_packing_session_service().clear(session_id))
    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    """Drop a session."""
    try:
        get_packing_session_service().delete_session(session_id)
        return None
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/pager/{action}", response_model=PagerView)
async def navigate(
    session_id: str,
    action: PagerAction,
    n: Optional[str] = Query(None, description="Target pallet for jump"),
):
    """
    Move the pallet cursor.

    first / prev / next / last / jump?n=3. Out-of-range targets are
    clamped; an empty plan returns an empty view.
    """
    try:
        return get_packing_session_service().navigate(session_id, action, n)
    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/summary-text", response_model=SummaryTextResponse)
async def summary_text(session_id: str):
    """Summary as clipboard text."""
    try:
        session = get_packing_session_service().get_session(session_id)
        return SummaryTextResponse(text=render_summary_text(session.plan.summary))
    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/share", response_model=SharePayloadResponse)
async def share_session(session_id: str):
    """Share link carrying the session snapshot."""
    try:
        session = get_packing_session_service().get_session(session_id)
        return build_share_payload(session.snapshot)
    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/export")
async def export_session(session_id: str):
    """Download the pallet plan as an Excel file."""
    try:
        session = get_packing_session_service().get_session(session_id)
        generated_at = datetime.now()
        output = get_export_service().generate_pallet_plan_excel(
            session.plan,
            template_name=session.snapshot.template_name,
            generated_at=generated_at,
        )
        filename = export_filename(session.snapshot.template_name, generated_at)
        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    except Exception as e:
        return handle_error(e)

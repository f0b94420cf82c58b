"""
Share links for packing snapshots.

A share link carries the flat snapshot as percent-encoded JSON in a
`data=` query parameter. Opening it restores the snapshot.
"""

import json
from urllib.parse import quote, unquote

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.packing import SHARE_PATH, SHARE_QUERY_KEY, SHARE_TITLE
from exceptions import InvalidSharePayloadError
from models.packing import PackingSnapshot
from models.packing_session import SharePayloadResponse

logger = structlog.get_logger(__name__)


def encode_snapshot(snapshot: PackingSnapshot) -> str:
    """Percent-encoded JSON of the snapshot."""
    payload = snapshot.model_dump(mode="json")
    return quote(json.dumps(payload, ensure_ascii=False, separators=(",", ":")), safe="")


def decode_snapshot(data: str) -> PackingSnapshot:
    """
    Restore a snapshot from a share payload.

    Accepts the value of the `data` parameter, or the whole `data=...`
    query.

    Raises:
        InvalidSharePayloadError: Not JSON, not an object, or not a valid snapshot
    """
    prefix = f"{SHARE_QUERY_KEY}="
    if data.startswith(prefix):
        data = data[len(prefix):]

    try:
        payload = json.loads(unquote(data))
    except json.JSONDecodeError as e:
        logger.warning("share_payload_not_json", error=str(e))
        raise InvalidSharePayloadError("payload is not valid JSON") from e

    if not isinstance(payload, dict):
        raise InvalidSharePayloadError("payload must be a JSON object")

    try:
        return PackingSnapshot.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("share_payload_invalid", errors=e.error_count())
        raise InvalidSharePayloadError(str(e.errors()[0]["msg"])) from e


def build_share_payload(snapshot: PackingSnapshot) -> SharePayloadResponse:
    """Title, query and page path of a share link."""
    query = f"{SHARE_QUERY_KEY}={encode_snapshot(snapshot)}"
    return SharePayloadResponse(
        title=SHARE_TITLE,
        query=query,
        path=f"{SHARE_PATH}?{query}",
    )

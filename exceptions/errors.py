"""
Custom exception classes for the application.

The allocation engine itself never raises: bad inputs degrade to
sentinels. These errors belong to the service layer around it.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PACKING_SESSION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


# ===================
# SPECIFIC ERRORS
# ===================

class PackingSessionNotFoundError(NotFoundError):
    """Packing session not found (never created, deleted or expired)."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Packing session",
            identifier=session_id,
            code="PACKING_SESSION_NOT_FOUND"
        )


class InvalidSharePayloadError(ValidationError):
    """Share link payload could not be decoded into a snapshot."""

    def __init__(self, reason: str):
        super().__init__(
            message="Share payload could not be decoded",
            code="INVALID_SHARE_PAYLOAD",
            details={"reason": reason}
        )


class InvalidQuantityError(ValidationError):
    """A typed quantity cannot be represented."""

    def __init__(self, reason: str):
        super().__init__(
            message="Quantity out of range",
            code="INVALID_QUANTITY",
            details={"reason": reason}
        )


class PalletLimitExceededError(ValidationError):
    """The inputs would produce more pallets than one plan may hold."""

    def __init__(self, pallet_count: int, max_pallets: int):
        super().__init__(
            message=f"Plan would need {pallet_count} pallets (limit {max_pallets})",
            code="PALLET_LIMIT_EXCEEDED",
            details={"pallet_count": pallet_count, "max_pallets": max_pallets}
        )

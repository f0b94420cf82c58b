"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,

    # Packing sessions
    PackingSessionNotFoundError,

    # Sharing
    InvalidSharePayloadError,

    # Quantities
    InvalidQuantityError,
    PalletLimitExceededError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",

    # Packing sessions
    "PackingSessionNotFoundError",

    # Sharing
    "InvalidSharePayloadError",

    # Quantities
    "InvalidQuantityError",
    "PalletLimitExceededError",
]

"""
Cart Error Types

Every failure the cart layer reports is one of three kinds, so the webhook
layer can map them onto HTTP status codes without inspecting messages:

    - ValidationError: the request itself is malformed (400)
    - NotFoundError: a menu item, cart entry or location is missing (404)
    - InternalError: a storage or provider failure (500)

Author: Khalil Bannouri
Version: 1.0.0
"""

from typing import Any, Optional


class CartError(Exception):
    """Base class for all cart-layer errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": False,
            "message": self.message,
            **self.details,
        }


class ValidationError(CartError):
    """Malformed or missing required input."""

    status_code = 400


class NotFoundError(CartError):
    """Menu item, cart entry, location or menu absent."""

    status_code = 404


class InternalError(CartError):
    """Storage-layer or upstream provider failure."""

    status_code = 500


class CartConflictError(InternalError):
    """The stored cart changed between read and write."""

    def __init__(self, session_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Cart for session {session_id} was modified concurrently",
            {
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
        self.session_id = session_id
        self.expected_version = expected_version
        self.actual_version = actual_version


__all__ = [
    "CartError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    "CartConflictError",
]

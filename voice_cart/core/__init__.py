"""
Core module initialization.
Exports configuration, logging utilities and error types.
"""

from voice_cart.core.config import get_settings, Settings, EnvironmentMode
from voice_cart.core.errors import (
    CartError,
    ValidationError,
    NotFoundError,
    InternalError,
    CartConflictError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "CartError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    "CartConflictError",
]

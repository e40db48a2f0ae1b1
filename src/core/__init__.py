"""
Core package initializer.

Exposes the photo lifecycle error hierarchy.
"""

from .exceptions import (
    PhotoServiceError,
    ValidationError,
    NotFoundError,
    ParentNotFoundError,
    PhotoNotFoundError,
    LimitExceededError,
    ForbiddenError,
    StorageError,
    PersistenceError,
    DecodeError,
)

__all__ = [
    "PhotoServiceError",
    "ValidationError",
    "NotFoundError",
    "ParentNotFoundError",
    "PhotoNotFoundError",
    "LimitExceededError",
    "ForbiddenError",
    "StorageError",
    "PersistenceError",
    "DecodeError",
]

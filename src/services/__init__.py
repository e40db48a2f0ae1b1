"""
Services package initializer.

Re-exports the photo lifecycle services so callers can import from
`src.services` instead of deep module paths.
"""

from .photo_service import PhotoService
from .reconciliation import StorageReconciler

__all__ = [
    "PhotoService",
    "StorageReconciler",
]

"""Import all models for Alembic."""
from .base import TimestampMixin, SoftDeleteMixin
from .enums import PhotoVariant
from .bench import Bench
from .photo import Photo

__all__ = [
    "TimestampMixin",
    "SoftDeleteMixin",
    "PhotoVariant",
    "Bench",
    "Photo",
]

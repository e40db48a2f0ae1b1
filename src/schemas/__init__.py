"""
Photo schemas package.

Response models returned by the photo service and the HTTP layer.
"""

from .photo import (
    PhotoResponse,
    PhotoURLResponse,
    MainPhotoURLResponse,
)

__all__ = [
    "PhotoResponse",
    "PhotoURLResponse",
    "MainPhotoURLResponse",
]

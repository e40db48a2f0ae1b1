"""Object-store key convention for photo variants."""
import re
from typing import Optional, Tuple

from src.models.enums import PhotoVariant

_KEY_PATTERN = re.compile(
    r'^(?P<parent_type>[^/]+)/(?P<parent_id>\d+)/photos/(?P<photo_id>\d+)_(?P<variant>original|medium|thumbnail)\.jpg$'
)


def build_photo_key(parent_type: str, parent_id: int, photo_id: int, variant: PhotoVariant) -> str:
    """{parent_type}/{parent_id}/photos/{photo_id}_{variant}.jpg"""
    return f"{parent_type}/{parent_id}/photos/{photo_id}_{PhotoVariant(variant).value}.jpg"


def build_photo_keys(parent_type: str, parent_id: int, photo_id: int) -> list:
    """Keys of every variant of a photo, in upload order."""
    return [build_photo_key(parent_type, parent_id, photo_id, v) for v in PhotoVariant]


def parse_photo_key(key: str) -> Optional[Tuple[str, int, int, PhotoVariant]]:
    """
    Split a photo key into (parent_type, parent_id, photo_id, variant).

    Returns None for keys that do not follow the convention.
    """
    match = _KEY_PATTERN.match(key)
    if not match:
        return None
    return (
        match.group('parent_type'),
        int(match.group('parent_id')),
        int(match.group('photo_id')),
        PhotoVariant(match.group('variant')),
    )

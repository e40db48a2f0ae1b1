"""Enums for database models."""
import enum


class PhotoVariant(str, enum.Enum):
    """Derived image resolutions stored for every photo, in upload order."""
    original = "original"
    medium = "medium"
    thumbnail = "thumbnail"

    @classmethod
    def resolve(cls, name: str) -> "PhotoVariant":
        """Map a requested size name to a variant, defaulting to medium."""
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            return cls.medium

# src/utils/validators.py

from src.core.exceptions import ValidationError

# ---------------------------------------------------------------------
# Configuration (tweakable)
# ---------------------------------------------------------------------

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp"
}

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024   # 10 MB


def normalize_content_type(content_type: str) -> str:
    """Lower-case a MIME type and drop parameters such as charset."""
    return (content_type or "").split(";", 1)[0].strip().lower()


# ---------------------------------------------------------------------
# Upload validation (no decoding happens here)
# ---------------------------------------------------------------------

def validate_upload(
    size: int,
    content_type: str,
    *,
    max_size: int = MAX_FILE_SIZE_BYTES
) -> str:
    """
    Validate upload size, then MIME type.

    Args:
        size: Upload size in bytes
        content_type: Declared MIME type
        max_size: Maximum accepted size in bytes

    Returns:
        Normalized MIME type

    Raises:
        ValidationError
    """

    # --------------------------------------------------
    # 1. File size check
    # --------------------------------------------------
    if size > max_size:
        raise ValidationError(
            f"File size exceeds {max_size // (1024 * 1024)} MB limit",
            error_code="PHOTO_FILE_TOO_LARGE",
            field="file",
            value=size,
        )

    # --------------------------------------------------
    # 2. MIME type check
    # --------------------------------------------------
    normalized = normalize_content_type(content_type)
    if normalized not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            "Only JPEG, PNG, and WebP files allowed",
            error_code="PHOTO_INVALID_TYPE",
            field="content_type",
            value=content_type,
        )

    return normalized

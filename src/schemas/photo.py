"""Photo schemas for API responses."""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class PhotoResponse(BaseModel):
    """Active photo with resolved variant URLs."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    parent_id: int
    is_main: bool
    uploaded_by: int
    mime_type: str
    file_size: int

    # URLs (public or presigned, chosen by the caller)
    url_original: Optional[str] = None
    url_medium: Optional[str] = None
    url_thumbnail: Optional[str] = None

    created_at: datetime


class PhotoURLResponse(BaseModel):
    """Presigned URL for one variant."""
    url: str
    size: str
    expires_in: int


class MainPhotoURLResponse(BaseModel):
    """Thumbnail URL of a parent's main photo (None when it has none)."""
    parent_id: int
    url: Optional[str] = None

"""Photo API endpoints."""
from typing import List

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from src.api.deps import CallerContext, get_caller, get_photo_service
from src.models.enums import PhotoVariant
from src.schemas.photo import MainPhotoURLResponse, PhotoResponse, PhotoURLResponse
from src.services.photo_service import PhotoService


router = APIRouter()


@router.post(
    '/benches/{parent_id}/photos',
    response_model=PhotoResponse,
    status_code=status.HTTP_201_CREATED
)
def upload_photo(
    parent_id: int,
    photo: UploadFile = File(..., description='JPEG, PNG or WebP image'),
    is_main: bool = Form(False),
    caller: CallerContext = Depends(get_caller),
    service: PhotoService = Depends(get_photo_service)
):
    """
    Upload a photo for a bench.

    The image is stored as three JPEG variants (original, medium, thumbnail).
    The first photo of a bench always becomes its main photo.
    """
    # one byte past the limit is enough for the size check to reject it
    contents = photo.file.read(service.max_file_size + 1)
    return service.upload(
        parent_id=parent_id,
        uploader_id=caller.user_id,
        file_bytes=contents,
        content_type=photo.content_type or '',
        is_main=is_main,
    )


@router.get('/benches/{parent_id}/photos', response_model=List[PhotoResponse])
def list_photos(
    parent_id: int,
    presigned: bool = Query(False, description='Return time-limited URLs instead of public ones'),
    service: PhotoService = Depends(get_photo_service)
):
    """List a bench's photos, oldest first."""
    return service.list_by_parent(parent_id, presigned=presigned)


@router.get('/benches/{parent_id}/photos/main', response_model=MainPhotoURLResponse)
def get_main_photo_url(
    parent_id: int,
    service: PhotoService = Depends(get_photo_service)
):
    """Thumbnail URL of a bench's main photo (null when it has none)."""
    return MainPhotoURLResponse(parent_id=parent_id, url=service.get_main_photo_url(parent_id))


@router.delete('/photos/{photo_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_photo(
    photo_id: int,
    caller: CallerContext = Depends(get_caller),
    service: PhotoService = Depends(get_photo_service)
):
    """Delete a photo (uploader or admin)."""
    service.delete(photo_id, caller_id=caller.user_id, caller_is_admin=caller.is_admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch('/photos/{photo_id}/main', status_code=status.HTTP_204_NO_CONTENT)
def set_main_photo(
    photo_id: int,
    caller: CallerContext = Depends(get_caller),
    service: PhotoService = Depends(get_photo_service)
):
    """Make a photo its bench's main photo (bench owner or admin)."""
    service.set_main_photo(photo_id, caller_id=caller.user_id, caller_is_admin=caller.is_admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get('/photos/{photo_id}/url', response_model=PhotoURLResponse)
def get_photo_url(
    photo_id: int,
    size: str = Query(PhotoVariant.medium.value, description='original, medium or thumbnail'),
    service: PhotoService = Depends(get_photo_service)
):
    """Presigned download URL for one variant; unknown sizes fall back to medium."""
    variant = PhotoVariant.resolve(size)
    url = service.get_presigned_url(photo_id, variant.value)
    return PhotoURLResponse(url=url, size=variant.value, expires_in=service.url_expiry)

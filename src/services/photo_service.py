"""
Photo lifecycle service.

Coordinates the image processor, the object store and the photo metadata
store so that metadata never references incomplete binary state:

1. a pending record (empty paths) reserves an ID
2. every variant is uploaded under that ID
3. the paths are committed in one update, which makes the photo active

Failures after step 1 run ``_rollback_upload`` and re-raise the root error.
"""
import logging
from datetime import timedelta
from typing import List, Optional, Sequence

from src.app.config import settings
from src.core.exceptions import (
    ForbiddenError,
    LimitExceededError,
    ParentNotFoundError,
    PersistenceError,
    PhotoNotFoundError,
    StorageError,
)
from src.models.base import utcnow
from src.models.enums import PhotoVariant
from src.models.photo import Photo
from src.repositories.bench_repo import BenchRepository
from src.repositories.photo_repo import PhotoRepository
from src.schemas.photo import PhotoResponse
from src.services.image.processor import ImageProcessor
from src.services.storage.s3 import S3Service
from src.utils.photo_keys import build_photo_key, build_photo_keys
from src.utils.validators import validate_upload

logger = logging.getLogger(__name__)

STORED_MIME_TYPE = 'image/jpeg'


class PhotoService:
    """Upload, delete and main-photo management for a parent entity's photos."""

    def __init__(
        self,
        photo_repo: PhotoRepository,
        bench_repo: BenchRepository,
        storage: S3Service,
        image_processor: Optional[ImageProcessor] = None,
        parent_type: Optional[str] = None,
        max_photos: Optional[int] = None,
        max_file_size: Optional[int] = None,
        url_expiry: Optional[int] = None,
        pending_max_age: Optional[timedelta] = None,
    ):
        self.photo_repo = photo_repo
        self.bench_repo = bench_repo
        self.storage = storage
        self.image_processor = image_processor or ImageProcessor()
        self.parent_type = parent_type or settings.PHOTO_PARENT_TYPE
        self.max_photos = max_photos or settings.PHOTO_MAX_PER_PARENT
        self.max_file_size = max_file_size or settings.PHOTO_MAX_FILE_SIZE
        self.url_expiry = url_expiry or settings.PHOTO_PRESIGNED_URL_EXPIRY
        self.pending_max_age = pending_max_age or timedelta(
            minutes=settings.RECONCILE_PENDING_MAX_AGE_MINUTES
        )

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        parent_id: int,
        uploader_id: int,
        file_bytes: bytes,
        content_type: str,
        is_main: bool = False,
    ) -> PhotoResponse:
        """
        Store a new photo for a parent entity.

        Args:
            parent_id: Parent entity ID
            uploader_id: Uploading user ID
            file_bytes: Raw uploaded file
            content_type: Declared MIME type of the upload
            is_main: Make the new photo the parent's main photo

        Returns:
            PhotoResponse of the active photo

        Raises:
            ParentNotFoundError: Parent does not exist
            LimitExceededError: Parent already has the maximum number of photos
            ValidationError: File too large or unsupported type
            DecodeError: File is not a decodable image
            StorageError: A variant could not be uploaded
            PersistenceError: Metadata could not be written
        """
        if not self.bench_repo.exists(parent_id):
            raise ParentNotFoundError(parent_id)

        count = self.photo_repo.count_by_parent(
            parent_id, pending_since=utcnow() - self.pending_max_age
        )
        if count >= self.max_photos:
            raise LimitExceededError(parent_id, self.max_photos)

        validate_upload(len(file_bytes), content_type, max_size=self.max_file_size)

        photo = self.photo_repo.create_pending(
            parent_id=parent_id,
            uploader_id=uploader_id,
            file_size=len(file_bytes),
            mime_type=STORED_MIME_TYPE,
        )
        photo_id = photo.id
        logger.info(f"Created pending photo {photo_id} for parent {parent_id}")

        uploaded: List[str] = []
        try:
            processed = self.image_processor.process(file_bytes)

            paths = {}
            for variant, data in processed.items():
                key = build_photo_key(self.parent_type, parent_id, photo_id, variant)
                self.storage.upload_file(data, key, content_type=STORED_MIME_TYPE)
                uploaded.append(key)
                paths[variant] = key

            photo.path_original = paths[PhotoVariant.original]
            photo.path_medium = paths[PhotoVariant.medium]
            photo.path_thumbnail = paths[PhotoVariant.thumbnail]
            photo.file_size = len(processed.original)
            photo.mime_type = STORED_MIME_TYPE
            photo = self.photo_repo.save(photo)
        except Exception:
            self._rollback_upload(photo_id, uploaded)
            raise

        logger.info(f"Photo {photo_id} committed for parent {parent_id}")

        try:
            if is_main:
                self.photo_repo.set_main_photo(photo_id, parent_id)
            else:
                self.photo_repo.ensure_main(parent_id)
        except PersistenceError:
            self._rollback_upload(photo_id, uploaded)
            raise

        return self._to_response(photo)

    def _rollback_upload(self, photo_id: int, uploaded_keys: Sequence[str]) -> None:
        """
        Undo a failed upload: remove stored variants and the record.

        Never raises; the caller re-raises the root error.
        """
        logger.warning(f"Rolling back upload of photo {photo_id} ({len(uploaded_keys)} variants stored)")

        for key in uploaded_keys:
            try:
                self.storage.delete_object(key)
            except StorageError as e:
                logger.error(f"Rollback could not delete {key} for photo {photo_id}: {e.message}")

        try:
            self.photo_repo.hard_delete(photo_id)
        except PersistenceError as e:
            logger.error(f"Rollback could not remove pending photo {photo_id}: {e.message}")

    # ------------------------------------------------------------------
    # Delete / main photo
    # ------------------------------------------------------------------

    def delete(self, photo_id: int, caller_id: int, caller_is_admin: bool = False) -> None:
        """
        Delete a photo, then promote the oldest remaining one if the parent
        is left without a main photo.

        Object-store cleanup is best-effort; the record is soft-deleted even if
        some variants could not be removed.
        """
        photo = self.photo_repo.get_active(photo_id)
        if not photo:
            raise PhotoNotFoundError(photo_id)

        if photo.uploader_id != caller_id and not caller_is_admin:
            raise ForbiddenError(
                "Only the uploader or an admin can delete this photo",
                resource=f"photo:{photo_id}",
                action="delete",
            )

        parent_id = photo.parent_id

        self._delete_keys(photo.paths, photo_id)
        self.photo_repo.soft_delete(photo_id)
        logger.info(f"Photo {photo_id} deleted by user {caller_id}")

        self.photo_repo.ensure_main(parent_id)

    def set_main_photo(self, photo_id: int, caller_id: int, caller_is_admin: bool = False) -> None:
        """Make a photo its parent's main photo (parent owner or admin only)."""
        photo = self.photo_repo.get_active(photo_id)
        if not photo:
            raise PhotoNotFoundError(photo_id)

        parent_id = photo.parent_id
        owner_id = self.bench_repo.get_owner_id(parent_id)
        if owner_id is None:
            raise ParentNotFoundError(parent_id)

        if owner_id != caller_id and not caller_is_admin:
            raise ForbiddenError(
                "Only the parent owner or an admin can change the main photo",
                resource=f"photo:{photo_id}",
                action="set_main",
            )

        if not self.photo_repo.set_main_photo(photo_id, parent_id):
            # deleted between the lookup and the locked transaction
            raise PhotoNotFoundError(photo_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_by_parent(self, parent_id: int, presigned: bool = False) -> List[PhotoResponse]:
        """Active photos of a parent, oldest first, with resolved URLs."""
        photos = self.photo_repo.get_by_parent(parent_id)
        return [self._to_response(photo, presigned=presigned) for photo in photos]

    def get_presigned_url(self, photo_id: int, variant: str = PhotoVariant.medium.value) -> str:
        """Time-limited URL for one variant; unknown variant names fall back to medium."""
        photo = self.photo_repo.get_active(photo_id)
        if not photo:
            raise PhotoNotFoundError(photo_id)

        key = photo.path_for(PhotoVariant.resolve(variant))
        return self.storage.generate_presigned_download_url(key, expires_in=self.url_expiry)

    def get_main_photo_url(self, parent_id: int) -> Optional[str]:
        """Public thumbnail URL of the parent's main photo, if it has one."""
        photo = self.photo_repo.get_main_photo(parent_id)
        if not photo:
            return None
        return self.storage.get_public_url(photo.path_thumbnail)

    # ------------------------------------------------------------------
    # Parent deletion cascade
    # ------------------------------------------------------------------

    def delete_parent_photos(self, parent_id: int) -> int:
        """
        Remove every photo of a parent, including soft-deleted and pending ones.

        Returns:
            Number of records removed

        Raises:
            PersistenceError: Some records could not be removed (raised after
                every record has been attempted)
        """
        photos = self.photo_repo.get_by_parent_unscoped(parent_id)
        logger.info(f"Deleting {len(photos)} photos of parent {parent_id}")

        removed = 0
        failed: List[int] = []
        for photo in photos:
            photo_id = photo.id
            if photo.is_pending:
                keys = build_photo_keys(self.parent_type, parent_id, photo_id)
            else:
                keys = photo.paths
            self._delete_keys(keys, photo_id)

            try:
                self.photo_repo.hard_delete(photo_id)
                removed += 1
            except PersistenceError as e:
                logger.error(f"Could not remove photo {photo_id} of parent {parent_id}: {e.message}")
                failed.append(photo_id)

        if failed:
            raise PersistenceError(
                f"Failed to remove {len(failed)} of {len(photos)} photos of parent {parent_id}",
                operation="delete_parent_photos",
                original_error=f"photo ids: {failed}",
            )

        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _delete_keys(self, keys: Sequence[str], photo_id: int) -> None:
        for key in keys:
            try:
                self.storage.delete_object(key)
            except StorageError as e:
                logger.warning(f"Could not delete {key} of photo {photo_id}: {e.message}")

    def _resolve_url(self, key: str, presigned: bool) -> Optional[str]:
        if not key:
            return None
        if presigned:
            return self.storage.generate_presigned_download_url(key, expires_in=self.url_expiry)
        return self.storage.get_public_url(key)

    def _to_response(self, photo: Photo, presigned: bool = False) -> PhotoResponse:
        return PhotoResponse(
            id=photo.id,
            parent_id=photo.parent_id,
            is_main=photo.is_main,
            uploaded_by=photo.uploader_id,
            mime_type=photo.mime_type,
            file_size=photo.file_size,
            url_original=self._resolve_url(photo.path_original, presigned),
            url_medium=self._resolve_url(photo.path_medium, presigned),
            url_thumbnail=self._resolve_url(photo.path_thumbnail, presigned),
            created_at=photo.created_at,
        )

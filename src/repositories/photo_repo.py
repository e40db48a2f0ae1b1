"""Photo repository for database operations."""
import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy import and_, func, or_, select, text
from sqlalchemy.orm import Session

from src.models.base import utcnow
from src.models.photo import Photo
from src.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _committed():
    """Filter matching photos whose variant paths have been committed."""
    return and_(
        Photo.path_original != '',
        Photo.path_medium != '',
        Photo.path_thumbnail != '',
    )


def _pending():
    return Photo.path_original == ''


class PhotoRepository(BaseRepository[Photo]):
    """Repository for photo database operations."""

    def __init__(self, db: Session):
        super().__init__(Photo, db)

    def create_pending(
        self,
        parent_id: int,
        uploader_id: int,
        file_size: int,
        mime_type: str = 'image/jpeg'
    ) -> Photo:
        """
        Create a pending photo record (empty paths, not main).

        Args:
            parent_id: Parent entity ID
            uploader_id: Uploading user ID
            file_size: Size of the uploaded file in bytes
            mime_type: MIME type of the stored variants

        Returns:
            Created Photo instance carrying its new ID
        """
        return self.create({
            'parent_id': parent_id,
            'uploader_id': uploader_id,
            'is_main': False,
            'path_original': '',
            'path_medium': '',
            'path_thumbnail': '',
            'mime_type': mime_type,
            'file_size': file_size,
        })

    def soft_delete(self, photo_id: int) -> bool:
        """
        Mark a photo deleted and drop its main flag in one commit.

        Returns:
            True if successful, False if the photo does not exist
        """
        photo = self.get(photo_id, include_deleted=True)
        if not photo:
            return False

        with self.guard("soft_delete"):
            if photo.deleted_at is None:
                photo.deleted_at = utcnow()
            photo.is_main = False
            self.db.commit()
        return True

    def hard_delete(self, photo_id: int) -> bool:
        """Permanently remove a record, soft-deleted or not."""
        return self.delete(photo_id, soft=False)

    def get_active(self, photo_id: int) -> Optional[Photo]:
        """Get a non-deleted photo whose paths are committed."""
        with self.guard("get_active"):
            return self.db.query(Photo).filter(
                Photo.id == photo_id,
                Photo.deleted_at.is_(None),
                _committed()
            ).first()

    def get_by_parent(self, parent_id: int) -> List[Photo]:
        """
        Get active photos of a parent, oldest first.

        Pending and soft-deleted photos are excluded.
        """
        with self.guard("get_by_parent"):
            return self.db.query(Photo).filter(
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None),
                _committed()
            ).order_by(Photo.created_at, Photo.id).all()

    def get_by_parent_unscoped(self, parent_id: int) -> List[Photo]:
        """Get every photo of a parent including soft-deleted and pending ones."""
        with self.guard("get_by_parent_unscoped"):
            return self.db.query(Photo).filter(
                Photo.parent_id == parent_id
            ).order_by(Photo.id).all()

    def count_by_parent(self, parent_id: int, pending_since: Optional[datetime] = None) -> int:
        """
        Count non-deleted photos of a parent.

        Pending uploads are counted so concurrent uploads cannot overrun the
        per-parent limit. With ``pending_since`` set, pending records created
        before it (abandoned uploads awaiting reconciliation) are left out.
        """
        if pending_since is None:
            return self.count(filters={'parent_id': parent_id})

        with self.guard("count_by_parent"):
            return self.db.query(func.count(Photo.id)).filter(
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None),
                or_(_committed(), Photo.created_at >= pending_since)
            ).scalar() or 0

    def get_main_photo(self, parent_id: int) -> Optional[Photo]:
        """Get the active main photo of a parent, or None."""
        with self.guard("get_main_photo"):
            return self.db.query(Photo).filter(
                Photo.parent_id == parent_id,
                Photo.is_main.is_(True),
                Photo.deleted_at.is_(None),
                _committed()
            ).first()

    def set_main_photo(self, photo_id: int, parent_id: int) -> bool:
        """
        Make a photo the parent's only main photo in one transaction.

        The parent's live rows are locked (plus a transaction-scoped advisory
        lock on PostgreSQL) so concurrent calls for the same parent serialize.

        Args:
            photo_id: Photo to promote
            parent_id: Parent the photo must belong to

        Returns:
            True if the photo is now main, False (nothing changed) when the
            photo is not an active photo of the parent
        """
        with self.guard("set_main_photo"):
            self._lock_parent(parent_id)

            target = self.db.query(Photo.id).filter(
                Photo.id == photo_id,
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None),
                _committed()
            ).first()
            if target is None:
                self.db.rollback()
                logger.info(f"Photo {photo_id} is not an active photo of parent {parent_id}; main unchanged")
                return False

            self.db.query(Photo).filter(
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None),
                Photo.id != photo_id,
                Photo.is_main.is_(True)
            ).update({'is_main': False, 'updated_at': utcnow()}, synchronize_session=False)

            self.db.query(Photo).filter(
                Photo.id == photo_id,
                Photo.parent_id == parent_id
            ).update({'is_main': True, 'updated_at': utcnow()}, synchronize_session=False)

            self.db.commit()

        logger.info(f"Photo {photo_id} set as main for parent {parent_id}")
        return True

    def ensure_main(self, parent_id: int) -> Optional[int]:
        """
        Promote the parent's oldest active photo if it has no active main.

        Runs under the same parent lock as ``set_main_photo``.

        Returns:
            ID of the parent's main photo afterwards, or None when the parent
            has no active photos
        """
        with self.guard("ensure_main"):
            self._lock_parent(parent_id)

            current = self.db.query(Photo.id).filter(
                Photo.parent_id == parent_id,
                Photo.is_main.is_(True),
                Photo.deleted_at.is_(None),
                _committed()
            ).first()
            if current is not None:
                self.db.rollback()
                return current[0]

            oldest = self.db.query(Photo.id).filter(
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None),
                _committed()
            ).order_by(Photo.created_at, Photo.id).first()
            if oldest is None:
                self.db.rollback()
                logger.info(f"Parent {parent_id} has no active photos; no main photo")
                return None

            self.db.query(Photo).filter(
                Photo.id == oldest[0]
            ).update({'is_main': True, 'updated_at': utcnow()}, synchronize_session=False)
            self.db.commit()

        logger.info(f"Photo {oldest[0]} promoted to main for parent {parent_id}")
        return oldest[0]

    def _lock_parent(self, parent_id: int) -> None:
        """Serialize main-photo changes for a parent until the transaction ends."""
        if self.db.get_bind().dialect.name == 'postgresql':
            self.db.execute(
                text('SELECT pg_advisory_xact_lock(:key)'),
                {'key': int(parent_id)}
            )

        self.db.execute(
            select(Photo.id).where(
                Photo.parent_id == parent_id,
                Photo.deleted_at.is_(None)
            ).with_for_update()
        ).scalars().all()

    def get_stale_pending(self, older_than: datetime, limit: int = 500) -> List[Photo]:
        """Get non-deleted pending photos created before a cutoff."""
        with self.guard("get_stale_pending"):
            return self.db.query(Photo).filter(
                Photo.deleted_at.is_(None),
                _pending(),
                Photo.created_at < older_than
            ).order_by(Photo.created_at).limit(limit).all()

    def get_live_ids(self, photo_ids: List[int]) -> set:
        """Return the subset of IDs that belong to non-deleted records."""
        if not photo_ids:
            return set()
        with self.guard("get_live_ids"):
            rows = self.db.query(Photo.id).filter(
                Photo.id.in_(photo_ids),
                Photo.deleted_at.is_(None)
            ).all()
            return {row[0] for row in rows}

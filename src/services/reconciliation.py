"""
Storage reconciliation.

Reclaims what an interrupted upload or a failed compensation leaves behind:
pending records that never got their paths committed, and stored objects
whose photo record no longer exists (or was deleted).
"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from src.app.config import settings
from src.core.exceptions import PersistenceError, StorageError
from src.models.base import utcnow
from src.repositories.photo_repo import PhotoRepository
from src.services.storage.s3 import S3Service
from src.utils.photo_keys import build_photo_keys, parse_photo_key

logger = logging.getLogger(__name__)


class StorageReconciler:
    """Sweeps stale pending photos and orphaned objects."""

    def __init__(
        self,
        photo_repo: PhotoRepository,
        storage: S3Service,
        parent_type: Optional[str] = None,
        pending_max_age: Optional[timedelta] = None,
    ):
        self.photo_repo = photo_repo
        self.storage = storage
        self.parent_type = parent_type or settings.PHOTO_PARENT_TYPE
        self.pending_max_age = pending_max_age or timedelta(
            minutes=settings.RECONCILE_PENDING_MAX_AGE_MINUTES
        )

    def run(self) -> Dict[str, int]:
        """
        Run both sweeps.

        Returns:
            Summary with counts of removed records, removed objects and errors
        """
        summary = {
            'stale_pending_removed': 0,
            'orphaned_objects_removed': 0,
            'objects_scanned': 0,
            'errors': 0,
        }
        self.sweep_stale_pending(summary)
        self.sweep_orphaned_objects(summary)

        logger.info(f"Storage reconciliation finished: {summary}")
        return summary

    def sweep_stale_pending(self, summary: Dict[str, int]) -> None:
        cutoff = utcnow() - self.pending_max_age
        stale = self.photo_repo.get_stale_pending(cutoff)
        if stale:
            logger.info(f"Found {len(stale)} pending photos older than {cutoff.isoformat()}")

        for photo in stale:
            photo_id = photo.id
            keys = build_photo_keys(self.parent_type, photo.parent_id, photo_id)
            if not self._delete_keys(keys, summary):
                # keep the record so the next run retries its keys
                continue

            try:
                self.photo_repo.hard_delete(photo_id)
                summary['stale_pending_removed'] += 1
            except PersistenceError as e:
                logger.error(f"Could not remove stale pending photo {photo_id}: {e.message}")
                summary['errors'] += 1

    def sweep_orphaned_objects(self, summary: Dict[str, int]) -> None:
        try:
            objects = self.storage.list_objects_by_prefix(f"{self.parent_type}/")
        except StorageError as e:
            logger.error(f"Could not list objects for reconciliation: {e.message}")
            summary['errors'] += 1
            return

        keys_by_photo: Dict[int, List[str]] = {}
        for obj in objects:
            summary['objects_scanned'] += 1
            parsed = parse_photo_key(obj['key'])
            if parsed is None or parsed[0] != self.parent_type:
                continue
            keys_by_photo.setdefault(parsed[2], []).append(obj['key'])

        if not keys_by_photo:
            return

        live_ids = self.photo_repo.get_live_ids(list(keys_by_photo))
        for photo_id, keys in keys_by_photo.items():
            if photo_id in live_ids:
                continue
            logger.warning(f"Removing {len(keys)} orphaned objects of photo {photo_id}")
            for key in keys:
                if self._delete_keys([key], summary):
                    summary['orphaned_objects_removed'] += 1

    def _delete_keys(self, keys: List[str], summary: Dict[str, int]) -> bool:
        ok = True
        for key in keys:
            try:
                self.storage.delete_object(key)
            except StorageError as e:
                logger.error(f"Reconciliation could not delete {key}: {e.message}")
                summary['errors'] += 1
                ok = False
        return ok

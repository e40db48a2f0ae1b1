"""
Photo storage reconciliation worker
===================================

Periodic task that removes stale pending photo records and objects left in
the bucket without a live photo record.
"""

from typing import Dict, Any
import logging

from celery import Task
from sqlalchemy.orm import Session

from src.tasks.celery_app import celery_app
from src.db.base import SessionLocal
from src.repositories.photo_repo import PhotoRepository
from src.services.reconciliation import StorageReconciler
from src.services.storage.s3 import S3Service

logger = logging.getLogger(__name__)


class ReconcileTask(Task):
    """Base task for storage reconciliation."""

    def get_db(self) -> Session:
        """Get database session."""
        return SessionLocal()

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Task {task_id} failed: {str(exc)}")


@celery_app.task(
    bind=True,
    base=ReconcileTask,
    name='tasks.reconcile_photo_storage',
    track_started=True
)
def reconcile_photo_storage(self) -> Dict[str, Any]:
    """
    Sweep stale pending photos and orphaned objects.

    Returns:
        Reconciliation summary
    """
    db = self.get_db()
    try:
        reconciler = StorageReconciler(PhotoRepository(db), S3Service())
        return reconciler.run()
    finally:
        db.close()

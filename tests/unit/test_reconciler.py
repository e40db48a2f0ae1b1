from datetime import timedelta

import pytest

from src.core.exceptions import StorageError
from src.models.base import utcnow
from src.services.reconciliation import StorageReconciler
from src.tasks.workers.photo_reconciler import reconcile_photo_storage


@pytest.fixture
def reconciler(photo_repo, storage):
    return StorageReconciler(photo_repo, storage, pending_max_age=timedelta(minutes=30))


def make_stale(db_session, photo, minutes=60):
    photo.created_at = utcnow() - timedelta(minutes=minutes)
    db_session.commit()


def test_stale_pending_record_and_objects_removed(reconciler, photo_repo, add_photo, storage, db_session, bench, bucket_keys):
    stale = add_photo(bench.id, pending=True)
    make_stale(db_session, stale)
    storage.upload_file(b"partial", f"benches/{bench.id}/photos/{stale.id}_original.jpg")

    summary = reconciler.run()

    assert summary["stale_pending_removed"] == 1
    assert summary["errors"] == 0
    assert photo_repo.get(stale.id, include_deleted=True) is None
    assert bucket_keys() == []


def test_recent_pending_left_alone(reconciler, photo_repo, add_photo, storage, bench, bucket_keys):
    in_flight = add_photo(bench.id, pending=True)
    key = f"benches/{bench.id}/photos/{in_flight.id}_original.jpg"
    storage.upload_file(b"partial", key)

    summary = reconciler.run()

    assert summary["stale_pending_removed"] == 0
    assert photo_repo.get(in_flight.id) is not None
    assert bucket_keys() == [key]


def test_orphaned_objects_removed(reconciler, add_photo, storage, bench, bucket_keys):
    live = add_photo(bench.id, is_main=True)
    deleted = add_photo(bench.id, deleted=True)
    for path in live.paths + deleted.paths:
        storage.upload_file(b"jpeg", path)
    storage.upload_file(b"jpeg", f"benches/{bench.id}/photos/4242_medium.jpg")
    storage.upload_file(b"notes", f"benches/{bench.id}/photos/README.txt")

    summary = reconciler.run()

    assert summary["orphaned_objects_removed"] == 4
    assert bucket_keys() == sorted(live.paths + [f"benches/{bench.id}/photos/README.txt"])


def test_storage_errors_are_counted(reconciler, add_photo, storage, db_session, bench, mocker):
    stale = add_photo(bench.id, pending=True)
    make_stale(db_session, stale)
    mocker.patch.object(storage, "delete_object", side_effect=StorageError("delete failed", operation="delete"))

    summary = reconciler.run()

    assert summary["stale_pending_removed"] == 0
    assert summary["errors"] == 3
    # kept so the next run retries
    assert reconciler.photo_repo.get(stale.id) is not None


def test_listing_failure_is_reported(reconciler, storage, mocker):
    mocker.patch.object(storage, "list_objects_by_prefix", side_effect=StorageError("list failed", operation="list"))

    summary = reconciler.run()

    assert summary["errors"] == 1


def test_celery_task_runs_reconciler(mocker):
    session = mocker.MagicMock()
    mocker.patch("src.tasks.workers.photo_reconciler.SessionLocal", return_value=session)
    mocker.patch("src.tasks.workers.photo_reconciler.S3Service")
    run = mocker.patch(
        "src.tasks.workers.photo_reconciler.StorageReconciler.run",
        return_value={"stale_pending_removed": 0},
    )

    result = reconcile_photo_storage()

    assert result == {"stale_pending_removed": 0}
    run.assert_called_once()
    session.close.assert_called_once()

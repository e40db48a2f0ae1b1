"""
Shared test configuration.

Settings are read from the environment when src.app.config is first
imported, so the test environment is set before any src import.
"""
import os

os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["S3_REGION"] = "us-east-1"
os.environ["S3_BUCKET_NAME"] = "hopspot-photos-test"
os.environ["PHOTO_PARENT_TYPE"] = "benches"
os.environ.pop("S3_ENDPOINT_URL", None)
os.environ.pop("S3_PUBLIC_ENDPOINT", None)

import cv2
import numpy as np
import pytest
from moto import mock_aws
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import src.models  # noqa: F401  (registers tables on Base.metadata)
from src.db.base import Base
from src.models.base import utcnow
from src.models.bench import Bench
from src.models.photo import Photo
from src.repositories.bench_repo import BenchRepository
from src.repositories.photo_repo import PhotoRepository
from src.services.photo_service import PhotoService
from src.services.storage.s3 import S3Service

OWNER_ID = 100
UPLOADER_ID = 200
OTHER_USER_ID = 300


def make_image(width: int = 64, height: int = 48, ext: str = ".jpg", channels: int = 3) -> bytes:
    """Encode a gradient test image with OpenCV."""
    x = np.linspace(0, 255, width, dtype=np.uint8)
    y = np.linspace(0, 255, height, dtype=np.uint8)
    image = np.zeros((height, width, channels), dtype=np.uint8)
    image[..., 0] = x[np.newaxis, :]
    image[..., 1] = y[:, np.newaxis]
    image[..., 2] = 128
    if channels == 4:
        image[..., 3] = 200
    success, buffer = cv2.imencode(ext, image)
    assert success
    return buffer.tobytes()


def list_keys(storage: S3Service, prefix: str = "") -> list:
    return sorted(obj["key"] for obj in storage.list_objects_by_prefix(prefix))


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def storage():
    """S3 gateway backed by moto with the photo bucket created."""
    with mock_aws():
        service = S3Service()
        service.ensure_bucket()
        yield service


@pytest.fixture
def photo_repo(db_session):
    return PhotoRepository(db_session)


@pytest.fixture
def bench_repo(db_session):
    return BenchRepository(db_session)


@pytest.fixture
def bench(db_session):
    bench = Bench(name="Lakeside bench", created_by=OWNER_ID)
    db_session.add(bench)
    db_session.commit()
    return bench


@pytest.fixture
def photo_service(photo_repo, bench_repo, storage):
    return PhotoService(photo_repo=photo_repo, bench_repo=bench_repo, storage=storage)


@pytest.fixture
def jpeg_bytes():
    return make_image(64, 48, ".jpg")


@pytest.fixture
def add_photo(db_session):
    """Insert a photo row directly (active unless pending=True)."""
    def _add(parent_id, uploader_id=UPLOADER_ID, is_main=False, pending=False, deleted=False):
        photo = Photo(
            parent_id=parent_id,
            uploader_id=uploader_id,
            is_main=is_main,
            file_size=1024,
        )
        db_session.add(photo)
        db_session.flush()
        if not pending:
            base = f"benches/{parent_id}/photos/{photo.id}"
            photo.path_original = f"{base}_original.jpg"
            photo.path_medium = f"{base}_medium.jpg"
            photo.path_thumbnail = f"{base}_thumbnail.jpg"
        if deleted:
            photo.deleted_at = utcnow()
        db_session.commit()
        return photo
    return _add


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def bucket_keys(storage):
    """Callable returning the sorted keys currently stored in the bucket."""
    return lambda prefix="": list_keys(storage, prefix)

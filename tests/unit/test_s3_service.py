from urllib.parse import urlparse

import pytest
from moto import mock_aws

from src.core.exceptions import StorageError
from src.services.storage.s3 import S3Service


def test_ensure_bucket_is_idempotent(storage):
    assert storage.ensure_bucket() is False


def test_ensure_bucket_creates_missing_bucket():
    with mock_aws():
        service = S3Service(bucket_name="fresh-bucket")
        assert service.ensure_bucket() is True
        assert service.ensure_bucket() is False


def test_upload_and_list(storage, bucket_keys):
    storage.upload_file(b"one", "benches/1/photos/1_original.jpg")
    storage.upload_file(b"two", "benches/1/photos/1_medium.jpg")
    storage.upload_file(b"three", "benches/2/photos/2_medium.jpg")

    assert bucket_keys("benches/1/") == [
        "benches/1/photos/1_medium.jpg",
        "benches/1/photos/1_original.jpg",
    ]

    head = storage.s3_client.head_object(Bucket=storage.bucket_name, Key="benches/1/photos/1_original.jpg")
    assert head["ContentType"] == "image/jpeg"
    assert head["ContentLength"] == 3


def test_upload_overwrites_existing_key(storage):
    storage.upload_file(b"first", "benches/1/photos/1_original.jpg")
    storage.upload_file(b"second", "benches/1/photos/1_original.jpg")

    body = storage.s3_client.get_object(
        Bucket=storage.bucket_name, Key="benches/1/photos/1_original.jpg"
    )["Body"].read()
    assert body == b"second"


def test_delete_is_idempotent(storage, bucket_keys):
    storage.upload_file(b"data", "benches/1/photos/1_thumbnail.jpg")

    storage.delete_object("benches/1/photos/1_thumbnail.jpg")
    storage.delete_object("benches/1/photos/1_thumbnail.jpg")
    storage.delete_object("benches/1/photos/never_existed.jpg")

    assert bucket_keys() == []


def test_upload_to_missing_bucket_raises_storage_error():
    with mock_aws():
        service = S3Service(bucket_name="no-such-bucket")
        with pytest.raises(StorageError) as exc_info:
            service.upload_file(b"data", "benches/1/photos/1_original.jpg")

    assert exc_info.value.details["operation"] == "upload"
    assert exc_info.value.details["key"] == "benches/1/photos/1_original.jpg"


def test_presigned_url_expires(storage):
    url = storage.generate_presigned_download_url("benches/1/photos/1_medium.jpg", expires_in=3600)

    assert "benches/1/photos/1_medium.jpg" in url
    assert "X-Amz-Expires=3600" in url
    assert "X-Amz-Signature=" in url


def test_presigned_url_uses_public_endpoint():
    service = S3Service(
        bucket_name="photos",
        endpoint_url="http://minio:9000",
        public_base_url="https://cdn.example.com",
    )

    url = service.generate_presigned_download_url("benches/1/photos/1_medium.jpg")

    parsed = urlparse(url)
    assert parsed.scheme == "https"
    assert parsed.netloc == "cdn.example.com"
    assert parsed.path == "/photos/benches/1/photos/1_medium.jpg"


def test_public_url():
    service = S3Service(
        bucket_name="photos",
        endpoint_url="http://minio:9000",
        public_base_url="http://localhost:9000/",
    )

    assert service.get_public_url("benches/1/photos/1_thumbnail.jpg") == (
        "http://localhost:9000/photos/benches/1/photos/1_thumbnail.jpg"
    )

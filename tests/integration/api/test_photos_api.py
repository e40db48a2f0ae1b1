"""
Photo API Tests
===============

Drives the HTTP endpoints end to end against in-memory SQLite and a moto
bucket.
"""

import pytest

pytestmark = pytest.mark.integration

API = "/api/v1"


def upload(client, bench_id, data, headers, content_type="image/jpeg", is_main=None):
    form = {} if is_main is None else {"is_main": "true" if is_main else "false"}
    return client.post(
        f"{API}/benches/{bench_id}/photos",
        files={"photo": ("bench.jpg", data, content_type)},
        data=form,
        headers=headers,
    )


# ============================================================================
# Upload
# ============================================================================

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_upload_photo(client, bench, jpeg_bytes, uploader_headers):
    response = upload(client, bench.id, jpeg_bytes, uploader_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["is_main"] is True
    assert body["parent_id"] == bench.id
    assert body["uploaded_by"] == 200
    assert body["url_thumbnail"].endswith(f"/benches/{bench.id}/photos/{body['id']}_thumbnail.jpg")


def test_upload_requires_caller(client, bench, jpeg_bytes):
    response = upload(client, bench.id, jpeg_bytes, headers={})
    assert response.status_code == 401


def test_upload_to_unknown_bench(client, jpeg_bytes, uploader_headers):
    response = upload(client, 9999, jpeg_bytes, uploader_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "PARENT_NOT_FOUND"


def test_upload_invalid_type(client, bench, jpeg_bytes, uploader_headers):
    response = upload(client, bench.id, jpeg_bytes, uploader_headers, content_type="application/pdf")

    assert response.status_code == 400
    assert response.json()["error_code"] == "PHOTO_INVALID_TYPE"


def test_upload_too_large(client, bench, uploader_headers, monkeypatch, mocker):
    from src.app.config import settings
    from src.services.photo_service import PhotoService

    monkeypatch.setattr(settings, "PHOTO_MAX_FILE_SIZE", 1024)
    upload_spy = mocker.spy(PhotoService, "upload")

    response = upload(client, bench.id, b"\xff" * 5000, uploader_headers)

    assert response.status_code == 400
    assert response.json()["error_code"] == "PHOTO_FILE_TOO_LARGE"
    # the request body is read only up to one byte past the limit
    assert len(upload_spy.call_args.kwargs["file_bytes"]) == 1025


def test_upload_corrupt_image(client, bench, uploader_headers):
    response = upload(client, bench.id, b"garbage bytes", uploader_headers)

    assert response.status_code == 400
    assert response.json()["error_code"] == "IMAGE_DECODE_ERROR"


def test_upload_limit(client, bench, add_photo, jpeg_bytes, uploader_headers):
    add_photo(bench.id, is_main=True)
    for _ in range(9):
        add_photo(bench.id)

    response = upload(client, bench.id, jpeg_bytes, uploader_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "PHOTO_MAX_REACHED"
    assert body["details"]["limit"] == 10


def test_upload_storage_failure(client, bench, storage, jpeg_bytes, uploader_headers, mocker):
    from src.core.exceptions import StorageError

    mocker.patch.object(storage, "upload_file", side_effect=StorageError("Failed to upload file", operation="upload"))

    response = upload(client, bench.id, jpeg_bytes, uploader_headers)

    assert response.status_code == 500
    assert response.json()["error_code"] == "STORAGE_ERROR"
    assert client.get(f"{API}/benches/{bench.id}/photos").json() == []


# ============================================================================
# Listing and URLs
# ============================================================================

def test_list_photos(client, bench, jpeg_bytes, uploader_headers):
    first = upload(client, bench.id, jpeg_bytes, uploader_headers).json()
    second = upload(client, bench.id, jpeg_bytes, uploader_headers, is_main=True).json()

    response = client.get(f"{API}/benches/{bench.id}/photos")

    assert response.status_code == 200
    photos = response.json()
    assert [p["id"] for p in photos] == [first["id"], second["id"]]
    assert [p["is_main"] for p in photos] == [False, True]


def test_list_photos_presigned(client, bench, jpeg_bytes, uploader_headers):
    upload(client, bench.id, jpeg_bytes, uploader_headers)

    response = client.get(f"{API}/benches/{bench.id}/photos", params={"presigned": "true"})

    assert "X-Amz-Signature=" in response.json()[0]["url_medium"]


def test_photo_url_defaults_to_medium(client, bench, jpeg_bytes, uploader_headers):
    photo = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.get(f"{API}/photos/{photo['id']}/url", params={"size": "poster"})

    assert response.status_code == 200
    body = response.json()
    assert body["size"] == "medium"
    assert body["expires_in"] == 3600
    assert f"{photo['id']}_medium.jpg" in body["url"]


def test_photo_url_unknown_photo(client):
    response = client.get(f"{API}/photos/9999/url")

    assert response.status_code == 404
    assert response.json()["error_code"] == "PHOTO_NOT_FOUND"


def test_main_photo_url(client, bench, jpeg_bytes, uploader_headers):
    assert client.get(f"{API}/benches/{bench.id}/photos/main").json()["url"] is None

    photo = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    body = client.get(f"{API}/benches/{bench.id}/photos/main").json()
    assert body["url"] == photo["url_thumbnail"]


# ============================================================================
# Delete and main photo
# ============================================================================

def test_delete_photo(client, bench, jpeg_bytes, uploader_headers):
    first = upload(client, bench.id, jpeg_bytes, uploader_headers).json()
    second = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.delete(f"{API}/photos/{first['id']}", headers=uploader_headers)
    assert response.status_code == 204

    photos = client.get(f"{API}/benches/{bench.id}/photos").json()
    assert [(p["id"], p["is_main"]) for p in photos] == [(second["id"], True)]

    again = client.delete(f"{API}/photos/{first['id']}", headers=uploader_headers)
    assert again.status_code == 404


def test_delete_forbidden(client, bench, jpeg_bytes, uploader_headers, owner_headers):
    photo = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.delete(f"{API}/photos/{photo['id']}", headers=owner_headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "FORBIDDEN"


def test_admin_delete(client, bench, jpeg_bytes, uploader_headers, admin_headers):
    photo = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.delete(f"{API}/photos/{photo['id']}", headers=admin_headers)

    assert response.status_code == 204


def test_set_main_photo(client, bench, jpeg_bytes, uploader_headers, owner_headers):
    upload(client, bench.id, jpeg_bytes, uploader_headers)
    second = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.patch(f"{API}/photos/{second['id']}/main", headers=owner_headers)
    assert response.status_code == 204

    photos = client.get(f"{API}/benches/{bench.id}/photos").json()
    assert [p["id"] for p in photos if p["is_main"]] == [second["id"]]


def test_set_main_photo_forbidden_for_non_owner(client, bench, jpeg_bytes, uploader_headers):
    photo = upload(client, bench.id, jpeg_bytes, uploader_headers).json()

    response = client.patch(f"{API}/photos/{photo['id']}/main", headers=uploader_headers)

    assert response.status_code == 403

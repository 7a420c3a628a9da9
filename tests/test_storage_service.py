import asyncio
import base64

import cloudinary.uploader
import pytest
from cloudinary.exceptions import BadRequest, Error as CloudinaryError

from conftest import FakeStorage
from services.storage_service import CloudinaryStorage, PublishError, PublishService
from utils.file_utils import is_image_mimetype, to_data_uri


def test_publish_sends_data_uri_and_fixed_options():
    storage = FakeStorage()
    buffer = bytes(range(256)) * 200  # 50 KB

    result = asyncio.run(PublishService(storage).publish(buffer, "test-uploads"))

    assert len(storage.calls) == 1
    data_uri, options = storage.calls[0]
    prefix = "data:image/webp;base64,"
    assert data_uri.startswith(prefix)
    assert base64.b64decode(data_uri[len(prefix):]) == buffer
    assert options == {
        "folder": "test-uploads",
        "resource_type": "image",
        "format": "webp",
        "use_filename": False,
        "unique_filename": True,
        "overwrite": False,
    }
    assert result.url.startswith("https://")
    assert result.public_id == "test-uploads/abc123"


def test_publish_propagates_collaborator_error_unchanged():
    error = PublishError("Invalid signature", http_code=401)
    storage = FakeStorage(error=error)

    with pytest.raises(PublishError) as excinfo:
        asyncio.run(PublishService(storage).publish(b"data", "uploads"))

    assert excinfo.value is error
    assert excinfo.value.http_code == 401


def test_publish_rejects_incomplete_response():
    storage = FakeStorage(response={"public_id": "uploads/x"})

    with pytest.raises(PublishError) as excinfo:
        asyncio.run(PublishService(storage).publish(b"data", "uploads"))

    assert excinfo.value.http_code == 502


def test_cloudinary_storage_requires_credentials():
    with pytest.raises(ValueError):
        CloudinaryStorage(cloud_name="demo", api_key=None, api_secret="secret")


def test_cloudinary_storage_passes_options_through(monkeypatch):
    captured = {}

    def fake_upload(file, **options):
        captured["file"] = file
        captured["options"] = options
        return {"secure_url": "https://example.com/a.webp", "public_id": "uploads/a"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")

    response = storage.upload("data:image/webp;base64,AAAA", {"folder": "uploads"})

    assert response["public_id"] == "uploads/a"
    assert captured == {
        "file": "data:image/webp;base64,AAAA",
        "options": {"folder": "uploads", "return_error": True},
    }


@pytest.mark.parametrize("error, expected_status", [
    (BadRequest("Invalid image file"), 400),
    (CloudinaryError("Server returned unexpected status code"), 502),
])
def test_cloudinary_errors_become_publish_errors(monkeypatch, error, expected_status):
    def failing_upload(file, **options):
        raise error

    monkeypatch.setattr(cloudinary.uploader, "upload", failing_upload)
    storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")

    with pytest.raises(PublishError) as excinfo:
        storage.upload("data:image/webp;base64,AAAA", {})

    assert excinfo.value.http_code == expected_status
    assert excinfo.value.__cause__ is error


def test_to_data_uri_declares_media_type():
    assert to_data_uri(b"abc") == "data:image/webp;base64,YWJj"
    assert to_data_uri(b"abc", "png").startswith("data:image/png;base64,")


@pytest.mark.parametrize("mimetype, allowed", [
    ("image/png", True),
    ("IMAGE/JPEG", True),
    ("text/plain", False),
    ("application/octet-stream", False),
    (None, False),
])
def test_is_image_mimetype(mimetype, allowed):
    assert is_image_mimetype(mimetype) is allowed


@pytest.mark.parametrize("http_code", [420, 429, 503])
def test_cloudinary_api_error_keeps_its_status(monkeypatch, http_code):
    def rejecting_upload(file, **options):
        assert options["return_error"] is True
        return {"error": {"message": "Rate limit exceeded", "http_code": http_code}}

    monkeypatch.setattr(cloudinary.uploader, "upload", rejecting_upload)
    storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")

    with pytest.raises(PublishError) as excinfo:
        storage.upload("data:image/webp;base64,AAAA", {"folder": "uploads"})

    assert excinfo.value.http_code == http_code
    assert excinfo.value.message == "Rate limit exceeded"

from io import BytesIO
import random

import pytest
from PIL import Image

from services.storage_service import StorageCollaborator
from webserver import create_app


def make_image_bytes(size=(64, 64), color=(200, 30, 30), fmt="PNG", noise=False, exif=None):
    """Render an in-memory test image; noise images compress poorly"""
    if noise:
        width, height = size
        data = random.Random(42).randbytes(width * height * 3)
        image = Image.frombytes("RGB", size, data)
    else:
        image = Image.new("RGB", size, color)

    output = BytesIO()
    if exif is not None:
        image.save(output, format=fmt, exif=exif)
    else:
        image.save(output, format=fmt)
    return output.getvalue()


class FakeStorage(StorageCollaborator):
    """Records uploads instead of talking to Cloudinary"""

    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response
        self.error = error

    def upload(self, data_uri, options):
        self.calls.append((data_uri, options))
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return {
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/{options['folder']}/abc123.webp",
            "public_id": f"{options['folder']}/abc123",
        }


@pytest.fixture
def flat_png():
    return make_image_bytes()


@pytest.fixture
def noise_png():
    return make_image_bytes(size=(256, 256), noise=True)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    app = create_app(storage=storage)
    app.config["TESTING"] = True
    return app.test_client()

"""Shared fixtures for image metadata tests."""

import io
from contextlib import contextmanager

import pytest
from PIL import Image

from imagemeta.services.image_meta.exceptions import StorageError


def make_image(fmt: str, size: tuple[int, int]) -> bytes:
    """Render a solid-colour image in the given Pillow format."""
    mode = "RGBA" if fmt in ("PNG", "WEBP", "ICO") else "RGB"
    image = Image.new(mode, size, color=(200, 30, 30))
    buffer = io.BytesIO()
    if fmt == "ICO":
        image.save(buffer, format=fmt, sizes=[size])
    else:
        image.save(buffer, format=fmt)
    return buffer.getvalue()


class FakeGateway:
    """In-memory stand-in for StorageGateway that records every call."""

    def __init__(self, objects=None, fail_write=False, fail_open=False):
        self.objects = dict(objects or {})
        self.fail_write = fail_write
        self.fail_open = fail_open
        self.calls = []
        self.open_streams = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.closed = True

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)

    @contextmanager
    def open_reader(self, bucket_name, object_name):
        self.calls.append(("open_reader", bucket_name, object_name))
        if self.fail_open or (bucket_name, object_name) not in self.objects:
            raise StorageError(f"File not found: gs://{bucket_name}/{object_name}")
        stream = io.BytesIO(self.objects[(bucket_name, object_name)])
        self.open_streams += 1
        try:
            yield stream
        finally:
            stream.close()
            self.open_streams -= 1

    def read_object(self, bucket_name, object_name, max_bytes=0):
        self.calls.append(("read_object", bucket_name, object_name))
        with self.open_reader(bucket_name, object_name) as reader:
            content = reader.read()
        if max_bytes and len(content) > max_bytes:
            raise StorageError("File too large")
        return content

    def write_object(self, bucket_name, object_name, data, content_type="application/octet-stream"):
        self.calls.append(("write_object", bucket_name, object_name))
        if self.fail_write:
            raise StorageError("Failed to write file: upload interrupted")
        self.objects[(bucket_name, object_name)] = data
        return f"gs://{bucket_name}/{object_name}"


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def png_100():
    return make_image("PNG", (100, 100))


@pytest.fixture
def jpeg_800x600():
    return make_image("JPEG", (800, 600))


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def gateway_factory(fake_gateway):
    """Factory returning the shared fake gateway and recording creations."""
    created = []

    def factory(project_id):
        created.append(project_id)
        return fake_gateway

    factory.created = created
    return factory

"""Tests for the image metadata HTTP endpoint."""

from unittest.mock import patch

import msgpack
import pytest
from fastapi.testclient import TestClient

from imagemeta.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def patched_gateway(fake_gateway):
    """Route the pipeline's storage access to the in-memory gateway."""
    with patch(
        "imagemeta.services.image_meta.pipeline.StorageGateway",
        side_effect=lambda project_id: fake_gateway,
    ) as mock_gateway:
        yield mock_gateway


def _post(client, fields):
    return client.post(
        "/",
        content=msgpack.packb(fields),
        headers={"Content-Type": "application/msgpack"},
    )


def test_image_meta_success(client, patched_gateway, fake_gateway, png_100):
    fake_gateway.objects[("b1", "photo.png")] = png_100

    response = _post(client, {"filename": "photo.png", "bucket": "b1"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/msgpack"
    assert msgpack.unpackb(response.content) == {
        "shape": "Square",
        "orientation": "Symmetrical",
        "width": 100,
        "height": 100,
    }
    assert ("b1", "photo.png.img.meta") in fake_gateway.objects


def test_image_meta_disallowed_type(client, patched_gateway, fake_gateway):
    fake_gateway.objects[("b1", "doc.pdf")] = b"%PDF-1.4\n" + b"0" * 600

    response = _post(client, {"filename": "doc.pdf", "bucket": "b1"})

    assert response.status_code == 400
    assert response.headers["content-type"] == "application/msgpack"
    assert msgpack.unpackb(response.content) == {"message": "File type not allowed", "status_code": 400}


def test_image_meta_missing_object(client, patched_gateway):
    response = _post(client, {"filename": "nope.png", "bucket": "b1"})

    assert response.status_code == 500
    assert msgpack.unpackb(response.content)["message"] == "Failed to read source file"


def test_image_meta_malformed_body(client, patched_gateway):
    response = client.post("/", content=b"\xc1not msgpack")

    assert response.status_code == 400
    assert msgpack.unpackb(response.content) == {"message": "Failed to parse request data", "status_code": 400}
    patched_gateway.assert_not_called()


def test_image_meta_missing_bucket(client, patched_gateway):
    response = _post(client, {"filename": "photo.png"})

    assert response.status_code == 400
    assert msgpack.unpackb(response.content)["message"] == "Incorrect filename or bucket"
    patched_gateway.assert_not_called()

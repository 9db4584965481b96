"""
Request pipeline for computing and persisting image metadata.

One call handles one request end to end:
decode request -> validate -> probe MIME type -> read and decode image ->
classify -> persist `<filename>.img.meta` -> build response.

Every failure is converted at the step where it happens into an error
response; nothing is retried and nothing escapes as an exception.
"""

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from imagemeta.core.config import Settings, settings as default_settings
from imagemeta.core.logging import gcs_uri_context
from imagemeta.services.image_meta import codec, mime
from imagemeta.services.image_meta.decoder import decode_dimensions
from imagemeta.services.image_meta.exceptions import (
    ClientInputError,
    EncodeError,
    ImageMetaException,
    RequestDecodeError,
)
from imagemeta.services.image_meta.models import ErrorPayload, ImageRequest, ImageShape
from imagemeta.services.image_meta.storage import StorageGateway

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".img.meta"

GatewayFactory = Callable[[str | None], StorageGateway]


@dataclass(frozen=True)
class PipelineResponse:
    """Encoded response body plus the transport status to send it with."""

    body: bytes
    status_code: int
    media_type: str = codec.CONTENT_TYPE


def metadata_key(filename: str) -> str:
    """Object key of the metadata record for a source object."""
    return f"{filename}{METADATA_SUFFIX}"


@contextmanager
def _step(message: str) -> Iterator[None]:
    """Replace the message of any pipeline error raised inside the block.

    The error class, and therefore its status code, is kept.
    """
    try:
        yield
    except ImageMetaException as e:
        raise type(e)(message, e.status_code, detail=e.message) from e


def send_response(shape: ImageShape, status_code: int = 200) -> PipelineResponse:
    try:
        return PipelineResponse(body=codec.encode(shape), status_code=status_code)
    except EncodeError:
        return send_error("Failed to create response", 500)


def send_error(message: str, status_code: int) -> PipelineResponse:
    """Encode an error payload; fall back to plain text if even that fails."""
    try:
        body = codec.encode(ErrorPayload(message=message, status_code=status_code))
    except EncodeError:
        return PipelineResponse(
            body=b"Failed to create response",
            status_code=500,
            media_type="text/plain; charset=utf-8",
        )
    return PipelineResponse(body=body, status_code=status_code)


def _decode_request(body: bytes) -> ImageRequest:
    try:
        request = codec.decode_request(body)
    except RequestDecodeError as e:
        raise ClientInputError("Failed to parse request data") from e

    if not request.is_complete:
        raise ClientInputError("Incorrect filename or bucket")
    return request


def _process(gateway: StorageGateway, request: ImageRequest, config: Settings) -> ImageShape:
    bucket, filename = request.bucket, request.filename

    # The probe reader is closed before the body is read through a new one
    with ExitStack() as stack:
        with _step("Failed to read source file"):
            reader = stack.enter_context(gateway.open_reader(bucket, filename))
        with _step("Failed to determine MIME type"):
            probe = mime.read_probe(
                reader, size=config.MIME_PROBE_BYTES, strict=config.STRICT_MIME_PROBE
            )

    mime_type = mime.check_allowed(probe)
    logger.debug("MIME type accepted", extra={"mime_type": mime_type})

    with _step("Failed to read source file"):
        content = gateway.read_object(bucket, filename, max_bytes=config.max_source_bytes)

    with _step("Failed to decode source image"):
        width, height = decode_dimensions(content, mime.format_token(mime_type))

    shape = ImageShape.from_dimensions(width, height)

    with _step("Failed to create metadata"):
        meta_bytes = codec.encode(shape)

    with _step("Failed to save metadata to .img.meta"):
        gateway.write_object(bucket, metadata_key(filename), meta_bytes, codec.CONTENT_TYPE)

    return shape


def compute_image_meta(
    body: bytes,
    gateway_factory: GatewayFactory | None = None,
    config: Settings | None = None,
) -> PipelineResponse:
    """
    Run the full pipeline for one request.

    Args:
        body: Raw MessagePack request body with `filename` and `bucket`
        gateway_factory: Creates the storage gateway for this invocation;
            called only after the request has been validated. Defaults to
            StorageGateway
        config: Settings override, defaults to the process settings

    Returns:
        PipelineResponse carrying either the encoded ImageShape (200) or an
        encoded error payload (400/500)
    """
    config = config or default_settings
    gateway_factory = gateway_factory or StorageGateway
    token = None
    try:
        request = _decode_request(body)
        token = gcs_uri_context.set(request.gcs_uri)

        with _step("Failed to create client"):
            gateway = gateway_factory(config.gcp_project)
        with gateway:
            shape = _process(gateway, request, config)

        logger.info(
            "Image metadata saved",
            extra={
                "shape": shape.shape.value,
                "orientation": shape.orientation.value,
                "width": shape.width,
                "height": shape.height,
            },
        )

    except ImageMetaException as e:
        log = logger.warning if e.status_code < 500 else logger.error
        log(
            "Image metadata request failed",
            extra={
                "error": e.message,
                "detail": e.detail,
                "http_status": e.status_code,
            },
            exc_info=e.status_code >= 500,
        )
        return send_error(e.message, e.status_code)

    except Exception as e:
        logger.error(
            "Unexpected error computing image metadata",
            extra={"error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return send_error("Internal server error", 500)

    finally:
        if token is not None:
            gcs_uri_context.reset(token)

    return send_response(shape)

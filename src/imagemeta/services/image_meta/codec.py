"""MessagePack codec for requests, responses and metadata records."""

import logging
from typing import Any, Dict

import msgpack
from pydantic import BaseModel, ValidationError

from imagemeta.services.image_meta.exceptions import EncodeError, RequestDecodeError
from imagemeta.services.image_meta.models import ErrorPayload, ImageRequest, ImageShape

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/msgpack"


def _unpack_map(data: bytes) -> Dict[str, Any]:
    try:
        value = msgpack.unpackb(data, raw=False, strict_map_key=True)
    except (msgpack.ExtraData, msgpack.FormatError, msgpack.StackError, ValueError, TypeError) as e:
        raise RequestDecodeError(f"Invalid MessagePack payload: {e}") from e

    if not isinstance(value, dict):
        raise RequestDecodeError(f"Expected a map, got {type(value).__name__}")
    return value


def decode_request(data: bytes) -> ImageRequest:
    """
    Decode an inbound request payload.

    Absent fields decode as empty strings; validation of emptiness is left
    to the caller.

    Args:
        data: Raw MessagePack request body

    Returns:
        Decoded ImageRequest

    Raises:
        RequestDecodeError: If the payload is malformed, truncated, not a map,
            or carries non-string field values
    """
    fields = _unpack_map(data)
    try:
        return ImageRequest.model_validate(
            {key: fields[key] for key in ("filename", "bucket") if key in fields},
            strict=True,
        )
    except ValidationError as e:
        raise RequestDecodeError(f"Invalid request fields: {e}") from e


def encode(value: BaseModel | Dict[str, Any]) -> bytes:
    """
    Encode a payload model or plain mapping to MessagePack.

    Raises:
        EncodeError: If serialization fails
    """
    try:
        fields = value.to_wire() if hasattr(value, "to_wire") else value
        return msgpack.packb(fields, use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        logger.error("Failed to encode payload", extra={"error": str(e)})
        raise EncodeError(f"Failed to encode payload: {e}") from e


def decode_shape(data: bytes) -> ImageShape:
    """Decode a success response or a persisted metadata record."""
    try:
        return ImageShape.model_validate(msgpack.unpackb(data, raw=False))
    except (ValidationError, ValueError, TypeError) as e:
        raise RequestDecodeError(f"Invalid image shape payload: {e}") from e


def decode_error(data: bytes) -> ErrorPayload:
    try:
        return ErrorPayload.model_validate(msgpack.unpackb(data, raw=False))
    except (ValidationError, ValueError, TypeError) as e:
        raise RequestDecodeError(f"Invalid error payload: {e}") from e

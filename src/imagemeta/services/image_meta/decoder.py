"""Image decoding for the allow-listed formats."""

import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from imagemeta.services.image_meta.exceptions import ImageDecodeError

logger = logging.getLogger(__name__)

# Canonical format tokens mapped to Pillow format names
PILLOW_FORMATS = {
    "gif": "GIF",
    "ico": "ICO",
    "jpeg": "JPEG",
    "webp": "WEBP",
    "png": "PNG",
}


def decode_dimensions(content: bytes, format_token: str | None = None) -> Tuple[int, int]:
    """
    Decode image bytes and return their pixel dimensions.

    Pixel data is fully loaded so truncated or corrupt bodies are rejected
    even when the header parses.

    Args:
        content: Complete image file content
        format_token: Canonical format token restricting which decoder is
            tried; None tries every allow-listed format

    Returns:
        Tuple of (width, height)

    Raises:
        ImageDecodeError: If the content does not decode as a supported image
    """
    if format_token is None:
        formats = list(PILLOW_FORMATS.values())
    elif format_token in PILLOW_FORMATS:
        formats = [PILLOW_FORMATS[format_token]]
    else:
        raise ImageDecodeError(f"Unsupported image format: {format_token}")

    try:
        with Image.open(io.BytesIO(content), formats=formats) as image:
            image.load()
            width, height = image.size
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        logger.error(
            "Failed to decode image",
            extra={"image_format": format_token, "size_bytes": len(content), "error": str(e)},
        )
        raise ImageDecodeError(f"Failed to decode image: {e}") from e

    return width, height

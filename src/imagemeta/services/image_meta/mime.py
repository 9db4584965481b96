"""
MIME sniffing and allow-list gate for source images.

Sniffing inspects at most the first 512 bytes of an object and never trusts
the declared content type. Only the types in MIMES_ALLOWED pass the gate.
"""

import logging
from types import MappingProxyType
from typing import BinaryIO, Callable, List, Mapping, Tuple

from imagemeta.services.image_meta.exceptions import ClientInputError, StorageError

logger = logging.getLogger(__name__)

SNIFF_LEN = 512

DEFAULT_MIME = "application/octet-stream"
TEXT_MIME = "text/plain; charset=utf-8"

# Allowed MIME types mapped to their canonical format tokens
MIMES_ALLOWED: Mapping[str, str] = MappingProxyType({
    "image/gif": "gif",
    "image/x-icon": "ico",
    "image/jpeg": "jpeg",
    "image/webp": "webp",
    "image/png": "png",
})

# Exact prefix signatures, checked in order
_PREFIX_SIGNATURES: List[Tuple[bytes, str]] = [
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_MIME),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),  # .cur
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"Rar!\x1a\x07", "application/x-rar-compressed"),
]

# Case-insensitive HTML tags, matched after leading whitespace
_HTML_TAGS = [
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
]

_WHITESPACE = b"\t\n\x0c\r "

_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def _riff_signature(form: bytes) -> Callable[[bytes], bool]:
    def match(data: bytes) -> bool:
        return data[:4] == b"RIFF" and data[8:8 + len(form)] == form
    return match


_RIFF_SIGNATURES: List[Tuple[Callable[[bytes], bool], str]] = [
    (_riff_signature(b"WEBPVP"), "image/webp"),
    (_riff_signature(b"WAVE"), "audio/wave"),
    (_riff_signature(b"AVI "), "video/avi"),
]


def _sniff_text(data: bytes) -> str | None:
    stripped = data.lstrip(_WHITESPACE)
    upper = stripped.upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag):
            rest = stripped[len(tag):len(tag) + 1]
            if tag == b"<!--" or rest in (b" ", b">"):
                return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    return None


def sniff(data: bytes) -> str:
    """
    Determine the MIME type of content from its leading bytes.

    Args:
        data: Leading bytes of the content; only the first 512 are considered

    Returns:
        MIME type string, "application/octet-stream" when nothing matches

    Examples:
        >>> sniff(b"\\x89PNG\\r\\n\\x1a\\n" + bytes(8))
        'image/png'
        >>> sniff(b"%PDF-1.7")
        'application/pdf'
    """
    data = data[:SNIFF_LEN]

    text_mime = _sniff_text(data)
    if text_mime:
        return text_mime

    for prefix, mime_type in _PREFIX_SIGNATURES:
        if data.startswith(prefix):
            return mime_type

    for matches, mime_type in _RIFF_SIGNATURES:
        if matches(data):
            return mime_type

    if data and not any(byte in _BINARY_BYTES for byte in data):
        return TEXT_MIME
    return DEFAULT_MIME


def is_allowed(mime_type: str) -> bool:
    """Check whether a sniffed MIME type is on the allow-list."""
    return mime_type in MIMES_ALLOWED


def format_token(mime_type: str) -> str:
    """Return the canonical format token for an allowed MIME type."""
    return MIMES_ALLOWED[mime_type]


def read_probe(reader: BinaryIO, size: int = SNIFF_LEN, strict: bool = False) -> bytes:
    """
    Read the probe buffer used for MIME sniffing.

    Keeps reading until `size` bytes are collected or the stream ends.

    Args:
        reader: Open binary stream positioned at the start of the object
        size: Number of bytes to collect
        strict: Require exactly `size` bytes; shorter objects are an error

    Returns:
        The probe bytes

    Raises:
        StorageError: If the read fails, the object is empty, or a strict
            probe comes up short
    """
    chunks = []
    remaining = size
    try:
        while remaining > 0:
            chunk = reader.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
    except Exception as e:
        raise StorageError(f"Failed to read probe buffer: {e}") from e

    probe = b"".join(chunks)
    if not probe:
        raise StorageError("Object is empty")
    if strict and len(probe) < size:
        raise StorageError(f"Short probe read: got {len(probe)} of {size} bytes")
    return probe


def check_allowed(probe: bytes) -> str:
    """
    Sniff a probe buffer and enforce the allow-list.

    Returns:
        The sniffed MIME type

    Raises:
        ClientInputError: If the sniffed type is not allowed
    """
    mime_type = sniff(probe)
    if not is_allowed(mime_type):
        logger.warning(
            "Sniffed MIME type not allowed",
            extra={"mime_type": mime_type},
        )
        raise ClientInputError("File type not allowed")
    return mime_type

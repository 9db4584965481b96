"""Custom exceptions for the image metadata pipeline."""


class ImageMetaException(Exception):
    """Base exception for the image metadata pipeline.

    Every subclass carries the message and status code that end up in the
    error response sent back to the caller.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ClientInputError(ImageMetaException):
    """Exception raised for malformed requests or disallowed files."""

    status_code = 400


class RequestDecodeError(ClientInputError):
    """Exception raised when the request payload cannot be decoded."""
    pass


class UpstreamIOError(ImageMetaException):
    """Exception raised when reading or writing upstream data fails."""
    pass


class StorageError(UpstreamIOError):
    """Exception raised when object storage operations fail."""
    pass


class ImageDecodeError(ImageMetaException):
    """Exception raised when image bytes do not parse as a supported format."""
    pass


class EncodeError(ImageMetaException):
    """Exception raised when metadata or response serialization fails."""
    pass

"""
Payload models for the image metadata pipeline.

All payloads travel as MessagePack maps; these models define their fields.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from imagemeta.services.image_meta.classifier import Orientation, Shape, classify


class ImageRequest(BaseModel):
    """Inbound request naming the source object."""

    filename: str = Field("", description="Object key within the bucket")
    bucket: str = Field("", description="Cloud Storage bucket name")

    @property
    def is_complete(self) -> bool:
        """Both fields must be non-empty before any storage access."""
        return bool(self.filename) and bool(self.bucket)

    @property
    def gcs_uri(self) -> str:
        return f"gs://{self.bucket}/{self.filename}"

    def to_wire(self) -> Dict[str, Any]:
        return {"filename": self.filename, "bucket": self.bucket}


class ImageShape(BaseModel):
    """Shape, orientation and pixel dimensions of an image.

    This is both the success response and the persisted metadata record.
    """

    model_config = ConfigDict(frozen=True)

    shape: Shape
    orientation: Orientation
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    @classmethod
    def from_dimensions(cls, width: int, height: int) -> "ImageShape":
        """Classify dimensions and build the resulting shape record."""
        shape, orientation = classify(width, height)
        return cls(shape=shape, orientation=orientation, width=width, height=height)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "shape": self.shape.value,
            "orientation": self.orientation.value,
            "width": self.width,
            "height": self.height,
        }


class ErrorPayload(BaseModel):
    """Failure response body; status_code duplicates the transport status."""

    message: str
    status_code: int

    def to_wire(self) -> Dict[str, Any]:
        return {"message": self.message, "status_code": self.status_code}

"""
Image Metadata Service

Computes shape, orientation and pixel dimensions for an image stored in
Cloud Storage and writes them next to the image as `<filename>.img.meta`.
"""

from imagemeta.services.image_meta.classifier import Orientation, Shape, classify
from imagemeta.services.image_meta.models import ErrorPayload, ImageRequest, ImageShape
from imagemeta.services.image_meta.pipeline import PipelineResponse, compute_image_meta

__all__ = [
    "ErrorPayload",
    "ImageRequest",
    "ImageShape",
    "Orientation",
    "PipelineResponse",
    "Shape",
    "classify",
    "compute_image_meta",
]

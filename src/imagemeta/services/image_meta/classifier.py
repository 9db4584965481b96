"""
Shape classifier for decoded images.

Maps pixel dimensions to a shape and orientation:
- width == height: Square, Symmetrical
- width > height: Rectangle, Landscape
- width < height: Rectangle, Portrait
"""

from enum import Enum
from typing import Tuple


class Shape(str, Enum):
    """Geometric shape of an image."""

    SQUARE = "Square"
    RECTANGLE = "Rectangle"


class Orientation(str, Enum):
    """Orientation of an image."""

    SYMMETRICAL = "Symmetrical"
    LANDSCAPE = "Landscape"
    PORTRAIT = "Portrait"


def classify(width: int, height: int) -> Tuple[Shape, Orientation]:
    """
    Classify image dimensions into a shape and orientation.

    Args:
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Tuple of (Shape, Orientation)

    Examples:
        >>> classify(100, 100)
        (<Shape.SQUARE: 'Square'>, <Orientation.SYMMETRICAL: 'Symmetrical'>)
        >>> classify(800, 600)
        (<Shape.RECTANGLE: 'Rectangle'>, <Orientation.LANDSCAPE: 'Landscape'>)
    """
    if width == height:
        return Shape.SQUARE, Orientation.SYMMETRICAL
    if width > height:
        return Shape.RECTANGLE, Orientation.LANDSCAPE
    return Shape.RECTANGLE, Orientation.PORTRAIT

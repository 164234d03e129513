"""
Exception classes for the panorama preparation core.

Recoverable conditions (too few images, an undecodable file) are separated
from contract violations, which signal a caller bug and should not be caught
by pipeline code.
"""


class PanoramaError(Exception):
    """Base class for all poc_panorama errors."""


class TooFewImagesError(PanoramaError, ValueError):
    """
    Not enough images to build a panorama.

    Raised whenever a count-sensitive operation finds fewer images than
    required (at least two by default).

    Attributes:
        count: Number of images actually present.
        required: Minimum number of images required.
    """

    def __init__(self, count: int, required: int = 2):
        self.count = count
        self.required = required
        super().__init__(
            f"Need more images: have {count}, need at least {required}"
        )


class ImageDecodeError(PanoramaError, IOError):
    """
    An image file could not be decoded into a pixel buffer.

    Attributes:
        path: Path of the offending image.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Can't read image {path}")


class ContractViolationError(PanoramaError, RuntimeError):
    """Caller broke an input contract (e.g. metadata not time-ordered)."""

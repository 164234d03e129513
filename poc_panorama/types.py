"""
Unit type annotations for the panorama preparation core.

NewType aliases document the physical unit of every numeric parameter in a
signature. They cost nothing at runtime; mypy uses them to flag a degree value
passed where radians are expected.

Angles that cross module boundaries must also carry an explicit AngleUnits tag
(see GimbalOrientation), because NewType disappears at runtime.

Usage Example:
    >>> from poc_panorama.types import Degrees, Meters
    >>>
    >>> def horizontal_fov(sensor_width: Meters, focal_length: Meters) -> Degrees:
    ...     pass
"""

from enum import Enum
from typing import NewType

# Angular units
Degrees = NewType('Degrees', float)
"""Angle in degrees (e.g., gimbal pitch/roll/yaw as reported by the aircraft)"""

Radians = NewType('Radians', float)
"""Angle in radians (e.g., rotation matrix construction, field of view)"""

# Physical units
Meters = NewType('Meters', float)
"""Physical length in meters (e.g., focal length, sensor width)"""

Seconds = NewType('Seconds', int)
"""Unix timestamp in whole seconds (image capture time)"""

# Image coordinate units
Pixels = NewType('Pixels', int)
"""Image dimensions in pixels (e.g., width, height)"""

PixelsFloat = NewType('PixelsFloat', float)
"""Floating-point pixel quantities (e.g., focal length in pixels, principal point)"""

# Dimensionless quantities
Unitless = NewType('Unitless', float)
"""Dimensionless scalar (e.g., distortion coefficients, scale factors)"""


class AngleUnits(str, Enum):
    """Unit tag carried alongside angle values."""

    DEGREES = "degrees"
    RADIANS = "radians"

"""Pinhole camera model with optional calibration override.

A Camera is described by its physical geometry (focal length and sensor size
in meters, sensor size in pixels, principal point) and its lens distortion.
The intrinsic matrix K is either derived from that geometry or taken from
a calibration matrix supplied at construction time; when a calibration
matrix is present it always wins.

Coordinate System Conventions:
    Camera Frame (Right-Handed, standard computer vision):
      - Origin: Camera optical center
      - X-axis: Right (in image)
      - Y-axis: Down (in image)
      - Z-axis: Forward (along optical axis, into the scene)

    Image Frame:
      - Origin: Top-left corner
      - u-axis: Right (width)
      - v-axis: Down (height)
      - Units: Pixels
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from poc_panorama.distortion import Distortion
from poc_panorama.types import AngleUnits, Degrees, Meters, PixelsFloat, Radians, Unitless


def _validate_pair(value: Tuple[float, float], name: str) -> None:
    if len(value) != 2:
        raise ValueError(f"{name} must be an (x, y) pair, got {len(value)} elements")


class IntrinsicsSource(str, Enum):
    """Where a Camera's intrinsic matrix comes from."""

    DERIVED = "derived"
    CALIBRATION = "calibration"


@dataclass(frozen=True)
class CalibrationIntrinsics:
    """Immutable 3x3 intrinsic matrix obtained from an external calibration.

    The matrix is stored as bytes so the dataclass stays hashable and the
    caller's array can never be mutated through this object.
    """

    _matrix_data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        """Validate the stored matrix."""
        K = self.matrix
        if not np.all(np.isfinite(K)):
            raise ValueError("calibration intrinsic matrix contains NaN or Infinity values")

    @property
    def matrix(self) -> np.ndarray:
        """Read-only view of the calibration matrix."""
        arr = np.frombuffer(self._matrix_data, dtype=np.float64).reshape(3, 3)
        arr.flags.writeable = False
        return arr

    @classmethod
    def create(cls, matrix: np.ndarray) -> CalibrationIntrinsics:
        """Create from a 3x3 array.

        Raises:
            ValueError: If the matrix is not 3x3 or contains non-finite values.
        """
        K = np.asarray(matrix, dtype=np.float64)
        if K.shape != (3, 3):
            raise ValueError(f"calibration intrinsic matrix must be (3, 3), got shape {K.shape}")
        return cls(_matrix_data=K.tobytes())


@dataclass(frozen=True)
class Camera:
    """Camera intrinsics, distortion and field of view.

    Attributes:
        focal_length_meters: Focal length in meters.
        sensor_dimensions_meters: Sensor (width, height) in meters.
        sensor_dimensions_pixels: Sensor (width, height) in pixels.
        principal_point: Principal point (x, y) in pixels.
        distortion: Lens distortion coefficients.
        calibration_intrinsics: Optional calibration matrix overriding the
            geometrically derived K.

    Sensor dimensions in meters must be non-zero; this is a precondition
    and is not checked here. A degenerate sensor yields non-finite focal
    lengths rather than an exception.
    """

    focal_length_meters: Meters
    sensor_dimensions_meters: Tuple[Meters, Meters]
    sensor_dimensions_pixels: Tuple[float, float]
    principal_point: Tuple[PixelsFloat, PixelsFloat]
    distortion: Distortion = field(default_factory=Distortion)
    calibration_intrinsics: Optional[CalibrationIntrinsics] = None

    def __post_init__(self) -> None:
        """Normalize (x, y) pairs to float tuples."""
        for name in ("sensor_dimensions_meters", "sensor_dimensions_pixels", "principal_point"):
            value = tuple(float(v) for v in getattr(self, name))
            _validate_pair(value, name)
            object.__setattr__(self, name, value)

    @property
    def intrinsics_source(self) -> IntrinsicsSource:
        """Which variant K() dispatches on."""
        if self.calibration_intrinsics is not None:
            return IntrinsicsSource.CALIBRATION
        return IntrinsicsSource.DERIVED

    def with_calibration(self, matrix: np.ndarray) -> Camera:
        """Return a copy of this camera carrying a calibration intrinsic matrix."""
        return dataclasses.replace(
            self, calibration_intrinsics=CalibrationIntrinsics.create(matrix)
        )

    def focal_length_pixels(self) -> Tuple[PixelsFloat, PixelsFloat]:
        """
        Focal length in pixels, computed independently per axis.

        fx = f_m * sensor_px.x / sensor_m.x
        fy = f_m * sensor_px.y / sensor_m.y
        """
        pixels = np.asarray(self.sensor_dimensions_pixels, dtype=np.float64)
        meters = np.asarray(self.sensor_dimensions_meters, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            fx, fy = self.focal_length_meters * pixels / meters
        return PixelsFloat(float(fx)), PixelsFloat(float(fy))

    def focal_length_pixels_aspect_ratio(self) -> Unitless:
        """Ratio fy / fx of the pixel focal lengths."""
        fx, fy = self.focal_length_pixels()
        return Unitless(fy / fx)

    def fov(self, units: AngleUnits = AngleUnits.RADIANS) -> Tuple[float, float]:
        """
        Horizontal and vertical fields of view.

        fov_axis = 2 * atan(sensor_m_axis / (2 * f_m))

        Args:
            units: AngleUnits.RADIANS (default) or AngleUnits.DEGREES.

        Returns:
            (horizontal, vertical) field of view in the requested units.
        """
        x = 2 * math.atan(self.sensor_dimensions_meters[0] / (2 * self.focal_length_meters))
        y = 2 * math.atan(self.sensor_dimensions_meters[1] / (2 * self.focal_length_meters))

        if AngleUnits(units) == AngleUnits.DEGREES:
            return Degrees(math.degrees(x)), Degrees(math.degrees(y))
        return Radians(x), Radians(y)

    def K(self, scale: float = 1.0) -> np.ndarray:
        """
        3x3 intrinsic matrix, scaled for images resampled by `scale`.

        If calibration intrinsics were supplied, a copy of that matrix is
        returned with fx, fy, cx and cy multiplied by `scale`. Otherwise a
        pinhole matrix is built from focal_length_pixels() and the principal
        point.

        Args:
            scale: Image scale factor (1.0 = full resolution).

        Returns:
            K (3x3): New float64 array; callers may modify it freely.
        """
        if self.calibration_intrinsics is not None:
            K = np.array(self.calibration_intrinsics.matrix, dtype=np.float64, copy=True)
            K[0, 0] *= scale
            K[0, 2] *= scale
            K[1, 1] *= scale
            K[1, 2] *= scale
            return K

        fx, fy = self.focal_length_pixels()
        cx, cy = self.principal_point
        return np.array([
            [fx * scale, 0.0, cx * scale],
            [0.0, fy * scale, cy * scale],
            [0.0, 0.0, 1.0]
        ], dtype=np.float64)

    def D(self) -> np.ndarray:
        """Distortion coefficient column in OpenCV order [k1, k2, p1, p2, k3]."""
        return self.distortion.vector()

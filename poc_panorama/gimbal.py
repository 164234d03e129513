"""Gimbal orientation (pitch, roll, yaw) with an explicit angle unit tag."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from poc_panorama.types import AngleUnits

if TYPE_CHECKING:
    from poc_panorama.geo_image import GeoImage


@dataclass(frozen=True)
class GimbalOrientation:
    """
    Camera gimbal attitude at capture time.

    All three angles share the single `units` tag; an orientation never mixes
    degrees and radians.

    Sign Convention:
      - Positive pitch = camera pointing downward
      - Roll is applied about the optical (Z) axis
      - Yaw is applied about the vertical (Y) axis

    Attributes:
        pitch: Pitch angle.
        roll: Roll angle.
        yaw: Yaw angle.
        units: Unit of all three angles.
    """

    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0
    units: AngleUnits = AngleUnits.DEGREES

    def __post_init__(self) -> None:
        object.__setattr__(self, "units", AngleUnits(self.units))

    @classmethod
    def from_geo_image(cls, record: GeoImage) -> GimbalOrientation:
        """Build the orientation of a metadata record (angles in degrees)."""
        return cls(
            pitch=record.camera_pitch_deg,
            roll=record.camera_roll_deg,
            yaw=record.camera_yaw_deg,
            units=AngleUnits.DEGREES,
        )

    def convert_to(self, units: AngleUnits) -> GimbalOrientation:
        """
        Return this orientation expressed in `units`.

        Converting to the current unit returns an equivalent orientation
        unchanged, so the call is idempotent.
        """
        units = AngleUnits(units)
        if units == self.units:
            return self

        convert = math.radians if units == AngleUnits.RADIANS else math.degrees
        return GimbalOrientation(
            pitch=convert(self.pitch),
            roll=convert(self.roll),
            yaw=convert(self.yaw),
            units=units,
        )

    def rotation_matrix(self) -> np.ndarray:
        """
        3x3 camera rotation built from the gimbal angles.

        R = Rz(roll) @ Ry(yaw) @ Rx(-pitch)

        Pitch is negated so that positive pitch tilts the optical axis
        downward. Angles are always converted to radians first.

        Returns:
            R (3x3): Proper rotation matrix (R @ R.T = I, det(R) = 1).
        """
        rad = self.convert_to(AngleUnits.RADIANS)
        pitch = -rad.pitch
        yaw = rad.yaw
        roll = rad.roll

        # Pitch (rotation around X-axis)
        Rx = np.array([
            [1, 0, 0],
            [0, math.cos(pitch), -math.sin(pitch)],
            [0, math.sin(pitch), math.cos(pitch)]
        ])

        # Yaw (rotation around Y-axis)
        Ry = np.array([
            [math.cos(yaw), 0, math.sin(yaw)],
            [0, 1, 0],
            [-math.sin(yaw), 0, math.cos(yaw)]
        ])

        # Roll (rotation around Z-axis)
        Rz = np.array([
            [math.cos(roll), -math.sin(roll), 0],
            [math.sin(roll), math.cos(roll), 0],
            [0, 0, 1]
        ])

        return Rz @ Ry @ Rx

    def to_string(self, compact: bool = False) -> str:
        """Human-readable representation for logs and CLI output."""
        suffix = "deg" if self.units == AngleUnits.DEGREES else "rad"
        if compact:
            return f"({self.pitch:.2f}, {self.roll:.2f}, {self.yaw:.2f}) {suffix}"
        return (
            f"GimbalOrientation(pitch={self.pitch:.4f} {suffix}, "
            f"roll={self.roll:.4f} {suffix}, yaw={self.yaw:.4f} {suffix})"
        )

    def __str__(self) -> str:
        return self.to_string()

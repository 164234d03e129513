"""Lens distortion coefficients in the OpenCV model."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from poc_panorama.types import Unitless


@dataclass(frozen=True)
class Distortion:
    """Lens distortion coefficients using the OpenCV distortion model.

    - Radial distortion (barrel/pincushion): k1, k2, k3
    - Tangential distortion (decentering): p1, p2

    The field order follows OpenCV, so positional construction reads
    ``Distortion(k1, k2, p1, p2, k3)``.

    Attributes:
        k1: First radial distortion coefficient (most significant).
        k2: Second radial distortion coefficient.
        p1: First tangential distortion coefficient.
        p2: Second tangential distortion coefficient.
        k3: Third radial distortion coefficient.
    """

    k1: Unitless = 0.0  # type: ignore[assignment]
    k2: Unitless = 0.0  # type: ignore[assignment]
    p1: Unitless = 0.0  # type: ignore[assignment]
    p2: Unitless = 0.0  # type: ignore[assignment]
    k3: Unitless = 0.0  # type: ignore[assignment]

    def vector(self) -> np.ndarray:
        """Coefficients as a (5, 1) column in OpenCV order [k1, k2, p1, p2, k3]."""
        return np.array(
            [[self.k1], [self.k2], [self.p1], [self.p2], [self.k3]], dtype=np.float64
        )

    def vector_equals(self, other: np.ndarray) -> bool:
        """Exact comparison against an external coefficient vector in OpenCV order.

        Args:
            other: Array-like with 5 elements, any shape (row, column or flat).

        Returns:
            True if every element matches exactly.
        """
        other_flat = np.asarray(other, dtype=np.float64).ravel()
        if other_flat.size != 5:
            return False
        return bool(np.array_equal(self.vector().ravel(), other_flat))

    def is_zero(self) -> bool:
        """Check if all coefficients are effectively zero."""
        return np.allclose(self.vector(), 0.0)

    @classmethod
    def from_vector(cls, coeffs: np.ndarray) -> Distortion:
        """Create from a 5-element vector [k1, k2, p1, p2, k3].

        Raises:
            ValueError: If the vector does not have exactly 5 elements.
        """
        flat = np.asarray(coeffs, dtype=np.float64).ravel()
        if flat.size != 5:
            raise ValueError(f"Expected 5 distortion coefficients, got {flat.size}")
        return cls(
            k1=Unitless(float(flat[0])),
            k2=Unitless(float(flat[1])),
            p1=Unitless(float(flat[2])),
            p2=Unitless(float(flat[3])),
            k3=Unitless(float(flat[4])),
        )

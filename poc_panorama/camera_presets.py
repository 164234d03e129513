"""
Named camera presets for supported aerial camera hardware.

Each preset is a zero-argument factory returning a fully populated Camera.
Adding hardware means adding a factory and one CAMERA_PRESETS entry; no
existing logic changes.
"""

from types import MappingProxyType
from typing import Callable, List

from poc_panorama.camera import Camera
from poc_panorama.distortion import Distortion
from poc_panorama.types import Meters, PixelsFloat, Unitless

# =============================================================================
# PARROT ANAFI
# =============================================================================
# - Sensor: 1/2.4" CMOS, 21 MP
# - Resolution: 5344x4016 (4:3)
# - Focal length: 4.04 mm
# - Distortion: calibrated on the reference panorama fixtures (OpenCV model)
# =============================================================================


def parrot_anafi() -> Camera:
    """Parrot Anafi main camera."""
    return Camera(
        focal_length_meters=Meters(4.04e-3),
        sensor_dimensions_meters=(Meters(7.22e-3), Meters(5.50e-3)),
        sensor_dimensions_pixels=(5344, 4016),
        principal_point=(PixelsFloat(2672.0), PixelsFloat(2008.0)),
        distortion=Distortion(
            k1=Unitless(0.0284),
            k2=Unitless(-0.0272),
            p1=Unitless(-0.00247),
            p2=Unitless(0.00613),
            k3=Unitless(0.0),
        ),
    )


# =============================================================================
# DJI 1" SENSOR CAMERAS (distortion not calibrated)
# =============================================================================
# - Sensor: 1" CMOS, 13.2 x 8.8 mm, 20 MP
# - Resolution: 5472x3648 (3:2)
# =============================================================================


def dji_mavic_2_pro() -> Camera:
    """DJI Mavic 2 Pro (Hasselblad L1D-20c, 10.26 mm)."""
    return Camera(
        focal_length_meters=Meters(10.26e-3),
        sensor_dimensions_meters=(Meters(13.2e-3), Meters(8.8e-3)),
        sensor_dimensions_pixels=(5472, 3648),
        principal_point=(PixelsFloat(2736.0), PixelsFloat(1824.0)),
        distortion=Distortion(),
    )


def dji_phantom_4_pro() -> Camera:
    """DJI Phantom 4 Pro (FC6310, 8.8 mm)."""
    return Camera(
        focal_length_meters=Meters(8.8e-3),
        sensor_dimensions_meters=(Meters(13.2e-3), Meters(8.8e-3)),
        sensor_dimensions_pixels=(5472, 3648),
        principal_point=(PixelsFloat(2736.0), PixelsFloat(1824.0)),
        distortion=Distortion(),
    )


CAMERA_PRESETS = MappingProxyType({
    "parrot_anafi": parrot_anafi,
    "dji_mavic_2_pro": dji_mavic_2_pro,
    "dji_phantom_4_pro": dji_phantom_4_pro,
})


def list_camera_presets() -> List[str]:
    """Sorted names of all available camera presets."""
    return sorted(CAMERA_PRESETS)


def get_camera_preset(name: str) -> Camera:
    """
    Build the camera for a named preset.

    Args:
        name: Preset name (e.g., "parrot_anafi")

    Returns:
        New Camera instance

    Raises:
        KeyError: If no preset with that name exists
    """
    factory: Callable[[], Camera] = CAMERA_PRESETS.get(name)
    if factory is None:
        raise KeyError(
            f"Unknown camera preset '{name}'. "
            f"Available presets: {', '.join(list_camera_presets())}"
        )
    return factory()

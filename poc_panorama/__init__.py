"""
Panorama Preparation Package.

This package prepares a time-ordered sequence of geotagged, gimbal-stabilized
photographs for panorama stitching. It provides:
    - Camera: pinhole camera model (intrinsics, distortion, field of view)
      with an optional calibration-matrix override
    - Named camera presets for supported hardware
    - GimbalOrientation: unit-tagged pitch/roll/yaw and the camera rotation
    - SourceImages: index-aligned stack of orientations, pixel buffers and
      sizes with load/filter/resize/scale operations

Example Usage:
    >>> from poc_panorama import SourceImages, get_camera_preset, load_panorama
    >>>
    >>> camera = get_camera_preset("parrot_anafi")
    >>> stack = SourceImages(load_panorama("panorama.yaml"))
    >>> stack.scale(0.25)
    >>> K = camera.K(0.25)
    >>> D = camera.D()
"""

from poc_panorama.camera import CalibrationIntrinsics, Camera, IntrinsicsSource
from poc_panorama.camera_presets import (
    CAMERA_PRESETS,
    get_camera_preset,
    list_camera_presets,
)
from poc_panorama.distortion import Distortion
from poc_panorama.exceptions import (
    ContractViolationError,
    ImageDecodeError,
    PanoramaError,
    TooFewImagesError,
)
from poc_panorama.geo_image import GeoImage, Panorama
from poc_panorama.geo_image_io import load_panorama, save_panorama
from poc_panorama.gimbal import GimbalOrientation
from poc_panorama.source_images import SourceImage, SourceImages
from poc_panorama.stack_config import (
    ImreadMode,
    Interpolation,
    SourceImagesConfig,
    get_default_config,
)
from poc_panorama.types import AngleUnits

# Define public API
__all__ = [
    # Camera model
    'Camera',
    'CalibrationIntrinsics',
    'IntrinsicsSource',
    'Distortion',
    'CAMERA_PRESETS',
    'get_camera_preset',
    'list_camera_presets',

    # Orientation
    'AngleUnits',
    'GimbalOrientation',

    # Metadata
    'GeoImage',
    'Panorama',
    'load_panorama',
    'save_panorama',

    # Source image stack
    'SourceImage',
    'SourceImages',
    'SourceImagesConfig',
    'Interpolation',
    'ImreadMode',
    'get_default_config',

    # Errors
    'PanoramaError',
    'TooFewImagesError',
    'ImageDecodeError',
    'ContractViolationError',
]

# Package metadata
__version__ = '0.1.0'
__description__ = 'Camera model and source image stack for panorama stitching'

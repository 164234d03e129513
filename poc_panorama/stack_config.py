"""
Configuration for source image loading and normalization.

Supports YAML files with a 'source_images' section as well as plain dicts.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import cv2
import yaml

from poc_panorama.camera_presets import CAMERA_PRESETS

logger = logging.getLogger(__name__)

MIN_IMAGE_COUNT = 2


class Interpolation(str, Enum):
    """Resampling policy used when scaling source images."""

    NEAREST = "nearest"
    LINEAR = "linear"
    CUBIC = "cubic"
    AREA = "area"
    LANCZOS4 = "lanczos4"

    @property
    def cv2_flag(self) -> int:
        """Matching OpenCV interpolation flag."""
        return {
            Interpolation.NEAREST: cv2.INTER_NEAREST,
            Interpolation.LINEAR: cv2.INTER_LINEAR,
            Interpolation.CUBIC: cv2.INTER_CUBIC,
            Interpolation.AREA: cv2.INTER_AREA,
            Interpolation.LANCZOS4: cv2.INTER_LANCZOS4,
        }[self]


class ImreadMode(str, Enum):
    """How image files are decoded."""

    COLOR = "color"
    GRAYSCALE = "grayscale"
    UNCHANGED = "unchanged"

    @property
    def cv2_flag(self) -> int:
        """Matching OpenCV imread flag."""
        return {
            ImreadMode.COLOR: cv2.IMREAD_COLOR,
            ImreadMode.GRAYSCALE: cv2.IMREAD_GRAYSCALE,
            ImreadMode.UNCHANGED: cv2.IMREAD_UNCHANGED,
        }[self]


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = [m.value for m in enum_cls]
        raise ValueError(
            f"Invalid {field_name} '{value}'. Must be one of: {', '.join(valid)}"
        ) from None


@dataclass
class SourceImagesConfig:
    """Configuration for a SourceImages stack.

    Attributes:
        min_image_count: Minimum number of images required for stitching (>= 2)
        interpolation: Default resampling policy for scale()
        imread_mode: Decode mode passed to cv2.imread
        work_scale: Optional scale applied after loading (e.g. by the CLI)
        camera_preset: Optional name of the camera preset used for the flight
    """
    min_image_count: int = MIN_IMAGE_COUNT
    interpolation: Interpolation = Interpolation.LINEAR
    imread_mode: ImreadMode = ImreadMode.COLOR
    work_scale: Optional[float] = None
    camera_preset: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        self.interpolation = _parse_enum(Interpolation, self.interpolation, 'interpolation')
        self.imread_mode = _parse_enum(ImreadMode, self.imread_mode, 'imread_mode')

        if isinstance(self.min_image_count, bool) or not isinstance(self.min_image_count, int):
            raise ValueError(
                f"min_image_count must be an integer, got {type(self.min_image_count).__name__}"
            )
        if self.min_image_count < MIN_IMAGE_COUNT:
            raise ValueError(
                f"min_image_count must be at least {MIN_IMAGE_COUNT}, got {self.min_image_count}"
            )

        if self.work_scale is not None:
            self.work_scale = float(self.work_scale)
            if self.work_scale <= 0:
                raise ValueError(f"work_scale must be positive, got {self.work_scale}")

        if self.camera_preset is not None and self.camera_preset not in CAMERA_PRESETS:
            raise ValueError(
                f"Invalid camera_preset '{self.camera_preset}'. "
                f"Must be one of: {', '.join(sorted(CAMERA_PRESETS))}"
            )

    @classmethod
    def from_yaml(cls, path: str) -> 'SourceImagesConfig':
        """Load configuration from YAML file.

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If configuration file is malformed or contains invalid values

        Example:
            >>> config = SourceImagesConfig.from_yaml('config/source_images.yaml')
            >>> print(config.interpolation)
            Interpolation.LINEAR
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(
                f"Configuration file is empty: {path}\n"
                f"Expected a 'source_images' section"
            )

        if not isinstance(data, dict) or 'source_images' not in data:
            raise ValueError(
                f"Configuration file missing 'source_images' section: {path}\n"
                f"Expected structure: source_images:\n  min_image_count: ...\n  ..."
            )

        return cls.from_dict(data['source_images'] or {})

    @classmethod
    def from_dict(cls, config: dict) -> 'SourceImagesConfig':
        """Create configuration from dictionary.

        Unknown keys are ignored with a warning.

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        known = {'min_image_count', 'interpolation', 'imread_mode', 'work_scale', 'camera_preset'}
        unknown = sorted(set(config) - known)
        if unknown:
            logger.warning(f"Ignoring unknown source_images config keys: {', '.join(unknown)}")

        return cls(**{key: value for key, value in config.items() if key in known})

    def to_dict(self) -> dict:
        """Convert configuration to dictionary suitable for YAML serialization."""
        result = {
            'min_image_count': self.min_image_count,
            'interpolation': self.interpolation.value,
            'imread_mode': self.imread_mode.value,
        }
        if self.work_scale is not None:
            result['work_scale'] = self.work_scale
        if self.camera_preset is not None:
            result['camera_preset'] = self.camera_preset
        return result

    def save_to_yaml(self, path: str) -> None:
        """Save configuration to YAML file.

        Raises:
            IOError: If file cannot be written
        """
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        output = {'source_images': self.to_dict()}

        try:
            with open(config_path, 'w') as f:
                yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False)
        except IOError as e:
            raise IOError(f"Failed to write configuration file: {e}") from e


def get_default_config() -> SourceImagesConfig:
    """Return the default configuration (two-image minimum, linear resampling)."""
    return SourceImagesConfig()

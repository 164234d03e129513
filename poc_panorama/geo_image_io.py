#!/usr/bin/env python3
"""
YAML I/O for panorama metadata manifests.

A manifest lists the geotagged images of one panorama together with the
gimbal attitude recorded at capture time. It stands in for the geotagging
step that normally extracts these values from EXIF.

YAML Schema:

    panorama:
      images:
        - path: "P5050970.JPG"            # relative to the manifest directory
          timestamp: "2019-05-05T09:12:40Z"  # ISO 8601 or Unix seconds
          pitch: 30.0                      # degrees, positive = down
          roll: 0.0                        # degrees
          yaw: 12.5                        # degrees
          latitude: -35.2809               # optional
          longitude: 149.1300              # optional
          altitude: 112.0                  # optional, meters

Usage Example:
    >>> from poc_panorama.geo_image_io import load_panorama
    >>> panorama = load_panorama("flights/aus_1/panorama.yaml")
    >>> print(f"Loaded {len(panorama)} images")
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from poc_panorama.geo_image import GeoImage, Panorama
from poc_panorama.types import Degrees, Meters, Seconds

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ['path', 'timestamp', 'pitch', 'roll', 'yaw']
_OPTIONAL_FIELDS = {'latitude': 'latitude', 'longitude': 'longitude', 'altitude': 'altitude_m'}


# ============================================================================
# Serialization Helper Functions
# ============================================================================

def _parse_timestamp(value: Any) -> Seconds:
    """
    Convert a manifest timestamp to Unix seconds.

    Accepts integer seconds, ISO 8601 strings, or datetime objects (which
    yaml.safe_load produces for unquoted ISO timestamps). Naive datetimes are
    interpreted as UTC.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return Seconds(int(value))

    if isinstance(value, datetime):
        timestamp = value
    elif isinstance(value, str):
        timestamp = datetime.fromisoformat(value.replace('Z', '+00:00'))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return Seconds(int(timestamp.timestamp()))


def _deserialize_geo_image(data: Dict[str, Any], base_dir: Path) -> GeoImage:
    """
    Convert a manifest entry to a GeoImage.

    Raises:
        ValueError: If required fields are missing or invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Image entry must be a mapping, got {type(data).__name__}")

    missing_fields = [f for f in _REQUIRED_FIELDS if f not in data]
    if missing_fields:
        raise ValueError(
            f"Image entry missing required fields: {', '.join(missing_fields)}"
        )

    path = Path(str(data['path']))
    if not path.is_absolute():
        path = base_dir / path

    optional: Dict[str, Optional[float]] = {}
    try:
        for key, attr in _OPTIONAL_FIELDS.items():
            optional[attr] = float(data[key]) if data.get(key) is not None else None

        return GeoImage(
            path=str(path),
            created_timestamp_sec=_parse_timestamp(data['timestamp']),
            camera_pitch_deg=Degrees(float(data['pitch'])),
            camera_roll_deg=Degrees(float(data['roll'])),
            camera_yaw_deg=Degrees(float(data['yaw'])),
            latitude=optional['latitude'],
            longitude=optional['longitude'],
            altitude_m=Meters(optional['altitude_m']) if optional['altitude_m'] is not None else None,
        )
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid image entry data: {e}") from e


def _serialize_geo_image(image: GeoImage) -> Dict[str, Any]:
    """Convert a GeoImage to a manifest entry."""
    result: Dict[str, Any] = {
        'path': image.path,
        'timestamp': datetime.fromtimestamp(
            image.created_timestamp_sec, tz=timezone.utc
        ).isoformat(),
        'pitch': float(image.camera_pitch_deg),
        'roll': float(image.camera_roll_deg),
        'yaw': float(image.camera_yaw_deg),
    }
    for key, attr in _OPTIONAL_FIELDS.items():
        value = getattr(image, attr)
        if value is not None:
            result[key] = float(value)
    return result


# ============================================================================
# Public API
# ============================================================================

def load_panorama(yaml_path: Union[str, Path], sort: bool = False) -> Panorama:
    """
    Load a Panorama from a YAML manifest.

    Args:
        yaml_path: Path to the manifest
        sort: Order records by capture time instead of keeping file order

    Returns:
        Panorama instance

    Raises:
        FileNotFoundError: If the manifest does not exist
        ValueError: If the manifest structure is invalid
    """
    yaml_path_obj = Path(yaml_path)

    if not yaml_path_obj.exists():
        raise FileNotFoundError(f"Manifest file not found: {yaml_path}")

    try:
        with open(yaml_path_obj, 'r') as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML file '{yaml_path}': {e}") from e

    if not yaml_data:
        raise ValueError(f"YAML file is empty: {yaml_path}")

    if not isinstance(yaml_data, dict) or 'panorama' not in yaml_data:
        raise ValueError(
            "YAML file missing 'panorama' section. "
            "Expected structure: panorama:\n  images: [...]"
        )

    section = yaml_data['panorama'] or {}
    images_data = section.get('images') if isinstance(section, dict) else None
    if not isinstance(images_data, list):
        raise ValueError("'images' section must be a list")

    base_dir = yaml_path_obj.parent
    images = []
    for i, entry in enumerate(images_data):
        try:
            images.append(_deserialize_geo_image(entry, base_dir))
        except ValueError as e:
            raise ValueError(f"Failed to parse image {i}: {e}") from e

    panorama = Panorama.sorted(images) if sort else Panorama(images)
    logger.info(f"Loaded {len(panorama)} images from {yaml_path}")
    return panorama


def save_panorama(panorama: Panorama, yaml_path: Union[str, Path]) -> None:
    """
    Save a Panorama to a YAML manifest.

    Image paths are written as stored (absolute paths stay absolute).

    Raises:
        IOError: If the file cannot be written
    """
    yaml_path_obj = Path(yaml_path)
    yaml_path_obj.parent.mkdir(parents=True, exist_ok=True)

    output = {'panorama': {'images': [_serialize_geo_image(image) for image in panorama]}}

    try:
        with open(yaml_path_obj, 'w') as f:
            yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise IOError(f"Failed to write manifest file: {e}") from e

    logger.info(f"Saved {len(panorama)} images to {yaml_path}")

"""
Geotagged image metadata records.

GeoImage holds the per-photograph metadata produced by the geotagging step
(EXIF extraction happens upstream). Panorama is the ordered list of records
that a SourceImages stack is built from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, overload

from poc_panorama.types import Degrees, Meters, Seconds


@dataclass(frozen=True)
class GeoImage:
    """Metadata of a single geotagged photograph.

    Attributes:
        path: Path to the image file.
        created_timestamp_sec: Capture time (Unix seconds).
        camera_pitch_deg: Gimbal pitch in degrees (positive = down).
        camera_roll_deg: Gimbal roll in degrees.
        camera_yaw_deg: Gimbal yaw in degrees.
        latitude: Optional capture latitude in decimal degrees.
        longitude: Optional capture longitude in decimal degrees.
        altitude_m: Optional capture altitude in meters.
    """

    path: str
    created_timestamp_sec: Seconds
    camera_pitch_deg: Degrees
    camera_roll_deg: Degrees
    camera_yaw_deg: Degrees
    latitude: Optional[Degrees] = None
    longitude: Optional[Degrees] = None
    altitude_m: Optional[Meters] = None


class Panorama:
    """
    Immutable, ordered collection of GeoImage records.

    Records are kept in the order given. Use Panorama.sorted() to build a
    time-ordered panorama from records in arbitrary order.
    """

    def __init__(self, images: Iterable[GeoImage] = ()):
        self._images: Tuple[GeoImage, ...] = tuple(images)

    @classmethod
    def sorted(cls, images: Iterable[GeoImage]) -> Panorama:
        """Panorama ordered by capture time; ties keep their input order."""
        return cls(sorted(images, key=lambda image: image.created_timestamp_sec))

    @property
    def images(self) -> Tuple[GeoImage, ...]:
        return self._images

    def is_time_ordered(self) -> bool:
        """True if capture timestamps are non-decreasing."""
        return all(
            prev.created_timestamp_sec <= cur.created_timestamp_sec
            for prev, cur in zip(self._images, self._images[1:])
        )

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[GeoImage]:
        return iter(self._images)

    @overload
    def __getitem__(self, index: int) -> GeoImage: ...

    @overload
    def __getitem__(self, index: slice) -> Panorama: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Panorama(self._images[index])
        return self._images[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Panorama):
            return NotImplemented
        return self._images == other._images

    def __hash__(self) -> int:
        return hash(self._images)

    def __repr__(self) -> str:
        return f"Panorama({len(self._images)} images)"

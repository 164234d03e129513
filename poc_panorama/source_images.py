"""
Source image stack for panorama stitching.

SourceImages turns a time-ordered Panorama of GeoImage records into three
index-aligned sequences ready for the stitching engine:

    gimbal_orientations[i]  GimbalOrientation of photograph i
    images[i]               decoded pixel buffer (HxW or HxWxC numpy array)
    sizes[i]                (width, height) of images[i]

The three sequences are projections of a single list of SourceImage slots, so
they always have the same length and index i always refers to the same
photograph. Every mutation replaces that list through one commit point, and
each operation validates its input before committing; a failing operation
leaves the stack unchanged.
"""

import logging
import operator
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from poc_panorama.exceptions import ContractViolationError, ImageDecodeError, TooFewImagesError
from poc_panorama.geo_image import Panorama
from poc_panorama.gimbal import GimbalOrientation
from poc_panorama.stack_config import Interpolation, SourceImagesConfig, get_default_config
from poc_panorama.types import Pixels

logger = logging.getLogger(__name__)

Size = Tuple[Pixels, Pixels]


@dataclass(frozen=True, eq=False)
class SourceImage:
    """One photograph of the stack.

    Attributes:
        orientation: Gimbal orientation at capture time.
        image: Decoded pixel buffer, or None for an empty slot.
        size: (width, height) of the pixel buffer; (0, 0) for an empty slot.
    """

    orientation: GimbalOrientation
    image: Optional[np.ndarray]
    size: Size

    @classmethod
    def empty(cls) -> 'SourceImage':
        """Default-valued slot used when the stack grows."""
        return cls(GimbalOrientation(), None, (Pixels(0), Pixels(0)))

    @property
    def is_empty(self) -> bool:
        return self.image is None or self.image.size == 0


def _image_size(image: np.ndarray) -> Size:
    height, width = image.shape[:2]
    return Pixels(int(width)), Pixels(int(height))


class SourceImages:
    """
    Loads and normalizes the source photographs of a panorama.

    Attributes:
        panorama: Read-only metadata records the stack is loaded from.
        config: Loading/normalization configuration.
        gimbal_orientations: Tuple of per-image GimbalOrientation.
        images: Tuple of per-image pixel buffers.
        sizes: Tuple of per-image (width, height).

    Example:
        >>> stack = SourceImages(load_panorama("panorama.yaml"))
        >>> stack.filter([0, 2, 3])
        >>> stack.scale(0.5)
        >>> len(stack.images)
        3
    """

    def __init__(
        self,
        panorama: Panorama,
        config: Optional[SourceImagesConfig] = None,
        autoload: bool = True
    ):
        """
        Initialize the stack and, by default, load every image.

        Args:
            panorama: Time-ordered metadata records
            config: Optional configuration (defaults to get_default_config())
            autoload: Run reload() immediately

        Raises:
            ContractViolationError: If autoload and records are not time-ordered
            ImageDecodeError: If autoload and an image cannot be decoded
        """
        self._panorama = panorama if isinstance(panorama, Panorama) else Panorama(panorama)
        self.config = config if config is not None else get_default_config()
        self._slots: List[SourceImage] = []

        if autoload:
            self.reload()

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def panorama(self) -> Panorama:
        return self._panorama

    @property
    def gimbal_orientations(self) -> Tuple[GimbalOrientation, ...]:
        return tuple(slot.orientation for slot in self._slots)

    @property
    def images(self) -> Tuple[Optional[np.ndarray], ...]:
        return tuple(slot.image for slot in self._slots)

    @property
    def sizes(self) -> Tuple[Size, ...]:
        return tuple(slot.size for slot in self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[SourceImage]:
        return iter(tuple(self._slots))

    def __getitem__(self, index: int) -> SourceImage:
        return self._slots[index]

    def _commit(self, slots: List[SourceImage]) -> None:
        self._slots = slots

    # =========================================================================
    # Stack operations
    # =========================================================================

    def load(self) -> None:
        """
        Decode every image of the panorama and build its orientation.

        Slot i corresponds to the i-th metadata record. Gimbal angles are read
        in degrees.

        Raises:
            ContractViolationError: If records are not ordered by capture time
            ImageDecodeError: If an image file cannot be decoded
        """
        records = self._panorama.images
        if not self._panorama.is_time_ordered():
            i = next(
                i for i in range(1, len(records))
                if records[i - 1].created_timestamp_sec > records[i].created_timestamp_sec
            )
            raise ContractViolationError(
                f"Panorama images must be ordered by capture time: "
                f"image {i} ({records[i].path}) at {records[i].created_timestamp_sec} "
                f"precedes image {i - 1} at {records[i - 1].created_timestamp_sec}"
            )

        flags = self.config.imread_mode.cv2_flag
        slots = []
        for record in records:
            image = cv2.imread(str(record.path), flags)
            if image is None or image.size == 0:
                logger.error(f"Can't read image {record.path}")
                raise ImageDecodeError(record.path)

            slots.append(SourceImage(
                orientation=GimbalOrientation.from_geo_image(record),
                image=image,
                size=_image_size(image),
            ))
            logger.debug(f"Loaded {record.path} ({image.shape[1]}x{image.shape[0]})")

        self._commit(slots)
        logger.debug(f"Loaded {len(slots)} source images")

    def reload(self) -> None:
        """Discard current contents and load again from the panorama."""
        self.clear()
        self.resize(len(self._panorama))
        self.load()

    def resize(self, new_size: int) -> None:
        """
        Grow or shrink the stack to `new_size` slots.

        Growing appends empty slots (zero orientation, no image, size (0, 0));
        shrinking drops trailing slots. Existing lower slots are untouched.

        Raises:
            ValueError: If new_size is negative
        """
        if new_size < 0:
            raise ValueError(f"new_size must be non-negative, got {new_size}")

        slots = self._slots[:new_size]
        slots.extend(SourceImage.empty() for _ in range(new_size - len(slots)))
        self._commit(slots)

    def filter(self, keep_indices: Sequence[int]) -> None:
        """
        Keep only the slots at `keep_indices`, in that order.

        Indices refer to the current stack. Reordering and duplicates are
        allowed: keep_indices=[2, 0] makes old slot 2 the new slot 0.

        Raises:
            TypeError: If an index is not an integer
            IndexError: If an index is negative or out of range
            TooFewImagesError: If fewer than min_image_count slots would remain;
                the stack is left unchanged
        """
        original_count = len(self._slots)
        indices = []
        for index in keep_indices:
            if isinstance(index, bool):
                raise TypeError(f"Keep index must be an integer, got bool {index!r}")
            try:
                index = operator.index(index)
            except TypeError:
                raise TypeError(
                    f"Keep index must be an integer, got {type(index).__name__} {index!r}"
                ) from None
            if not 0 <= index < original_count:
                raise IndexError(
                    f"Keep index {index} out of range for {original_count} images"
                )
            indices.append(index)

        slots = [self._slots[index] for index in indices]
        self._check_image_count(len(slots))
        self._commit(slots)

        logger.debug(f"Discarded {original_count - len(slots)} images.")

    def scale(
        self,
        scale: float,
        interpolation: Optional[Union[Interpolation, str]] = None
    ) -> None:
        """
        Resample every pixel buffer by `scale`.

        sizes are updated together with the buffers. Empty slots stay empty.

        Args:
            scale: Scale factor applied to both axes (> 0)
            interpolation: Resampling policy (defaults to config.interpolation)

        Raises:
            ValueError: If scale is not positive, would shrink an image below
                one pixel, or interpolation is unknown
        """
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        policy = Interpolation(interpolation) if interpolation is not None else self.config.interpolation

        targets = []
        for i, slot in enumerate(self._slots):
            if slot.is_empty:
                targets.append(None)
                continue
            width, height = slot.size
            target = (int(round(width * scale)), int(round(height * scale)))
            if min(target) < 1:
                raise ValueError(
                    f"scale {scale} shrinks image {i} ({width}x{height}) below one pixel"
                )
            targets.append(target)

        slots = []
        for slot, target in zip(self._slots, targets):
            if target is None:
                slots.append(slot)
                continue
            image = cv2.resize(slot.image, target, interpolation=policy.cv2_flag)
            slots.append(SourceImage(slot.orientation, image, _image_size(image)))

        self._commit(slots)
        logger.debug(f"Scaled {len(slots)} images by {scale} ({policy.value})")

    def clear(self) -> None:
        """Empty the stack. The panorama is kept so reload() can restore it."""
        self._commit([])

    def ensure_image_count(self) -> None:
        """
        Check that the stack holds enough images to stitch.

        Raises:
            TooFewImagesError: If fewer than config.min_image_count images are present
        """
        self._check_image_count(len(self._slots))

    def _check_image_count(self, count: int) -> None:
        required = self.config.min_image_count
        if count < required:
            error = TooFewImagesError(count, required)
            logger.error(str(error))
            raise error

#!/usr/bin/env python3
"""
Unit and integration tests for the SourceImages stack.

Tests cover:
- Loading: sequence lengths, orientation/size per index, decode failures,
  time-ordering contract
- clear / reload / resize
- filter: subsetting, reordering, duplication, minimum count, atomicity
- scale: buffer dimensions and sizes updated together
- ensure_image_count
- Property-based length invariants (Hypothesis)

Image fixtures are synthetic PNGs whose pixels all carry a per-image color,
so each image is identifiable by its center pixel.

Run with: python -m pytest tests/test_source_images.py -v
"""

from pathlib import Path
from typing import List

import cv2
import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from poc_panorama.exceptions import ContractViolationError, ImageDecodeError, TooFewImagesError
from poc_panorama.geo_image import GeoImage, Panorama
from poc_panorama.gimbal import GimbalOrientation
from poc_panorama.source_images import SourceImage, SourceImages
from poc_panorama.stack_config import Interpolation, SourceImagesConfig
from poc_panorama.types import AngleUnits

IMAGE_COUNT = 25
IMAGE_WIDTH = 40
IMAGE_HEIGHT = 30

# ============================================================================
# Test Fixtures
# ============================================================================


def _color(i: int) -> List[int]:
    return [(i * 10) % 256, (255 - i * 7) % 256, (i * 3 + 50) % 256]


def _write_images(directory: Path, count: int) -> List[GeoImage]:
    records = []
    for i in range(count):
        image = np.zeros((IMAGE_HEIGHT, IMAGE_WIDTH, 3), dtype=np.uint8)
        image[:, :] = _color(i)
        path = directory / f"P{5050970 + i}.png"
        assert cv2.imwrite(str(path), image)
        records.append(GeoImage(
            path=str(path),
            created_timestamp_sec=1557047560 + 2 * i,
            camera_pitch_deg=30.0,
            camera_roll_deg=float(i) / 10,
            camera_yaw_deg=float(i * 15),
        ))
    return records


def _center_pixel(image: np.ndarray) -> List[int]:
    height, width = image.shape[:2]
    return image[height // 2, width // 2].tolist()


@pytest.fixture
def records(tmp_path) -> List[GeoImage]:
    return _write_images(tmp_path, IMAGE_COUNT)


@pytest.fixture
def panorama(records) -> Panorama:
    return Panorama(records)


@pytest.fixture
def source_images(panorama) -> SourceImages:
    return SourceImages(panorama)


def assert_aligned(stack: SourceImages, expected_length: int) -> None:
    assert len(stack.gimbal_orientations) == expected_length
    assert len(stack.images) == expected_length
    assert len(stack.sizes) == expected_length
    assert len(stack) == expected_length


# ============================================================================
# Loading
# ============================================================================


class TestLoad:

    def test_struct_lengths(self, source_images):
        assert_aligned(source_images, IMAGE_COUNT)

    def test_index_alignment(self, source_images, records):
        for i, record in enumerate(records):
            orientation = source_images.gimbal_orientations[i]
            assert orientation == GimbalOrientation(
                pitch=record.camera_pitch_deg,
                roll=record.camera_roll_deg,
                yaw=record.camera_yaw_deg,
                units=AngleUnits.DEGREES,
            )
            assert _center_pixel(source_images.images[i]) == _color(i)
            assert source_images.sizes[i] == (IMAGE_WIDTH, IMAGE_HEIGHT)

    def test_slot_access(self, source_images):
        slot = source_images[3]

        assert isinstance(slot, SourceImage)
        assert slot.size == (IMAGE_WIDTH, IMAGE_HEIGHT)
        assert not slot.is_empty
        assert len(list(source_images)) == IMAGE_COUNT

    def test_autoload_disabled(self, panorama):
        stack = SourceImages(panorama, autoload=False)

        assert_aligned(stack, 0)
        stack.load()
        assert_aligned(stack, IMAGE_COUNT)

    def test_grayscale_mode(self, panorama):
        stack = SourceImages(panorama, config=SourceImagesConfig(imread_mode="grayscale"))

        assert stack.images[0].ndim == 2
        assert stack.sizes[0] == (IMAGE_WIDTH, IMAGE_HEIGHT)

    def test_sequences_are_read_only_views(self, source_images):
        with pytest.raises(TypeError):
            source_images.images[0] = None
        with pytest.raises(AttributeError):
            source_images.sizes = ()

    def test_undecodable_image(self, records, tmp_path):
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image")
        records[3] = GeoImage(str(broken), records[3].created_timestamp_sec, 30.0, 0.0, 0.0)

        with pytest.raises(ImageDecodeError) as exc_info:
            SourceImages(Panorama(records))

        assert exc_info.value.path == str(broken)
        assert str(broken) in str(exc_info.value)

    def test_missing_image(self, records, tmp_path):
        missing = str(tmp_path / "missing.png")
        records[0] = GeoImage(missing, records[0].created_timestamp_sec, 30.0, 0.0, 0.0)

        with pytest.raises(ImageDecodeError) as exc_info:
            SourceImages(Panorama(records))
        assert exc_info.value.path == missing

    def test_failed_load_leaves_stack_unchanged(self, records, tmp_path):
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"")
        records[-1] = GeoImage(str(broken), records[-1].created_timestamp_sec, 30.0, 0.0, 0.0)
        stack = SourceImages(Panorama(records), autoload=False)
        stack.resize(3)

        with pytest.raises(ImageDecodeError):
            stack.load()

        assert_aligned(stack, 3)
        assert all(slot.is_empty for slot in stack)

    def test_unordered_timestamps_violate_contract(self, records):
        records[4], records[5] = records[5], records[4]

        with pytest.raises(ContractViolationError, match="ordered by capture time: image 5 "):
            SourceImages(Panorama(records))

    def test_equal_timestamps_allowed(self, records):
        records[1] = GeoImage(records[1].path, records[0].created_timestamp_sec, 30.0, 0.0, 0.0)
        assert_aligned(SourceImages(Panorama(records)), IMAGE_COUNT)

    def test_accepts_plain_record_list(self, records):
        stack = SourceImages(records)

        assert isinstance(stack.panorama, Panorama)
        assert_aligned(stack, IMAGE_COUNT)


# ============================================================================
# clear / reload / resize
# ============================================================================


class TestClearReload:

    def test_clear(self, source_images):
        assert_aligned(source_images, IMAGE_COUNT)

        source_images.clear()

        assert_aligned(source_images, 0)
        assert len(source_images.panorama) == IMAGE_COUNT

    def test_reload(self, source_images):
        source_images.clear()
        source_images.reload()

        assert_aligned(source_images, IMAGE_COUNT)
        assert _center_pixel(source_images.images[7]) == _color(7)

    def test_reload_after_filter_restores_all(self, source_images):
        source_images.filter([3, 1])
        source_images.reload()

        assert_aligned(source_images, IMAGE_COUNT)
        assert _center_pixel(source_images.images[0]) == _color(0)


class TestResize:

    def test_shrink(self, source_images):
        source_images.resize(10)
        assert_aligned(source_images, 10)

        source_images.resize(5)
        assert_aligned(source_images, 5)
        assert _center_pixel(source_images.images[4]) == _color(4)

    def test_grow_keeps_lower_slots(self, source_images):
        before = source_images.images
        source_images.resize(IMAGE_COUNT + 3)

        assert_aligned(source_images, IMAGE_COUNT + 3)
        for i in range(IMAGE_COUNT):
            assert source_images.images[i] is before[i]

    def test_grow_appends_default_slots(self, source_images):
        source_images.resize(IMAGE_COUNT + 2)

        for i in (IMAGE_COUNT, IMAGE_COUNT + 1):
            assert source_images.images[i] is None
            assert source_images.sizes[i] == (0, 0)
            assert source_images.gimbal_orientations[i] == GimbalOrientation()
            assert source_images[i].is_empty

    def test_negative_size(self, source_images):
        with pytest.raises(ValueError, match="non-negative"):
            source_images.resize(-1)
        assert_aligned(source_images, IMAGE_COUNT)

    @given(n=st.integers(min_value=0, max_value=60), m=st.integers(min_value=0, max_value=60))
    def test_resize_twice_lengths(self, n, m):
        stack = SourceImages(Panorama(), autoload=False)

        stack.resize(n)
        assert_aligned(stack, n)
        stack.resize(m)
        assert_aligned(stack, m)


# ============================================================================
# filter / ensure_image_count
# ============================================================================


class TestEnsureImageCount:

    def test_enough_images(self, source_images):
        source_images.ensure_image_count()

    def test_after_filter_to_two(self, source_images):
        source_images.filter([0, 1])
        source_images.ensure_image_count()

    def test_filter_to_one_fails(self, source_images):
        with pytest.raises(TooFewImagesError) as exc_info:
            source_images.filter([0])

        assert exc_info.value.count == 1
        assert exc_info.value.required == 2

    def test_cleared_stack_fails(self, source_images):
        source_images.clear()

        with pytest.raises(TooFewImagesError) as exc_info:
            source_images.ensure_image_count()
        assert exc_info.value.count == 0

    def test_too_few_is_value_error(self, source_images):
        source_images.clear()
        with pytest.raises(ValueError):
            source_images.ensure_image_count()

    def test_configured_minimum(self, panorama):
        stack = SourceImages(panorama, config=SourceImagesConfig(min_image_count=5))

        with pytest.raises(TooFewImagesError) as exc_info:
            stack.filter([0, 1, 2, 3])
        assert exc_info.value.required == 5

        stack.filter([0, 1, 2, 3, 4])
        assert_aligned(stack, 5)


class TestFilter:

    def test_remove_one_image(self, source_images):
        """Removed image content is absent from every remaining slot."""
        remove_index = 5
        removed_value = _center_pixel(source_images.images[remove_index])

        for i, image in enumerate(source_images.images):
            if i == remove_index:
                assert _center_pixel(image) == removed_value
            else:
                assert _center_pixel(image) != removed_value

        keep_indices = [i for i in range(len(source_images)) if i != remove_index]
        source_images.filter(keep_indices)

        assert_aligned(source_images, IMAGE_COUNT - 1)
        for image in source_images.images:
            assert _center_pixel(image) != removed_value

    def test_reorder(self, source_images, records):
        source_images.filter([2, 0])

        assert_aligned(source_images, 2)
        assert _center_pixel(source_images.images[0]) == _color(2)
        assert _center_pixel(source_images.images[1]) == _color(0)
        assert source_images.gimbal_orientations[0].yaw == records[2].camera_yaw_deg
        assert source_images.gimbal_orientations[1].yaw == records[0].camera_yaw_deg

    def test_duplicates(self, source_images):
        source_images.filter([4, 4, 1])

        assert_aligned(source_images, 3)
        assert _center_pixel(source_images.images[0]) == _color(4)
        assert _center_pixel(source_images.images[1]) == _color(4)

    def test_orientation_image_size_stay_together(self, panorama):
        stack = SourceImages(panorama)
        stack.scale(0.5)
        stack.resize(IMAGE_COUNT + 1)

        stack.filter([IMAGE_COUNT, 3])

        assert stack.images[0] is None
        assert stack.sizes[0] == (0, 0)
        assert stack.sizes[1] == (IMAGE_WIDTH // 2, IMAGE_HEIGHT // 2)
        assert stack.gimbal_orientations[1].yaw == 45.0

    @pytest.mark.parametrize("keep", [[], [0], [24]])
    def test_too_few_leaves_stack_unchanged(self, source_images, keep):
        before = source_images.images

        with pytest.raises(TooFewImagesError):
            source_images.filter(keep)

        assert_aligned(source_images, IMAGE_COUNT)
        assert all(a is b for a, b in zip(source_images.images, before))

    @pytest.mark.parametrize("bad_index", [IMAGE_COUNT, 100, -1])
    def test_out_of_range_index(self, source_images, bad_index):
        with pytest.raises(IndexError):
            source_images.filter([0, 1, bad_index])

        assert_aligned(source_images, IMAGE_COUNT)

    def test_indices_refer_to_current_stack(self, source_images):
        source_images.filter([10, 11, 12])
        source_images.filter([2, 0])

        assert _center_pixel(source_images.images[0]) == _color(12)
        assert _center_pixel(source_images.images[1]) == _color(10)

    def test_numpy_indices(self, source_images):
        source_images.filter(np.array([3, 2, 1]))
        assert _center_pixel(source_images.images[0]) == _color(3)

    @pytest.mark.parametrize("bad_index", [1.5, 2.0, "1", True, None])
    def test_non_integer_index(self, source_images, bad_index):
        with pytest.raises(TypeError, match="Keep index must be an integer"):
            source_images.filter([0, bad_index])

        assert_aligned(source_images, IMAGE_COUNT)


# ============================================================================
# scale
# ============================================================================


class TestScale:

    def test_scale_updates_images_and_sizes(self, source_images):
        source_images.scale(0.5)

        for image, size in zip(source_images.images, source_images.sizes):
            assert image.shape[:2] == (IMAGE_HEIGHT // 2, IMAGE_WIDTH // 2)
            assert size == (IMAGE_WIDTH // 2, IMAGE_HEIGHT // 2)

    def test_scale_twice(self, source_images):
        source_images.scale(0.5)
        source_images.scale(0.8)

        assert source_images.sizes[0] == (16, 12)
        assert source_images.images[0].shape[:2] == (12, 16)

    def test_upscale(self, source_images):
        source_images.scale(2.0, Interpolation.NEAREST)

        assert source_images.sizes[0] == (IMAGE_WIDTH * 2, IMAGE_HEIGHT * 2)
        assert _center_pixel(source_images.images[9]) == _color(9)

    def test_scale_keeps_orientations_and_order(self, source_images):
        orientations = source_images.gimbal_orientations
        source_images.scale(0.5, "area")

        assert source_images.gimbal_orientations == orientations
        for i, image in enumerate(source_images.images):
            assert _center_pixel(image) == _color(i)

    def test_scale_skips_empty_slots(self, source_images):
        source_images.resize(IMAGE_COUNT + 1)
        source_images.scale(0.5)

        assert source_images.images[IMAGE_COUNT] is None
        assert source_images.sizes[IMAGE_COUNT] == (0, 0)

    @pytest.mark.parametrize("factor", [0.0, -0.5])
    def test_non_positive_scale(self, source_images, factor):
        with pytest.raises(ValueError, match="scale must be positive"):
            source_images.scale(factor)
        assert source_images.sizes[0] == (IMAGE_WIDTH, IMAGE_HEIGHT)

    def test_unknown_interpolation(self, source_images):
        with pytest.raises(ValueError):
            source_images.scale(0.5, "bilinear-ish")
        assert source_images.sizes[0] == (IMAGE_WIDTH, IMAGE_HEIGHT)

    def test_scale_below_one_pixel(self, source_images):
        before = source_images.images

        with pytest.raises(ValueError, match="image 0 .*below one pixel"):
            source_images.scale(0.01)

        assert_aligned(source_images, IMAGE_COUNT)
        assert all(a is b for a, b in zip(source_images.images, before))

    def test_smallest_valid_scale(self, source_images):
        # 30 * 0.02 rounds to 1 row
        source_images.scale(0.02)

        assert source_images.sizes[0] == (1, 1)
        assert source_images.images[0].shape[:2] == (1, 1)

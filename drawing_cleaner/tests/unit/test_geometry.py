"""Unit tests for rotation, crop resolution and auto-crop."""

import numpy as np
import pytest

from drawing_cleaner.domain.entities.raster import RasterBuffer
from drawing_cleaner.domain.services.geometry import (
    auto_crop,
    compute_scale_factors,
    find_content_bounds,
    manual_crop,
    resolve_crop_box,
    rotate,
)
from drawing_cleaner.domain.value_objects.geometry import (
    CropBox,
    DisplayedSize,
    PixelRect,
    normalize_rotation,
)
from drawing_cleaner.exceptions import ValidationError


def _indexed_buffer(width, height):
    """Buffer whose red channel encodes the pixel index."""
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[:, :, 0] = np.arange(width * height, dtype=np.uint8).reshape(height, width)
    data[:, :, 3] = 255
    return RasterBuffer(data)


class TestRotationValues:
    """Tests for rotation normalization."""

    def test_normalize(self):
        assert normalize_rotation(0) == 0
        assert normalize_rotation(450) == 90
        assert normalize_rotation(-90) == 270

    def test_invalid_rotation(self):
        with pytest.raises(ValidationError):
            normalize_rotation(45)

    def test_full_turns_wrap(self):
        assert normalize_rotation(360) == 0
        assert normalize_rotation(-270) == 90


class TestRotate:
    """Tests for buffer rotation."""

    def test_zero_is_copy(self):
        buffer = _indexed_buffer(3, 2)
        rotated = rotate(buffer, 0)
        assert np.array_equal(rotated.data, buffer.data)
        assert rotated.data is not buffer.data

    def test_quarter_turn_swaps_dimensions(self):
        buffer = _indexed_buffer(3, 2)
        for rotation in (90, 270):
            rotated = rotate(buffer, rotation)
            assert rotated.size == (2, 3)
        assert rotate(buffer, 180).size == (3, 2)

    def test_rotation_is_clockwise(self):
        """Top-left pixel ends up top-right after 90 degrees."""
        buffer = _indexed_buffer(3, 2)
        rotated = rotate(buffer, 90)
        assert rotated.data[0, -1, 0] == buffer.data[0, 0, 0]

    def test_four_quarter_turns_round_trip(self):
        buffer = _indexed_buffer(5, 3)
        result = buffer
        for _ in range(4):
            result = rotate(result, 90)
        assert np.array_equal(result.data, buffer.data)

    def test_opposite_turns_cancel(self):
        buffer = _indexed_buffer(4, 7)
        assert np.array_equal(rotate(rotate(buffer, 90), 270).data, buffer.data)


class TestResolveCropBox:
    """Tests for display-to-buffer crop mapping."""

    def test_no_display_size_means_buffer_space(self):
        assert compute_scale_factors(200, 100) == (1.0, 1.0)
        rect = resolve_crop_box(CropBox(10, 5, 30, 20), 200, 100)
        assert rect == PixelRect(10, 5, 30, 20)

    def test_uniform_scale(self):
        rect = resolve_crop_box(CropBox(10, 10, 20, 20), 200, 100, DisplayedSize(100, 50))
        assert rect == PixelRect(20, 20, 40, 40)

    def test_anisotropic_scale(self):
        """Each axis uses its own factor."""
        rect = resolve_crop_box(CropBox(10, 10, 20, 20), 200, 100, DisplayedSize(100, 100))
        assert rect == PixelRect(20, 10, 40, 20)

    def test_scale_invariance(self):
        """Same relative box at any display size gives the same pixels."""
        small = resolve_crop_box(CropBox(25, 10, 50, 30), 400, 200, DisplayedSize(100, 50))
        large = resolve_crop_box(CropBox(50, 20, 100, 60), 400, 200, DisplayedSize(200, 100))
        assert small == large

    def test_clamped_to_buffer(self):
        rect = resolve_crop_box(CropBox(80, 80, 50, 50), 100, 100)
        assert rect == PixelRect(80, 80, 20, 20)

    def test_outside_buffer_raises(self):
        with pytest.raises(ValidationError):
            resolve_crop_box(CropBox(150, 150, 10, 10), 100, 100)

    def test_non_positive_box_rejected(self):
        with pytest.raises(ValidationError):
            CropBox(0, 0, 0, 10)

    def test_manual_crop_dimensions(self):
        buffer = RasterBuffer.blank(200, 100)
        cropped = manual_crop(buffer, CropBox(10, 10, 20, 20), DisplayedSize(100, 50))
        assert cropped.size == (40, 40)


class TestAutoCrop:
    """Tests for content detection."""

    def test_red_square_with_margin(self, drawing_on_paper):
        bounds = find_content_bounds(drawing_on_paper)
        assert bounds == PixelRect(30, 20, 40, 40)
        assert auto_crop(drawing_on_paper).size == (40, 40)

    def test_margin_clamped_at_edges(self):
        data = RasterBuffer.blank(100, 100).data.copy()
        data[0:20, 0:20, :3] = (255, 0, 0)
        bounds = find_content_bounds(RasterBuffer(data))
        assert bounds == PixelRect(0, 0, 30, 30)

    def test_monochrome_falls_back_to_dark_pixels(self):
        data = RasterBuffer.blank(100, 100).data.copy()
        data[40:60, 40:60, :3] = 100
        bounds = find_content_bounds(RasterBuffer(data))
        assert bounds == PixelRect(30, 30, 40, 40)

    def test_colour_pass_ignores_grey_marks(self):
        """Pencil smudges do not widen the box when colour is present."""
        data = RasterBuffer.blank(100, 100).data.copy()
        data[40:50, 40:50, :3] = (0, 0, 200)
        data[0:5, 0:5, :3] = 90
        bounds = find_content_bounds(RasterBuffer(data))
        assert bounds == PixelRect(30, 30, 30, 30)

    def test_blank_image_is_noop(self):
        buffer = RasterBuffer.blank(50, 40)
        assert find_content_bounds(buffer) is None
        result = auto_crop(buffer)
        assert result.size == (50, 40)
        assert np.array_equal(result.data, buffer.data)

    def test_alpha_is_ignored(self):
        """Transparent but coloured pixels still count as content."""
        data = RasterBuffer.blank(60, 60).data.copy()
        data[20:30, 20:30] = (255, 0, 0, 0)
        assert find_content_bounds(RasterBuffer(data)) == PixelRect(10, 10, 30, 30)

"""Geometric normalization: rotation and crop resolution."""

from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from ...config import IMAGE_CONFIG
from ...exceptions import ValidationError
from ..entities.raster import RasterBuffer
from ..value_objects.geometry import CropBox, DisplayedSize, PixelRect, normalize_rotation
from .color import brightness, saturation

logger = logging.getLogger(__name__)

# Clockwise rotation in screen coordinates
_CV2_ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def rotate(buffer: RasterBuffer, rotation: int) -> RasterBuffer:
    """Rotate a buffer clockwise about its centre.

    Args:
        buffer: Source buffer
        rotation: Degrees, a multiple of 90

    Returns:
        New buffer; width and height are swapped for 90 and 270
    """
    rotation = normalize_rotation(rotation)
    if rotation == 0:
        return buffer.copy()
    rotated = cv2.rotate(buffer.data, _CV2_ROTATIONS[rotation])
    return RasterBuffer(np.ascontiguousarray(rotated))


def compute_scale_factors(
    buffer_width: int,
    buffer_height: int,
    displayed_size: Optional[DisplayedSize] = None
) -> tuple[float, float]:
    """Independent horizontal and vertical display-to-buffer scale factors.

    Without a displayed size the display space is assumed to be buffer space.
    """
    if displayed_size is None:
        return 1.0, 1.0
    return (
        buffer_width / displayed_size.width,
        buffer_height / displayed_size.height
    )


def resolve_crop_box(
    crop_box: CropBox,
    buffer_width: int,
    buffer_height: int,
    displayed_size: Optional[DisplayedSize] = None
) -> PixelRect:
    """Map a display-space crop box to a pixel rectangle in buffer space.

    Each field is scaled by its own axis factor, rounded to whole pixels and
    clamped to the buffer.

    Raises:
        ValidationError: If nothing of the box remains inside the buffer
    """
    scale_x, scale_y = compute_scale_factors(buffer_width, buffer_height, displayed_size)
    scaled = crop_box.scaled(scale_x, scale_y)

    x0 = int(round(scaled.x))
    y0 = int(round(scaled.y))
    x1 = x0 + int(round(scaled.width))
    y1 = y0 + int(round(scaled.height))

    x0, x1 = max(0, x0), min(buffer_width, x1)
    y0, y1 = max(0, y0), min(buffer_height, y1)

    if x1 <= x0 or y1 <= y0:
        raise ValidationError(
            f"Crop box {crop_box} does not overlap the {buffer_width}x{buffer_height} image",
            field="crop_box"
        )

    return PixelRect(x0, y0, x1 - x0, y1 - y0)


def crop(buffer: RasterBuffer, rect: PixelRect) -> RasterBuffer:
    """Copy the pixels inside rect."""
    region = buffer.data[rect.y:rect.bottom, rect.x:rect.right]
    return RasterBuffer(region.copy())


def manual_crop(
    buffer: RasterBuffer,
    crop_box: CropBox,
    displayed_size: Optional[DisplayedSize] = None
) -> RasterBuffer:
    """Crop to a user-drawn box measured against displayed_size."""
    rect = resolve_crop_box(crop_box, buffer.width, buffer.height, displayed_size)
    logger.debug(f"Manual crop resolved to {rect}")
    return crop(buffer, rect)


def _mask_bounds(mask: np.ndarray) -> Optional[PixelRect]:
    """Inclusive bounding box of True pixels, or None."""
    rows = np.flatnonzero(mask.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(mask.any(axis=0))
    return PixelRect.from_bounds(int(cols[0]), int(rows[0]), int(cols[-1]), int(rows[-1]))


def find_content_bounds(buffer: RasterBuffer) -> Optional[PixelRect]:
    """Locate the drawing inside a photographed or scanned page.

    First looks for coloured strokes only (dark enough and saturated), which
    skips white paper as well as grey pencil marks and shadows. If the image
    has no colour at all, any dark pixel counts. The result is padded by a
    fixed margin and clamped to the buffer.

    Returns:
        Bounds in buffer space, or None if neither pass finds content
    """
    rgb = buffer.rgb
    bright = brightness(rgb)

    colored = (bright < IMAGE_CONFIG.autocrop_max_brightness) & (
        saturation(rgb) > IMAGE_CONFIG.autocrop_min_saturation
    )
    bounds = _mask_bounds(colored)

    if bounds is None:
        logger.debug("No coloured strokes found, falling back to dark pixels")
        bounds = _mask_bounds(bright < IMAGE_CONFIG.autocrop_dark_brightness)

    if bounds is None:
        return None

    return bounds.expand(IMAGE_CONFIG.autocrop_margin, buffer.width, buffer.height)


def auto_crop(buffer: RasterBuffer) -> RasterBuffer:
    """Crop to detected content; returns a full copy when none is found."""
    bounds = find_content_bounds(buffer)
    if bounds is None:
        logger.info("Auto-crop found no content, keeping full image")
        return buffer.copy()
    logger.debug(f"Auto-crop bounds: {bounds}")
    return crop(buffer, bounds)

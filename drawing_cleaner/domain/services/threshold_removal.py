"""Colour-threshold background removal (no model required)."""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from ...config import IMAGE_CONFIG
from ..entities.raster import RasterBuffer
from .color import boost_saturation, brightness, saturation

logger = logging.getLogger(__name__)


def brightness_threshold_for(sensitivity: float) -> float:
    """Pixels brighter than this are treated as paper."""
    return IMAGE_CONFIG.legacy_brightness_base - sensitivity * IMAGE_CONFIG.legacy_brightness_slope


def saturation_threshold_for(sensitivity: float) -> float:
    """Pixels less saturated than this are treated as pencil or shadow."""
    return IMAGE_CONFIG.legacy_saturation_base + sensitivity / IMAGE_CONFIG.legacy_saturation_divisor


def background_mask(buffer: RasterBuffer, sensitivity: float) -> npt.NDArray[np.bool_]:
    """True where a pixel would be removed at this sensitivity."""
    rgb = buffer.rgb
    too_bright = brightness(rgb) > brightness_threshold_for(sensitivity)
    desaturated = saturation(rgb) < saturation_threshold_for(sensitivity)
    return too_bright | desaturated


def remove_background_by_threshold(buffer: RasterBuffer, sensitivity: float) -> RasterBuffer:
    """Keep only vibrant strokes.

    Bright or desaturated pixels become transparent. Kept pixels get a mild
    saturation boost to make up for the washed-out look of scans and phone
    photos.

    Args:
        buffer: Source buffer
        sensitivity: 0-100; higher removes more

    Returns:
        New buffer with background alpha set to 0
    """
    remove = background_mask(buffer, sensitivity)
    keep = ~remove

    data = buffer.data.copy()
    data[remove, 3] = 0
    data[keep, :3] = boost_saturation(data[keep, :3], IMAGE_CONFIG.legacy_boost_factor)

    logger.debug(
        f"Threshold removal at sensitivity {sensitivity}: "
        f"{int(remove.sum())}/{remove.size} pixels removed"
    )
    return RasterBuffer(data)

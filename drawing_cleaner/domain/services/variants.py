"""Variant synthesis from an extracted foreground."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import cv2
import numpy as np

from ...config import IMAGE_CONFIG, VariantType
from ..entities.raster import RasterBuffer
from ..entities.variant import CleanedVariant
from .color import boost_saturation, luminance, posterize

logger = logging.getLogger(__name__)


def render_bold_poster(buffer: RasterBuffer) -> RasterBuffer:
    """Posterize opaque pixels to 4 levels, then boost saturation hard."""
    data = buffer.data.copy()
    opaque = data[:, :, 3] != 0
    quantized = posterize(data[opaque, :3], IMAGE_CONFIG.posterize_levels)
    data[opaque, :3] = boost_saturation(quantized, IMAGE_CONFIG.poster_boost_factor)
    return RasterBuffer(data)


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    """Gradient magnitude of a 3x3 Sobel operator.

    Border pixels have no full neighbourhood and are set to 0.
    """
    src = gray.astype(np.float32)
    gx = cv2.Sobel(src, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(src, cv2.CV_32F, 0, 1, ksize=3)
    magnitude = np.sqrt(gx.astype(np.float64) ** 2 + gy.astype(np.float64) ** 2)
    magnitude[0, :] = 0
    magnitude[-1, :] = 0
    magnitude[:, 0] = 0
    magnitude[:, -1] = 0
    return magnitude


def render_line_art(buffer: RasterBuffer) -> RasterBuffer:
    """Black edge lines on an opaque white canvas."""
    gray = luminance(buffer.data)
    edges = sobel_magnitude(gray) > IMAGE_CONFIG.sobel_edge_threshold

    data = np.full((buffer.height, buffer.width, 4), 255, dtype=np.uint8)
    data[edges, :3] = 0
    return RasterBuffer(data)


def create_clean_variant(buffer: RasterBuffer) -> CleanedVariant:
    """The extracted buffer itself."""
    return CleanedVariant.from_buffer(VariantType.CLEAN, buffer)


def create_bold_poster_variant(buffer: RasterBuffer) -> CleanedVariant:
    return CleanedVariant.from_buffer(VariantType.BOLD_POSTER, render_bold_poster(buffer))


def create_line_art_variant(buffer: RasterBuffer) -> CleanedVariant:
    return CleanedVariant.from_buffer(VariantType.MINIMAL_LINE_ART, render_line_art(buffer))


def synthesize_variants(
    buffer: RasterBuffer,
    on_variant: Optional[Callable[[VariantType], None]] = None
) -> list[CleanedVariant]:
    """Create the clean, bold poster and line art variants, in that order.

    Args:
        buffer: Extracted foreground
        on_variant: Called with each variant type before it is rendered

    Returns:
        Exactly three variants
    """
    builders = (
        (VariantType.CLEAN, create_clean_variant),
        (VariantType.BOLD_POSTER, create_bold_poster_variant),
        (VariantType.MINIMAL_LINE_ART, create_line_art_variant),
    )
    variants = []
    for variant_type, build in builders:
        if on_variant:
            on_variant(variant_type)
        variants.append(build(buffer))
        logger.debug(f"Created {variant_type.value} variant")
    return variants

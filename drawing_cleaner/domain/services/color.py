"""Per-pixel colour measurements and adjustments.

All functions operate on whole ``(H, W, 3)`` RGB arrays at once and return
float64 results unless stated otherwise, so callers can compare against
thresholds without intermediate rounding.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ...config import IMAGE_CONFIG

FloatArray = npt.NDArray[np.float64]


def brightness(rgb: npt.NDArray[np.uint8]) -> FloatArray:
    """Mean of R, G and B per pixel."""
    return rgb.astype(np.float64).sum(axis=-1) / 3


def saturation(rgb: npt.NDArray[np.uint8]) -> FloatArray:
    """HSV-style saturation ``(max - min) / max``, 0 where max is 0."""
    channels = rgb.astype(np.float64)
    cmax = channels.max(axis=-1)
    cmin = channels.min(axis=-1)
    out = np.zeros_like(cmax)
    np.divide(cmax - cmin, cmax, out=out, where=cmax > 0)
    return out


def boost_saturation(rgb: npt.ArrayLike, factor: float) -> npt.NDArray[np.uint8]:
    """Push each channel away from the pixel's ``(max + min) / 2`` midpoint.

    Args:
        rgb: Array of shape (..., 3)
        factor: Multiplier applied to each channel's deviation from the midpoint

    Returns:
        uint8 array of the same shape, rounded and clamped to [0, 255]
    """
    channels = np.asarray(rgb, dtype=np.float64)
    mid = (channels.max(axis=-1, keepdims=True) + channels.min(axis=-1, keepdims=True)) / 2
    boosted = mid + (channels - mid) * factor
    return np.clip(np.rint(boosted), 0, 255).astype(np.uint8)


def posterize(rgb: npt.ArrayLike, levels: int = IMAGE_CONFIG.posterize_levels) -> npt.NDArray[np.uint8]:
    """Quantize each channel to ``levels`` steps of ``256 / levels``.

    Halves round up, and the top step (256) is clamped to 255.
    """
    step = 256 / levels
    channels = np.asarray(rgb, dtype=np.float64)
    quantized = np.floor(channels / step + 0.5) * step
    return np.clip(quantized, 0, 255).astype(np.uint8)


def luminance(rgba: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Rec. 601 luma per pixel, truncated to uint8.

    Fully transparent pixels count as white (255).
    """
    wr, wg, wb = IMAGE_CONFIG.luminance_weights
    rgb = rgba[:, :, :3].astype(np.float64)
    gray = wr * rgb[:, :, 0] + wg * rgb[:, :, 1] + wb * rgb[:, :, 2]
    gray = np.floor(np.clip(gray, 0, 255)).astype(np.uint8)
    gray[rgba[:, :, 3] == 0] = 255
    return gray

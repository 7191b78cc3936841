"""Alpha-channel post-processing for model output.

Two independent passes, both driven by sensitivity:

1. :func:`apply_alpha_threshold` drops faint pixels.
2. :func:`feather_edges` softens what is left along the boundary.

:func:`postprocess_alpha` runs them in that order. Feathering before
thresholding brings back faint ghost pixels around the subject, so the
order is fixed.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ...config import IMAGE_CONFIG

AlphaArray = npt.NDArray[np.uint8]  # Shape (H, W)


def alpha_threshold_for(sensitivity: float) -> float:
    """Alpha cutoff in [0, 255] for a sensitivity in [0, 100]."""
    return sensitivity * IMAGE_CONFIG.alpha_threshold_scale


def feather_amount_for(sensitivity: float) -> float:
    """Feather weight in [0, 1]; higher sensitivity gives crisper edges."""
    return max(0.0, 100.0 - sensitivity) / 100.0


def apply_alpha_threshold(alpha: AlphaArray, threshold: float) -> AlphaArray:
    """Make every pixel with alpha below threshold fully transparent."""
    out = alpha.copy()
    if threshold > 0:
        out[alpha < threshold] = 0
    return out


def feather_edges(alpha: AlphaArray, feather: float) -> AlphaArray:
    """Blend partially transparent pixels with their 4-neighbourhood.

    Only interior pixels with 0 < alpha < 255 change; each becomes
    ``alpha * (1 - feather) + mean(up, down, left, right) * feather``,
    rounded and clamped to uint8. Pixels are visited row by row and each
    result is stored before the next pixel is blended, so the up and left
    neighbours of a pixel are already feathered.

    Args:
        alpha: Alpha channel, shape (H, W)
        feather: Blend weight in [0, 1]

    Returns:
        New alpha channel
    """
    out = alpha.copy()
    if feather <= 0 or alpha.shape[0] < 3 or alpha.shape[1] < 3:
        return out

    inner = alpha[1:-1, 1:-1]
    # A pixel is only ever written on its own visit, so the partial set is fixed up front
    edge_pixels = np.argwhere((inner > 0) & (inner < 255)) + 1
    keep = 1.0 - feather
    for y, x in edge_pixels.tolist():
        neighbours = (
            int(out[y - 1, x]) + int(out[y + 1, x]) + int(out[y, x - 1]) + int(out[y, x + 1])
        ) / 4
        blended = int(out[y, x]) * keep + neighbours * feather
        out[y, x] = min(255, max(0, round(blended)))
    return out


def postprocess_alpha(alpha: AlphaArray, sensitivity: float) -> AlphaArray:
    """Threshold, then feather, using the sensitivity mappings."""
    thresholded = apply_alpha_threshold(alpha, alpha_threshold_for(sensitivity))
    return feather_edges(thresholded, feather_amount_for(sensitivity))

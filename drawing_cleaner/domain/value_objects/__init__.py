"""Value objects - immutable data with validation."""

from .geometry import (
    CropBox,
    DisplayedSize,
    PixelRect,
    VALID_ROTATIONS,
    normalize_rotation,
)
from .config import CleaningOptions

__all__ = [
    'CropBox',
    'DisplayedSize',
    'PixelRect',
    'VALID_ROTATIONS',
    'normalize_rotation',
    'CleaningOptions',
]

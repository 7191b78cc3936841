"""Domain layer - pure pixel logic, no model dependencies."""

from .entities.raster import RasterBuffer
from .entities.variant import CleanedVariant
from .value_objects.config import CleaningOptions
from .value_objects.geometry import CropBox, DisplayedSize, PixelRect

__all__ = [
    # Entities
    'RasterBuffer',
    'CleanedVariant',
    # Value Objects
    'CleaningOptions',
    'CropBox',
    'DisplayedSize',
    'PixelRect',
]

"""Domain entities."""

from .raster import RasterBuffer
from .variant import CleanedVariant

__all__ = ['RasterBuffer', 'CleanedVariant']

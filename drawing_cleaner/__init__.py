"""Drawing Cleaner - turn photos of children's drawings into clean artwork."""

__version__ = "1.0.0"

from .application import CleaningPipeline, process_image
from .config import Backend, ModelType, VariantType
from .domain import CleanedVariant, CleaningOptions, CropBox, DisplayedSize, RasterBuffer
from .exceptions import (
    DrawingCleanerError,
    ExtractionError,
    ImageLoadError,
    ModelError,
    ValidationError,
)
from .utils.env import setup_logging

__all__ = [
    '__version__',
    'ModelType',
    'Backend',
    'VariantType',
    'CleaningOptions',
    'CropBox',
    'DisplayedSize',
    'RasterBuffer',
    'CleanedVariant',
    'CleaningPipeline',
    'process_image',
    'setup_logging',
    # Exceptions
    'DrawingCleanerError',
    'ImageLoadError',
    'ExtractionError',
    'ModelError',
    'ValidationError',
]

"""Application services - orchestrate use cases."""

from .cleaning_pipeline import CleaningPipeline, load_source, process_image
from .extractors import (
    AIForegroundExtractor,
    FallbackForegroundExtractor,
    ThresholdForegroundExtractor,
)
from .model_manager import ManagedModel, ModelState, get_shared_model, reset_shared_models

__all__ = [
    'CleaningPipeline',
    'load_source',
    'process_image',
    'AIForegroundExtractor',
    'FallbackForegroundExtractor',
    'ThresholdForegroundExtractor',
    'ManagedModel',
    'ModelState',
    'get_shared_model',
    'reset_shared_models',
]

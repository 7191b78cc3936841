"""Application layer - use cases and orchestration."""

from .services.cleaning_pipeline import CleaningPipeline, process_image
from .services.model_manager import ManagedModel, get_shared_model

__all__ = ['CleaningPipeline', 'process_image', 'ManagedModel', 'get_shared_model']

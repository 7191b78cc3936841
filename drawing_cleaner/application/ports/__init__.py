"""Ports - interfaces for external dependencies (Dependency Inversion)."""

from .background_model import BackgroundRemovalModel, InferenceProgress
from .event_publisher import (
    EventPublisher,
    ProgressCallback,
    ProgressEvent,
    ProgressTracker,
    SimpleEventPublisher,
)
from .foreground_extractor import ForegroundExtractor, StageReporter

__all__ = [
    'BackgroundRemovalModel',
    'InferenceProgress',
    'EventPublisher',
    'ProgressCallback',
    'ProgressEvent',
    'ProgressTracker',
    'SimpleEventPublisher',
    'ForegroundExtractor',
    'StageReporter',
]

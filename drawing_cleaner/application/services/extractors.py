"""Foreground extraction strategies."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from ...config import (
    INFERENCE_PROGRESS_END,
    INFERENCE_PROGRESS_START,
    STAGE_AI_DONE,
    STAGE_AI_REMOVE,
    STAGE_ANALYZE,
    STAGE_FALLBACK,
    STAGE_FINALIZE,
    STAGE_MODEL_DOWNLOAD,
)
from ...domain.entities.raster import RasterBuffer
from ...domain.services.alpha import postprocess_alpha
from ...domain.services.threshold_removal import remove_background_by_threshold
from ...exceptions import ExtractionError
from ..ports.foreground_extractor import ForegroundExtractor, StageReporter
from .model_manager import ManagedModel

logger = logging.getLogger(__name__)


def _noop(step: str, progress: float) -> None:
    pass


def inference_progress(current: int, total: int) -> float:
    """Map model progress into the inference band of the overall scale."""
    if total <= 0:
        return INFERENCE_PROGRESS_START
    fraction = min(1.0, max(0.0, current / total))
    return INFERENCE_PROGRESS_START + fraction * (INFERENCE_PROGRESS_END - INFERENCE_PROGRESS_START)


class ThresholdForegroundExtractor:
    """Deterministic colour-threshold strategy; needs no model."""

    @property
    def name(self) -> str:
        return "threshold"

    def extract(
        self,
        buffer: RasterBuffer,
        sensitivity: float,
        progress: Optional[StageReporter] = None
    ) -> RasterBuffer:
        try:
            return remove_background_by_threshold(buffer, sensitivity)
        except Exception as e:
            raise ExtractionError(
                f"Threshold background removal failed: {e}", strategy=self.name
            ) from e


class AIForegroundExtractor:
    """Model-based strategy with sensitivity-driven alpha post-processing."""

    def __init__(self, model: ManagedModel):
        self._model = model

    @property
    def name(self) -> str:
        return f"ai:{self._model.name}"

    def extract(
        self,
        buffer: RasterBuffer,
        sensitivity: float,
        progress: Optional[StageReporter] = None
    ) -> RasterBuffer:
        report = progress or _noop
        try:
            if not self._model.is_ready:
                report(STAGE_MODEL_DOWNLOAD.step, STAGE_MODEL_DOWNLOAD.progress)
                self._model.ensure_loaded()

            report(STAGE_ANALYZE.step, STAGE_ANALYZE.progress)
            source = buffer.to_pil()

            report(STAGE_AI_REMOVE.step, STAGE_AI_REMOVE.progress)

            def on_inference(current: int, total: int) -> None:
                value = inference_progress(current, total)
                report(f"Processing... {round(value)}%", value)

            result = self._model.remove_background(source, on_inference)
            report(STAGE_AI_DONE.step, STAGE_AI_DONE.progress)

            extracted = self._to_buffer(result, buffer.size)
            alpha = postprocess_alpha(extracted.alpha, sensitivity)

            report(STAGE_FINALIZE.step, STAGE_FINALIZE.progress)
            return extracted.with_alpha(alpha)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(
                f"AI background removal failed: {e}", strategy=self.name
            ) from e

    @staticmethod
    def _to_buffer(result: Image.Image, size: tuple[int, int]) -> RasterBuffer:
        """RGBA buffer at the expected size."""
        result = result.convert("RGBA")
        if result.size != size:
            logger.debug(f"Model returned {result.size}, resizing to {size}")
            result = result.resize(size, Image.Resampling.BILINEAR)
        return RasterBuffer(np.array(result, dtype=np.uint8))


class FallbackForegroundExtractor:
    """Try a primary strategy, fall back to a secondary on ExtractionError."""

    def __init__(self, primary: ForegroundExtractor, fallback: ForegroundExtractor):
        self._primary = primary
        self._fallback = fallback

    @property
    def name(self) -> str:
        return f"{self._primary.name}->{self._fallback.name}"

    def extract(
        self,
        buffer: RasterBuffer,
        sensitivity: float,
        progress: Optional[StageReporter] = None
    ) -> RasterBuffer:
        report = progress or _noop
        try:
            return self._primary.extract(buffer, sensitivity, progress)
        except ExtractionError as primary_error:
            logger.warning(
                f"{self._primary.name} extraction failed, falling back to "
                f"{self._fallback.name}: {primary_error}"
            )
            report(STAGE_FALLBACK.step, STAGE_FALLBACK.progress)

        try:
            return self._fallback.extract(buffer, sensitivity, progress)
        except ExtractionError as fallback_error:
            raise ExtractionError(
                f"Both extraction strategies failed: {fallback_error.message}",
                strategy=self.name
            ) from fallback_error

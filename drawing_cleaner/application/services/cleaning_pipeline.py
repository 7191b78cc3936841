"""Cleaning pipeline - orchestrates load, geometry, extraction and variants."""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ...config import (
    STAGE_BOLD,
    STAGE_CLEAN,
    STAGE_CROP,
    STAGE_DONE,
    STAGE_EXTRACT,
    STAGE_LINE_ART,
    STAGE_LOAD,
    STAGE_ROTATE,
    VariantType,
)
from ...domain.entities.raster import RasterBuffer
from ...domain.entities.variant import CleanedVariant
from ...domain.services.geometry import auto_crop, manual_crop, rotate
from ...domain.services.variants import synthesize_variants
from ...domain.value_objects.config import CleaningOptions
from ...domain.value_objects.geometry import normalize_rotation
from ...exceptions import DrawingCleanerError, ImageLoadError
from ..ports.event_publisher import (
    EventPublisher,
    ProgressCallback,
    ProgressTracker,
    SimpleEventPublisher,
)
from ..ports.foreground_extractor import ForegroundExtractor
from .extractors import (
    AIForegroundExtractor,
    FallbackForegroundExtractor,
    ThresholdForegroundExtractor,
)
from .model_manager import ManagedModel, get_shared_model

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path, Image.Image, np.ndarray, RasterBuffer]

_VARIANT_STAGES = {
    VariantType.CLEAN: STAGE_CLEAN,
    VariantType.BOLD_POSTER: STAGE_BOLD,
    VariantType.MINIMAL_LINE_ART: STAGE_LINE_ART,
}


def _describe(source: Any) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return type(source).__name__


def _decode_upright(img: Image.Image) -> RasterBuffer:
    """Decode and apply the EXIF orientation, as browsers display photos."""
    img.load()
    upright = ImageOps.exif_transpose(img)
    if upright.size != img.size:
        logger.debug(f"Applied EXIF orientation: {img.size} -> {upright.size}")
    return RasterBuffer.from_pil(upright)


def load_source(source: ImageSource) -> RasterBuffer:
    """Decode any supported source into an RGBA buffer.

    Raises:
        ImageLoadError: If the source type is unsupported or cannot be decoded
    """
    if isinstance(source, RasterBuffer):
        return source.copy()

    try:
        if isinstance(source, np.ndarray):
            return RasterBuffer.from_array(source)

        if isinstance(source, Image.Image):
            return RasterBuffer.from_pil(source)

        if isinstance(source, (bytes, bytearray)):
            if not source:
                raise ImageLoadError("Image data is empty", source=_describe(source))
            with Image.open(io.BytesIO(source)) as img:
                return _decode_upright(img)

        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                raise ImageLoadError("Image file not found", source=str(path))
            with Image.open(path) as img:
                return _decode_upright(img)
    except DrawingCleanerError as e:
        if isinstance(e, ImageLoadError):
            raise
        raise ImageLoadError(f"Failed to load image: {e.message}", source=_describe(source)) from e
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageLoadError(f"Failed to load image: {e}", source=_describe(source)) from e

    raise ImageLoadError(
        f"Unsupported image source type: {type(source).__name__}",
        source=_describe(source)
    )


@dataclass
class PipelineContext:
    """Context passed through pipeline steps."""
    source: ImageSource
    rotation: int
    options: CleaningOptions
    progress: ProgressTracker
    buffer: RasterBuffer | None = None
    variants: list[CleanedVariant] = field(default_factory=list)


class PipelineStep:
    """Base class for pipeline steps."""

    def __init__(self, name: str):
        self.name = name

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        """Execute this step and return updated context."""
        raise NotImplementedError


class LoadStep(PipelineStep):
    """Step 1: Decode the source image."""

    def __init__(self):
        super().__init__("load")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.progress(STAGE_LOAD.step, STAGE_LOAD.progress)
        ctx.buffer = load_source(ctx.source)
        logger.info(f"Loaded image {ctx.buffer.width}x{ctx.buffer.height}")
        return ctx


class RotateStep(PipelineStep):
    """Step 2: Apply the user's rotation."""

    def __init__(self):
        super().__init__("rotate")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.progress(STAGE_ROTATE.step, STAGE_ROTATE.progress)
        ctx.buffer = rotate(ctx.buffer, ctx.rotation)
        return ctx


class CropStep(PipelineStep):
    """Step 3: Manual crop when a box is given, auto-crop otherwise."""

    def __init__(self):
        super().__init__("crop")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.progress(STAGE_CROP.step, STAGE_CROP.progress)
        if ctx.options.crop_box is not None:
            ctx.buffer = manual_crop(
                ctx.buffer, ctx.options.crop_box, ctx.options.displayed_image_size
            )
        else:
            ctx.buffer = auto_crop(ctx.buffer)
        logger.debug(f"Cropped to {ctx.buffer.width}x{ctx.buffer.height}")
        return ctx


class ExtractStep(PipelineStep):
    """Step 4: Separate the drawing from its background."""

    def __init__(self, extractor: ForegroundExtractor):
        super().__init__("extract")
        self._extractor = extractor

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.progress(STAGE_EXTRACT.step, STAGE_EXTRACT.progress)
        ctx.buffer = self._extractor.extract(
            ctx.buffer, ctx.options.sensitivity, ctx.progress
        )
        logger.info(
            f"Extracted foreground with {self._extractor.name}: "
            f"{ctx.buffer.count_transparent()} transparent pixels"
        )
        return ctx


class SynthesizeStep(PipelineStep):
    """Step 5: Render the three output variants."""

    def __init__(self):
        super().__init__("synthesize")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        def on_variant(variant_type: VariantType) -> None:
            stage = _VARIANT_STAGES[variant_type]
            ctx.progress(stage.step, stage.progress)

        ctx.variants = synthesize_variants(ctx.buffer, on_variant)
        return ctx


class CleaningPipeline:
    """Turns a photo of a drawing into three cleaned variants.

    Args:
        model: Managed AI model; the shared model for the run's options
            is used if omitted
        progress_callback: Optional subscriber for progress events
        fallback: Strategy used when the AI fails or is disabled
        events: Event publisher; a private one is created if omitted
    """

    def __init__(
        self,
        model: ManagedModel | None = None,
        progress_callback: ProgressCallback | None = None,
        fallback: ForegroundExtractor | None = None,
        events: EventPublisher | None = None
    ):
        self._model = model
        self._fallback = fallback or ThresholdForegroundExtractor()
        self._events = events or SimpleEventPublisher()
        if progress_callback is not None:
            self._events.subscribe(progress_callback)

    def subscribe_to_events(self, callback: ProgressCallback) -> None:
        """Subscribe to progress events."""
        self._events.subscribe(callback)

    def _select_extractor(self, options: CleaningOptions) -> ForegroundExtractor:
        if not options.use_ai:
            return self._fallback
        if self._model is None:
            model = get_shared_model(options.model_type, options.device)
        else:
            model = self._model
            if model.name != options.model_type.value:
                logger.debug(
                    f"Using injected model {model.name}; ignoring requested "
                    f"{options.model_type.value} on {options.device}"
                )
        return FallbackForegroundExtractor(AIForegroundExtractor(model), self._fallback)

    def _build_pipeline(self, options: CleaningOptions) -> list[PipelineStep]:
        """Build processing pipeline."""
        return [
            LoadStep(),
            RotateStep(),
            CropStep(),
            ExtractStep(self._select_extractor(options)),
            SynthesizeStep(),
        ]

    def process_image(
        self,
        source: ImageSource,
        rotation: int = 0,
        options: CleaningOptions | None = None
    ) -> list[CleanedVariant]:
        """Clean a drawing.

        Args:
            source: Encoded bytes, path, PIL image, array or RasterBuffer
            rotation: Clockwise rotation in degrees, a multiple of 90
            options: Cleaning options; defaults are used if omitted

        Returns:
            Clean, bold poster and line art variants, in that order

        Raises:
            ImageLoadError: If the source cannot be decoded
            ValidationError: If rotation or the crop box is invalid
            ExtractionError: If every extraction strategy fails
        """
        start_time = time.time()
        options = options or CleaningOptions()
        rotation = normalize_rotation(rotation)

        ctx = PipelineContext(
            source=source,
            rotation=rotation,
            options=options,
            progress=ProgressTracker(self._events),
        )

        try:
            for step in self._build_pipeline(options):
                logger.debug(f"Executing {step.name}")
                ctx = step.execute(ctx)
        except DrawingCleanerError:
            raise
        except Exception:
            logger.exception("Processing failed")
            raise

        ctx.progress(STAGE_DONE.step, STAGE_DONE.progress)
        elapsed = (time.time() - start_time) * 1000
        logger.info(f"Processing complete in {elapsed:.0f}ms")
        return ctx.variants


def process_image(
    source: ImageSource,
    rotation: int = 0,
    options: CleaningOptions | None = None,
    progress_callback: ProgressCallback | None = None
) -> list[CleanedVariant]:
    """Clean a drawing with a default pipeline and the shared model.

    See :meth:`CleaningPipeline.process_image`.
    """
    options = options or CleaningOptions()
    model = get_shared_model(options.model_type, options.device) if options.use_ai else None
    pipeline = CleaningPipeline(model=model, progress_callback=progress_callback)
    return pipeline.process_image(source, rotation, options)

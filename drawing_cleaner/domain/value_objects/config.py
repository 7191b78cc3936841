"""Configuration value objects with validation."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ...config import DEFAULT_MODEL_TYPE, IMAGE_CONFIG, Backend, ModelType
from .geometry import CropBox, DisplayedSize

logger = logging.getLogger(__name__)


class CleaningOptions(BaseModel):
    """Options for one cleaning run.

    ``sensitivity`` drives every threshold in the extraction stage. Values
    outside 0-100 are clamped rather than rejected.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    sensitivity: float = IMAGE_CONFIG.default_sensitivity
    crop_box: CropBox | None = None
    displayed_image_size: DisplayedSize | None = None
    use_ai: bool = True

    # AI model settings
    model_type: ModelType = DEFAULT_MODEL_TYPE
    device: str = Field(default=Backend.AUTO.value)

    @field_validator('sensitivity', mode='before')
    @classmethod
    def clamp_sensitivity(cls, v: Any) -> float:
        """Clamp sensitivity to [0, 100]."""
        value = float(v)
        clamped = min(IMAGE_CONFIG.max_sensitivity, max(IMAGE_CONFIG.min_sensitivity, value))
        if clamped != value:
            logger.debug(f"Sensitivity {value} clamped to {clamped}")
        return clamped

    @field_validator('crop_box', mode='before')
    @classmethod
    def coerce_crop_box(cls, v: Any) -> Any:
        """Accept a mapping or an (x, y, width, height) sequence."""
        if isinstance(v, dict):
            return CropBox(**v)
        if isinstance(v, (tuple, list)):
            return CropBox(*v)
        return v

    @field_validator('displayed_image_size', mode='before')
    @classmethod
    def coerce_displayed_size(cls, v: Any) -> Any:
        """Accept a mapping or a (width, height) sequence."""
        if isinstance(v, dict):
            return DisplayedSize(**v)
        if isinstance(v, (tuple, list)):
            return DisplayedSize(*v)
        return v

    @field_validator('device')
    @classmethod
    def validate_device(cls, v: str) -> str:
        """Device must be one of the Backend values."""
        return Backend(v).value


__all__ = [
    'CleaningOptions',
    'ModelType',
    'Backend',
]

"""Cleaned variant entity."""

from __future__ import annotations

from dataclasses import dataclass, field

from ...config import VARIANT_NAMES, VariantType
from .raster import RasterBuffer


@dataclass(frozen=True, slots=True)
class CleanedVariant:
    """One named rendering produced by a pipeline run.

    ``image_data`` is the PNG encoding of ``buffer`` and is what
    collaborators display or persist.
    """
    id: str
    name: str
    type: VariantType
    image_data: bytes = field(repr=False)
    buffer: RasterBuffer = field(repr=False)

    @classmethod
    def from_buffer(cls, variant_type: VariantType, buffer: RasterBuffer) -> CleanedVariant:
        """Build a variant of the given type, encoding the buffer as PNG."""
        return cls(
            id=variant_type.value,
            name=VARIANT_NAMES[variant_type],
            type=variant_type,
            image_data=buffer.encode_png(),
            buffer=buffer,
        )

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

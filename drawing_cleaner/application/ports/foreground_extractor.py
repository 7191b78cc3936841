"""Foreground extractor port - interchangeable extraction strategies."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from ...domain.entities.raster import RasterBuffer

# (step label, progress 0-100)
StageReporter = Callable[[str, float], None]


@runtime_checkable
class ForegroundExtractor(Protocol):
    """Port for foreground extraction.

    Implementations make background pixels transparent and raise only
    ExtractionError on failure.
    """

    @property
    def name(self) -> str:
        """Strategy name used in logs and errors."""
        ...

    def extract(
        self,
        buffer: RasterBuffer,
        sensitivity: float,
        progress: Optional[StageReporter] = None
    ) -> RasterBuffer:
        """Extract the foreground of buffer.

        Args:
            buffer: Cropped source buffer
            sensitivity: 0-100
            progress: Optional stage reporter

        Returns:
            New RGBA buffer of the same size

        Raises:
            ExtractionError: If extraction fails
        """
        ...

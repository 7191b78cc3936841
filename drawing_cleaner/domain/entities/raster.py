"""Raster buffer entity - the unit every pipeline stage consumes and produces."""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from ...exceptions import ValidationError

# Type alias
RGBAArray = npt.NDArray[np.uint8]  # Shape (H, W, 4)


@dataclass(frozen=True, slots=True)
class RasterBuffer:
    """A width x height grid of RGBA samples, row-major.

    The wrapped array always has shape ``(height, width, 4)`` and dtype
    ``uint8``. Stages never mutate a buffer they did not create; use
    :meth:`copy` before editing pixels in place.
    """
    data: RGBAArray

    def __post_init__(self) -> None:
        data = self.data
        if not isinstance(data, np.ndarray):
            raise ValidationError("RasterBuffer data must be a numpy array", field="data")
        if data.dtype != np.uint8:
            raise ValidationError(
                f"RasterBuffer data must be uint8, got {data.dtype}", field="data"
            )
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValidationError(
                f"RasterBuffer data must have shape (H, W, 4), got {data.shape}",
                field="data"
            )
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValidationError("RasterBuffer must be at least 1x1", field="data")

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def rgb(self) -> npt.NDArray[np.uint8]:
        """View of the colour channels, shape (H, W, 3)."""
        return self.data[:, :, :3]

    @property
    def alpha(self) -> npt.NDArray[np.uint8]:
        """View of the alpha channel, shape (H, W)."""
        return self.data[:, :, 3]

    def copy(self) -> RasterBuffer:
        return RasterBuffer(self.data.copy())

    def with_alpha(self, alpha: npt.NDArray[np.uint8]) -> RasterBuffer:
        """Return a new buffer with the alpha channel replaced."""
        data = self.data.copy()
        data[:, :, 3] = alpha
        return RasterBuffer(data)

    def count_transparent(self) -> int:
        """Number of fully transparent pixels."""
        return int(np.count_nonzero(self.alpha == 0))

    @classmethod
    def blank(cls, width: int, height: int, color: tuple[int, int, int, int] = (255, 255, 255, 255)) -> RasterBuffer:
        """Create a buffer filled with one colour."""
        if width <= 0 or height <= 0:
            raise ValidationError(f"Invalid buffer size {width}x{height}")
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :] = color
        return cls(data)

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> RasterBuffer:
        """Create from an array of shape (H, W), (H, W, 3) or (H, W, 4)."""
        arr = np.asarray(array)
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr, np.full_like(arr, 255)], axis=-1)
        elif arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        return cls(np.ascontiguousarray(arr))

    @classmethod
    def from_pil(cls, image: object) -> RasterBuffer:
        """Create from a PIL image of any mode."""
        return cls(np.array(image.convert("RGBA"), dtype=np.uint8))

    def to_pil(self) -> object:
        """Convert to an RGBA PIL image."""
        # Lazy import - keeps the entity light
        from PIL import Image as PILImage
        return PILImage.fromarray(self.data)

    def encode_png(self) -> bytes:
        """Encode as a PNG byte stream."""
        buf = io.BytesIO()
        self.to_pil().save(buf, format="PNG")
        return buf.getvalue()

    def save(self, path: Path | str) -> None:
        """Save to path; format is inferred from the suffix."""
        self.to_pil().save(path)

"""Geometry value objects."""

from __future__ import annotations

from dataclasses import dataclass

from ...exceptions import ValidationError

VALID_ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)


def normalize_rotation(degrees: int) -> int:
    """Normalize a rotation to one of 0, 90, 180 or 270.

    Raises:
        ValidationError: If degrees is not a multiple of 90
    """
    if int(degrees) != degrees or int(degrees) % 90 != 0:
        raise ValidationError(
            f"Rotation must be a multiple of 90 degrees, got {degrees}",
            field="rotation"
        )
    return int(degrees) % 360


@dataclass(frozen=True, slots=True)
class CropBox:
    """Rectangle in some coordinate space (display or buffer pixels)."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Crop box must have positive size, got {self.width}x{self.height}",
                field="crop_box"
            )

    def scaled(self, scale_x: float, scale_y: float) -> CropBox:
        """Scale every field by its axis factor."""
        return CropBox(
            self.x * scale_x,
            self.y * scale_y,
            self.width * scale_x,
            self.height * scale_y
        )


@dataclass(frozen=True, slots=True)
class DisplayedSize:
    """On-screen size of the image when the crop box was drawn."""
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Displayed size must be positive, got {self.width}x{self.height}",
                field="displayed_image_size"
            )


@dataclass(frozen=True, slots=True)
class PixelRect:
    """Integer rectangle in buffer space, half-open on the right/bottom."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @classmethod
    def from_bounds(cls, min_x: int, min_y: int, max_x: int, max_y: int) -> PixelRect:
        """Create from inclusive pixel bounds."""
        return cls(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)

    def expand(self, pixels: int, max_width: int, max_height: int) -> PixelRect:
        """Expand in all directions, clamped to a width x height area."""
        min_x = max(0, self.x - pixels)
        min_y = max(0, self.y - pixels)
        max_x = min(max_width - 1, self.right - 1 + pixels)
        max_y = min(max_height - 1, self.bottom - 1 + pixels)
        return PixelRect.from_bounds(min_x, min_y, max_x, max_y)

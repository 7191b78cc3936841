"""Background model port - interface for AI background removal."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from PIL import Image

# (current, total) steps reported during inference
InferenceProgress = Callable[[int, int], None]


@runtime_checkable
class BackgroundRemovalModel(Protocol):
    """Port for background removal models.

    Implementations: RMBG (transformers), rembg sessions.
    """

    @property
    def name(self) -> str:
        """Model name."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if model dependencies are installed."""
        ...

    @property
    def is_loaded(self) -> bool:
        """Check if the model is in memory."""
        ...

    def load(self) -> None:
        """Load model into memory."""
        ...

    def unload(self) -> None:
        """Unload model and free memory.

        Pipeline runs never unload a shared model. Callers that need the
        memory back may call this between runs.
        """
        ...

    def remove_background(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        """Return an RGBA copy of image with the background made transparent.

        Args:
            image: Source image
            progress_callback: Optional (current, total) inference progress

        Returns:
            RGBA image; alpha is the predicted foreground probability
        """
        ...

"""Abstract base class for background removal models."""

import gc
import logging
from abc import ABC, abstractmethod
from typing import Optional

from PIL import Image

from ..application.ports.background_model import InferenceProgress
from ..config import MODEL_CONFIGS, ModelType

logger = logging.getLogger(__name__)


class BaseBackgroundModel(ABC):
    """Abstract base class for background removal models."""

    def __init__(self, model_type: ModelType, device: str = "auto"):
        """Initialize the model.

        Args:
            model_type: Which model to load
            device: Compute device ('cuda', 'mps', 'cpu', or 'auto')
        """
        self.model_type = model_type
        self.config = MODEL_CONFIGS[model_type]
        self.requested_device = device
        self._model = None

    @property
    def name(self) -> str:
        return self.model_type.value

    @property
    def is_loaded(self) -> bool:
        """Check if the model is loaded."""
        return self._model is not None

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if model dependencies are installed."""
        pass

    @abstractmethod
    def load(self) -> None:
        """Load the model into memory."""
        pass

    def unload(self) -> None:
        """Unload the model and free memory.

        The pipeline keeps a loaded model for the life of the process and
        never calls this; it is for callers that manage memory themselves.
        """
        if self._model is not None:
            logger.info(f"Unloading {self.__class__.__name__}...")
            self._model = None
            gc.collect()
            logger.info(f"{self.__class__.__name__} unloaded")

    @abstractmethod
    def _predict_mask(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        """Predict a foreground mask (mode 'L', same size as image)."""
        pass

    def remove_background(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        """Run inference and return image with the mask as its alpha channel.

        Args:
            image: Input image
            progress_callback: Optional (current, total) inference progress

        Returns:
            RGBA image the same size as the input
        """
        if not self.is_loaded:
            self.load()

        mask = self._predict_mask(image, progress_callback)
        if mask.size != image.size:
            logger.debug(f"Resizing mask from {mask.size} to {image.size}")
            mask = mask.resize(image.size, Image.Resampling.BILINEAR)

        result = image.convert("RGBA")
        result.putalpha(mask.convert("L"))
        return result

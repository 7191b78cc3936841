"""rembg session implementation (U2-Net / IS-Net via onnxruntime)."""

import logging
from typing import Optional

from PIL import Image

from ..application.ports.background_model import InferenceProgress
from ..config import ModelType
from ..exceptions import ModelError
from .base import BaseBackgroundModel

logger = logging.getLogger(__name__)


class RembgModel(BaseBackgroundModel):
    """Background removal through a rembg inference session."""

    def __init__(self, model_type: ModelType = ModelType.ISNET_GENERAL, device: str = "auto"):
        super().__init__(model_type, device)
        if device not in ("auto", "cpu"):
            logger.warning(
                f"rembg picks its own onnxruntime provider, ignoring device '{device}'"
            )

    @property
    def is_available(self) -> bool:
        """Check if required dependencies are installed."""
        try:
            import rembg  # noqa: F401
            return True
        except ImportError:
            return False

    def load(self) -> None:
        """Create the inference session (downloads the model on first use)."""
        if self.is_loaded:
            logger.debug("Session already created")
            return

        try:
            from rembg import new_session
        except ImportError as e:
            raise ModelError(
                "rembg is not installed. Install with: pip install 'drawing-cleaner[ai]'",
                model_id=self.config.model_id
            ) from e

        logger.info(f"Creating rembg session for {self.config.model_id}...")
        self._model = new_session(self.config.model_id)
        logger.info("rembg session ready")

    def _predict_mask(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        from rembg import remove

        if progress_callback:
            progress_callback(0, 1)
        mask = remove(image.convert("RGB"), session=self._model, only_mask=True)
        if progress_callback:
            progress_callback(1, 1)
        return mask

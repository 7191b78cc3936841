"""BRIA RMBG model implementation (transformers + torch)."""

import logging
from typing import Optional

import numpy as np
from PIL import Image

from ..application.ports.background_model import InferenceProgress
from ..config import ModelType
from ..exceptions import ModelError
from ..utils.env import load_hf_token
from .base import BaseBackgroundModel

logger = logging.getLogger(__name__)

# RMBG-1.4 normalizes with mean 0.5 and std 1.0
_NORM_MEAN = 0.5
_NORM_STD = 1.0


class RMBGModel(BaseBackgroundModel):
    """BRIA RMBG segmentation model loaded from the Hugging Face Hub."""

    def __init__(self, model_type: ModelType = ModelType.RMBG_1_4, device: str = "auto"):
        super().__init__(model_type, device)
        self.device: Optional[str] = None

    @property
    def is_available(self) -> bool:
        """Check if required dependencies are installed."""
        try:
            import torch  # noqa: F401
            import transformers  # noqa: F401
            return True
        except ImportError:
            return False

    @staticmethod
    def _resolve_device(device: str) -> str:
        """Resolve device string to actual device.

        Args:
            device: Device string ('cuda', 'mps', 'cpu', or 'auto')

        Returns:
            Resolved device string
        """
        import torch

        if device == "auto":
            if torch.cuda.is_available():
                return "cuda"
            elif torch.backends.mps.is_available():
                return "mps"
            return "cpu"

        if device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, falling back to CPU")
            return "cpu"
        if device == "mps" and not torch.backends.mps.is_available():
            logger.warning("MPS requested but not available, falling back to CPU")
            return "cpu"

        return device

    def load(self) -> None:
        """Load the model."""
        if self.is_loaded:
            logger.debug("Model already loaded")
            return

        try:
            from transformers import AutoModelForImageSegmentation
        except ImportError as e:
            raise ModelError(
                "RMBG requires torch and transformers. Install with: pip install 'drawing-cleaner[ai]'",
                model_id=self.config.model_id
            ) from e

        self.device = self._resolve_device(self.requested_device)
        logger.info(f"Loading {self.config.model_id}...")

        model = AutoModelForImageSegmentation.from_pretrained(
            self.config.model_id,
            trust_remote_code=True,
            token=load_hf_token() if self.config.requires_auth else None
        )
        model.to(self.device)
        model.eval()
        self._model = model
        logger.info(f"Model loaded on {self.device}")

    def unload(self) -> None:
        """Unload the model and release GPU memory.

        Not called by the pipeline. See :meth:`BaseBackgroundModel.unload`.
        """
        super().unload()
        import torch
        if torch.cuda.is_available():
            torch.cuda.empty_cache()

    def _predict_mask(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        import torch
        import torch.nn.functional as F

        size = self.config.input_size
        orig_width, orig_height = image.size

        rgb = np.array(image.convert("RGB"), dtype=np.float32)
        tensor = torch.from_numpy(rgb).permute(2, 0, 1).unsqueeze(0)
        tensor = F.interpolate(tensor, size=(size, size), mode="bilinear", align_corners=False)
        tensor = (tensor / 255.0 - _NORM_MEAN) / _NORM_STD
        if progress_callback:
            progress_callback(1, 3)

        with torch.no_grad():
            outputs = self._model(tensor.to(self.device))
        if progress_callback:
            progress_callback(2, 3)

        pred = outputs[0][0]
        pred = F.interpolate(pred, size=(orig_height, orig_width), mode="bilinear", align_corners=False)
        pred = pred.squeeze()
        lo, hi = pred.min(), pred.max()
        pred = (pred - lo) / (hi - lo) if hi > lo else torch.zeros_like(pred)
        mask = (pred * 255).clamp(0, 255).to(torch.uint8).cpu().numpy()
        if progress_callback:
            progress_callback(3, 3)

        return Image.fromarray(mask)

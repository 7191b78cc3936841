"""Lifecycle management for the shared background removal model."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from PIL import Image

from ...config import Backend, ModelType
from ...exceptions import ModelError
from ..ports.background_model import BackgroundRemovalModel, InferenceProgress

logger = logging.getLogger(__name__)


class ModelState(str, Enum):
    """Load state of a managed model."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ManagedModel:
    """Wraps a model with lazy, single-flight loading.

    * The first ``ensure_loaded`` call loads the model; concurrent callers
      wait for that same load instead of starting another one.
    * A failed load leaves the state FAILED and is retried on the next call.
    * Inference calls are serialized, so overlapping pipeline runs queue on
      the model rather than running it concurrently.
    * There is no teardown; a ready model stays loaded.
    """

    def __init__(self, model: BackgroundRemovalModel):
        self._model = model
        self._state = ModelState.UNLOADED
        self._last_error: Optional[BaseException] = None
        self._load_lock = threading.Lock()
        self._inference_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._model.name

    @property
    def model(self) -> BackgroundRemovalModel:
        return self._model

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ModelState.READY

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    def ensure_loaded(self) -> None:
        """Load the model if needed.

        Raises:
            ModelError: If the model cannot be loaded
        """
        if self._state is ModelState.READY:
            return

        with self._load_lock:
            # Another caller may have finished loading while we waited
            if self._state is ModelState.READY:
                return

            self._state = ModelState.LOADING
            logger.info(f"Loading background removal model {self.name}")
            try:
                self._model.load()
            except Exception as e:
                self._state = ModelState.FAILED
                self._last_error = e
                logger.error(f"Failed to load model {self.name}: {e}")
                if isinstance(e, ModelError):
                    raise
                raise ModelError(f"Failed to load model {self.name}: {e}") from e

            self._state = ModelState.READY
            self._last_error = None
            logger.info(f"Model {self.name} ready")

    def remove_background(
        self,
        image: Image.Image,
        progress_callback: Optional[InferenceProgress] = None
    ) -> Image.Image:
        """Run inference, loading first if needed.

        Raises:
            ModelError: If loading or inference fails
        """
        self.ensure_loaded()
        with self._inference_lock:
            try:
                return self._model.remove_background(image, progress_callback)
            except ModelError:
                raise
            except Exception as e:
                raise ModelError(f"Inference failed for {self.name}: {e}") from e


ModelProvider = Callable[[], BackgroundRemovalModel]

_shared_models: dict[tuple[ModelType, str], ManagedModel] = {}
_registry_lock = threading.Lock()


def get_shared_model(
    model_type: ModelType | str,
    device: str = Backend.AUTO.value,
    factory: Optional[ModelProvider] = None
) -> ManagedModel:
    """Process-wide managed model for (model_type, device).

    The instance is created on first request and reused by every later
    pipeline run. Nothing is loaded until inference is requested.

    Args:
        model_type: Model to use
        device: Compute device
        factory: Optional constructor overriding ModelFactory

    Returns:
        Shared managed model
    """
    model_type = ModelType(model_type)
    key = (model_type, device)
    with _registry_lock:
        managed = _shared_models.get(key)
        if managed is None:
            if factory is None:
                from ...models import ModelFactory
                model = ModelFactory.create(model_type, device)
            else:
                model = factory()
            managed = ManagedModel(model)
            _shared_models[key] = managed
            logger.debug(f"Registered shared model {model_type.value} on {device}")
        return managed


def reset_shared_models() -> None:
    """Forget every shared model (used by tests)."""
    with _registry_lock:
        _shared_models.clear()

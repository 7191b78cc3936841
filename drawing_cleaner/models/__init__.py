"""AI models for background removal."""

from ..config import MODEL_CONFIGS, ModelBackend, ModelType
from .base import BaseBackgroundModel
from .rembg_model import RembgModel
from .rmbg_model import RMBGModel


# Backend to class mapping
_BACKEND_MAP: dict[ModelBackend, type[BaseBackgroundModel]] = {
    ModelBackend.TRANSFORMERS: RMBGModel,
    ModelBackend.REMBG: RembgModel,
}


class ModelFactory:
    """Factory for creating model instances."""

    @staticmethod
    def create(
        model_type: ModelType | str,
        device: str = "auto"
    ) -> BaseBackgroundModel:
        """Create a model instance.

        Args:
            model_type: Model type enum or string
            device: Compute device

        Returns:
            Configured (not yet loaded) model instance

        Raises:
            ValueError: If model type is not supported
        """
        if isinstance(model_type, str):
            model_type = ModelType(model_type)

        if model_type not in MODEL_CONFIGS:
            raise ValueError(f"Unsupported model type: {model_type}")

        model_class = _BACKEND_MAP[MODEL_CONFIGS[model_type].backend]
        return model_class(model_type=model_type, device=device)


def get_available_models() -> list[str]:
    """Get list of available model names."""
    return [m.value for m in ModelType]


__all__ = [
    'BaseBackgroundModel',
    'RMBGModel',
    'RembgModel',
    'ModelFactory',
    'get_available_models',
]

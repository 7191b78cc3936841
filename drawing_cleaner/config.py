"""Configuration and constants for the Drawing Cleaner project."""

from dataclasses import dataclass
from enum import Enum


class ModelType(str, Enum):
    """Supported background removal models."""
    RMBG_1_4 = "RMBG-1.4"
    U2NET = "u2net"
    U2NETP = "u2netp"
    ISNET_GENERAL = "isnet-general-use"


class ModelBackend(str, Enum):
    """Library that runs a model."""
    TRANSFORMERS = "transformers"
    REMBG = "rembg"


class Backend(str, Enum):
    """Compute backend options."""
    AUTO = "auto"
    CUDA = "cuda"
    MPS = "mps"
    CPU = "cpu"


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for a background removal model."""
    model_id: str
    backend: ModelBackend
    input_size: int = 1024
    requires_auth: bool = False


# Model configurations
MODEL_CONFIGS: dict[ModelType, ModelConfig] = {
    ModelType.RMBG_1_4: ModelConfig(
        model_id="briaai/RMBG-1.4",
        backend=ModelBackend.TRANSFORMERS,
        input_size=1024,
    ),
    ModelType.U2NET: ModelConfig(
        model_id="u2net",
        backend=ModelBackend.REMBG,
        input_size=320,
    ),
    # "small" model
    ModelType.U2NETP: ModelConfig(
        model_id="u2netp",
        backend=ModelBackend.REMBG,
        input_size=320,
    ),
    # "medium" model
    ModelType.ISNET_GENERAL: ModelConfig(
        model_id="isnet-general-use",
        backend=ModelBackend.REMBG,
        input_size=1024,
    ),
}

DEFAULT_MODEL_TYPE = ModelType.RMBG_1_4


@dataclass(frozen=True)
class ImageProcessingConfig:
    """Constants for the cleaning pipeline."""
    # Auto-crop
    autocrop_max_brightness: float = 230.0  # Colored strokes are darker than this
    autocrop_min_saturation: float = 0.1  # ...and more saturated than this
    autocrop_dark_brightness: float = 200.0  # Monochrome fallback pass
    autocrop_margin: int = 10

    # Legacy threshold removal
    legacy_brightness_base: float = 220.0
    legacy_brightness_slope: float = 1.5
    legacy_saturation_base: float = 0.15
    legacy_saturation_divisor: float = 500.0
    legacy_boost_factor: float = 1.2

    # AI post-processing
    alpha_threshold_scale: float = 2.55  # sensitivity 0-100 -> alpha 0-255

    # Bold poster
    posterize_levels: int = 4
    poster_boost_factor: float = 1.6

    # Line art
    luminance_weights: tuple[float, float, float] = (0.299, 0.587, 0.114)
    sobel_edge_threshold: float = 40.0

    # Sensitivity
    default_sensitivity: float = 70.0
    min_sensitivity: float = 0.0
    max_sensitivity: float = 100.0


IMAGE_CONFIG = ImageProcessingConfig()


class VariantType(str, Enum):
    """Kinds of cleaned variant produced by one run."""
    CLEAN = "clean"
    BOLD_POSTER = "bold-poster"
    MINIMAL_LINE_ART = "minimal-line-art"


VARIANT_NAMES: dict[VariantType, str] = {
    VariantType.CLEAN: "Clean Original",
    VariantType.BOLD_POSTER: "Bold Poster",
    VariantType.MINIMAL_LINE_ART: "Minimal Line Art",
}


@dataclass(frozen=True)
class ProgressStage:
    """A labelled point on the 0-100 progress scale."""
    step: str
    progress: float


# Pipeline progress stages
STAGE_LOAD = ProgressStage("Loading image...", 10)
STAGE_ROTATE = ProgressStage("Rotating...", 15)
STAGE_CROP = ProgressStage("Cropping...", 20)
STAGE_EXTRACT = ProgressStage("Removing background...", 35)
STAGE_MODEL_DOWNLOAD = ProgressStage("Downloading AI model (one-time setup)...", 40)
STAGE_ANALYZE = ProgressStage("Analyzing artwork...", 50)
STAGE_AI_REMOVE = ProgressStage("Removing background with AI...", 60)
STAGE_AI_DONE = ProgressStage("Processing... 80%", 80)
STAGE_FINALIZE = ProgressStage("Finalizing extraction...", 85)
STAGE_FALLBACK = ProgressStage("Using fallback algorithm...", 40)
STAGE_CLEAN = ProgressStage("Creating clean variant...", 88)
STAGE_BOLD = ProgressStage("Creating bold poster variant...", 92)
STAGE_LINE_ART = ProgressStage("Creating line art variant...", 96)
STAGE_DONE = ProgressStage("Complete!", 100)

# Inference progress is mapped into this band
INFERENCE_PROGRESS_START = 60.0
INFERENCE_PROGRESS_END = 80.0


# File handling - formats Pillow can decode reliably
SUPPORTED_IMAGE_EXTENSIONS: tuple[str, ...] = (
    '.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tiff', '.tif', '.webp',
)

# Environment
ENV_FILE = ".env"
HF_TOKEN_KEY = "HF_TOKEN"


# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

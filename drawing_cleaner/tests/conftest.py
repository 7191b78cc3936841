"""Shared fixtures for pipeline and model tests."""

from typing import Optional

import numpy as np
import pytest
from PIL import Image

from ..application.services.model_manager import reset_shared_models
from ..domain.entities.raster import RasterBuffer


class FakeModel:
    """In-memory stand-in for a background removal model.

    The returned alpha is ``alpha_value`` everywhere, unless ``mask`` is set.
    """

    def __init__(
        self,
        alpha_value: int = 255,
        mask: Optional[np.ndarray] = None,
        fail_load: bool = False,
        fail_inference: bool = False
    ):
        self.alpha_value = alpha_value
        self.mask = mask
        self.fail_load = fail_load
        self.fail_inference = fail_inference
        self.load_calls = 0
        self.inference_calls = 0
        self._loaded = False

    @property
    def name(self) -> str:
        return "fake"

    @property
    def is_available(self) -> bool:
        return True

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        self.load_calls += 1
        if self.fail_load:
            raise RuntimeError("weights unavailable")
        self._loaded = True

    def unload(self) -> None:
        self._loaded = False

    def remove_background(self, image, progress_callback=None):
        self.inference_calls += 1
        if self.fail_inference:
            raise RuntimeError("inference exploded")
        if progress_callback:
            progress_callback(0, 2)
            progress_callback(1, 2)
            progress_callback(2, 2)
        if self.mask is not None:
            alpha = Image.fromarray(self.mask.astype(np.uint8))
        else:
            alpha = Image.new("L", image.size, self.alpha_value)
        result = image.convert("RGBA")
        result.putalpha(alpha)
        return result


@pytest.fixture(autouse=True)
def _isolated_shared_models():
    reset_shared_models()
    yield
    reset_shared_models()


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def noise_image():
    """400x400 opaque random image with saturated red corners."""
    rng = np.random.default_rng(1234)
    data = rng.integers(0, 256, size=(400, 400, 4), dtype=np.uint8)
    data[:, :, 3] = 255
    for y, x in ((0, 0), (0, 399), (399, 0), (399, 399)):
        data[y, x, :3] = (255, 0, 0)
    return RasterBuffer(data)


@pytest.fixture
def drawing_on_paper():
    """White page with a red square in the middle, as RGBA buffer."""
    buffer = RasterBuffer.blank(100, 80)
    data = buffer.data.copy()
    data[30:50, 40:60, :3] = (220, 30, 30)
    return RasterBuffer(data)

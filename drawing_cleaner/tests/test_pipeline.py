"""Tests for the cleaning pipeline."""

import io
import logging
import threading

import numpy as np
import pytest
from PIL import Image

from ..application.ports.event_publisher import ProgressTracker, SimpleEventPublisher
from ..application.services.cleaning_pipeline import (
    CleaningPipeline,
    load_source,
    process_image,
)
from ..application.services.model_manager import ManagedModel, get_shared_model
from ..config import ModelType
from ..domain.value_objects.config import CleaningOptions
from ..exceptions import ExtractionError, ImageLoadError, ValidationError
from .conftest import FakeModel


def _expected_legacy_transparent(data):
    rgb = data[:, :, :3].astype(np.float64)
    bright = rgb.sum(axis=-1) / 3
    cmax = rgb.max(axis=-1)
    cmin = rgb.min(axis=-1)
    sat = np.where(cmax > 0, (cmax - cmin) / np.where(cmax > 0, cmax, 1), 0)
    return int(np.count_nonzero((bright > 220 - 70 * 1.5) | (sat < 0.15 + 70 / 500)))


def _png_bytes(buffer):
    return buffer.encode_png()


class TestEndToEnd:
    """Full runs without a model."""

    def test_rotated_square_threshold_run(self, noise_image):
        """400x400, rotation 90, threshold extraction at sensitivity 70."""
        pipeline = CleaningPipeline()
        options = CleaningOptions(use_ai=False, sensitivity=70)

        variants = pipeline.process_image(noise_image, rotation=90, options=options)

        assert [v.id for v in variants] == ["clean", "bold-poster", "minimal-line-art"]
        for variant in variants:
            assert (variant.width, variant.height) == (400, 400)

        rotated = np.rot90(noise_image.data, k=-1)
        assert variants[0].buffer.count_transparent() == _expected_legacy_transparent(rotated)

    def test_png_bytes_source(self, drawing_on_paper):
        variants = CleaningPipeline().process_image(
            _png_bytes(drawing_on_paper), options=CleaningOptions(use_ai=False)
        )
        # Auto-crop keeps the square plus a 10px margin
        assert variants[0].buffer.size == (40, 40)

    def test_path_source(self, tmp_path, drawing_on_paper):
        path = tmp_path / "drawing.png"
        drawing_on_paper.save(path)
        variants = CleaningPipeline().process_image(str(path), options=CleaningOptions(use_ai=False))
        assert len(variants) == 3

    def test_manual_crop(self, noise_image):
        options = CleaningOptions(
            use_ai=False,
            crop_box=(10, 20, 50, 25),
            displayed_image_size=(200, 100),
        )
        variants = CleaningPipeline().process_image(noise_image, options=options)
        assert variants[0].buffer.size == (100, 100)

    def test_decoded_variant_matches_buffer(self, drawing_on_paper):
        variants = CleaningPipeline().process_image(
            drawing_on_paper, options=CleaningOptions(use_ai=False)
        )
        for variant in variants:
            decoded = np.array(Image.open(io.BytesIO(variant.image_data)).convert("RGBA"))
            assert np.array_equal(decoded, variant.buffer.data)


class TestExtractionSelection:
    """AI path, fallback and failure."""

    def test_ai_path(self, noise_image, fake_model):
        pipeline = CleaningPipeline(model=ManagedModel(fake_model))
        variants = pipeline.process_image(noise_image, options=CleaningOptions(sensitivity=70))

        assert fake_model.inference_calls == 1
        assert variants[0].buffer.count_transparent() == 0

    def test_no_ai_skips_model(self, noise_image, fake_model):
        pipeline = CleaningPipeline(model=ManagedModel(fake_model))
        pipeline.process_image(noise_image, options=CleaningOptions(use_ai=False))
        assert fake_model.load_calls == 0
        assert fake_model.inference_calls == 0

    def test_falls_back_to_threshold(self, noise_image):
        pipeline = CleaningPipeline(model=ManagedModel(FakeModel(fail_load=True)))
        variants = pipeline.process_image(noise_image, options=CleaningOptions(sensitivity=70))

        expected = CleaningPipeline().process_image(
            noise_image, options=CleaningOptions(use_ai=False, sensitivity=70)
        )
        assert np.array_equal(variants[0].buffer.data, expected[0].buffer.data)

    def test_injected_model_mismatch_logged(self, noise_image, fake_model, caplog):
        pipeline = CleaningPipeline(model=ManagedModel(fake_model))
        with caplog.at_level(logging.DEBUG, logger="drawing_cleaner.application.services.cleaning_pipeline"):
            pipeline.process_image(noise_image, options=CleaningOptions(model_type="u2netp"))

        assert "Using injected model fake; ignoring requested u2netp" in caplog.text
        assert fake_model.inference_calls == 1

    def test_total_failure(self, noise_image):
        class BrokenExtractor:
            name = "broken"

            def extract(self, buffer, sensitivity, progress=None):
                raise ExtractionError("still broken", strategy=self.name)

        pipeline = CleaningPipeline(
            model=ManagedModel(FakeModel(fail_inference=True)),
            fallback=BrokenExtractor()
        )
        with pytest.raises(ExtractionError):
            pipeline.process_image(noise_image)


def _rotated_jpeg(orientation):
    """40x20 JPEG, red left half, blue right half, with an EXIF orientation."""
    img = Image.new("RGB", (40, 20), (0, 0, 255))
    img.paste((255, 0, 0), (0, 0, 20, 20))
    exif = Image.Exif()
    exif[0x0112] = orientation
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif, quality=95)
    return buf.getvalue()


class TestOrientation:
    """Decoded photos come out the way they are displayed."""

    def test_bytes_rotated_upright(self):
        buffer = load_source(_rotated_jpeg(6))
        assert buffer.size == (20, 40)
        # Orientation 6 turns the stored left edge into the top edge
        top, bottom = buffer.data[5, 10], buffer.data[35, 10]
        assert top[0] > 200 and top[2] < 60
        assert bottom[2] > 200 and bottom[0] < 60

    def test_path_rotated_upright(self, tmp_path):
        path = tmp_path / "phone.jpg"
        path.write_bytes(_rotated_jpeg(6))
        assert load_source(path).size == (20, 40)

    def test_normal_orientation_unchanged(self):
        assert load_source(_rotated_jpeg(1)).size == (40, 20)

    def test_crop_measured_against_upright_image(self):
        options = CleaningOptions(
            use_ai=False,
            crop_box=(0, 0, 100, 50),
            displayed_image_size=(100, 200),
        )
        variants = CleaningPipeline().process_image(_rotated_jpeg(6), options=options)
        assert variants[0].buffer.size == (20, 10)


class TestLoadFailures:
    """Undecodable sources are fatal."""

    def test_garbage_bytes(self):
        with pytest.raises(ImageLoadError):
            CleaningPipeline().process_image(b"definitely not an image")

    def test_empty_bytes(self):
        with pytest.raises(ImageLoadError):
            load_source(b"")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            load_source(tmp_path / "nope.png")

    def test_unsupported_type(self):
        with pytest.raises(ImageLoadError):
            load_source(12345)

    def test_bad_array(self):
        with pytest.raises(ImageLoadError):
            load_source(np.zeros((4, 4, 2), dtype=np.uint8))

    def test_no_progress_after_load_failure(self):
        events = []
        pipeline = CleaningPipeline(progress_callback=events.append)
        with pytest.raises(ImageLoadError):
            pipeline.process_image(b"garbage")
        assert [e.step for e in events] == ["Loading image..."]

    def test_invalid_rotation(self, noise_image):
        with pytest.raises(ValidationError):
            CleaningPipeline().process_image(noise_image, rotation=45)


class TestProgress:
    """Progress reporting."""

    def test_threshold_run_sequence(self, drawing_on_paper):
        events = []
        CleaningPipeline(progress_callback=events.append).process_image(
            drawing_on_paper, options=CleaningOptions(use_ai=False)
        )
        assert [e.step for e in events] == [
            "Loading image...",
            "Rotating...",
            "Cropping...",
            "Removing background...",
            "Creating clean variant...",
            "Creating bold poster variant...",
            "Creating line art variant...",
            "Complete!",
        ]
        assert events[-1].progress == 100

    def test_monotonic_with_fallback(self, noise_image):
        events = []
        pipeline = CleaningPipeline(
            model=ManagedModel(FakeModel(fail_inference=True)),
            progress_callback=events.append
        )
        pipeline.process_image(noise_image)

        values = [e.progress for e in events]
        assert values == sorted(values)
        assert "Using fallback algorithm..." in [e.step for e in events]
        assert values[-1] == 100

    def test_ai_progress_band(self, noise_image, fake_model):
        events = []
        pipeline = CleaningPipeline(model=ManagedModel(fake_model))
        pipeline.subscribe_to_events(events.append)
        pipeline.process_image(noise_image)

        values = [e.progress for e in events]
        assert values == sorted(values)
        assert 70 in values
        assert "Finalizing extraction..." in [e.step for e in events]

    def test_callback_errors_do_not_abort(self, drawing_on_paper):
        def explode(event):
            raise RuntimeError("ui went away")

        variants = CleaningPipeline(progress_callback=explode).process_image(
            drawing_on_paper, options=CleaningOptions(use_ai=False)
        )
        assert len(variants) == 3

    def test_tracker_clamps(self):
        events = []
        publisher = SimpleEventPublisher()
        publisher.subscribe(events.append)
        tracker = ProgressTracker(publisher)

        tracker("a", 50)
        tracker("b", 40)
        tracker("c", 120)
        assert [e.progress for e in events] == [50, 50, 100]
        assert tracker.current == 100


class TestSharedModelRuns:
    """Module-level entry point and concurrent runs."""

    def test_process_image_uses_shared_model(self, noise_image):
        model = FakeModel()
        get_shared_model(ModelType.RMBG_1_4, "auto", factory=lambda: model)

        variants = process_image(noise_image, 0, CleaningOptions())
        assert len(variants) == 3
        assert model.inference_calls == 1

        process_image(noise_image, 180, CleaningOptions())
        assert model.load_calls == 1
        assert model.inference_calls == 2

    def test_model_stays_loaded_between_runs(self, noise_image, fake_model):
        """Runs never unload the model; only an explicit unload does."""
        managed = ManagedModel(fake_model)
        CleaningPipeline(model=managed).process_image(noise_image)
        assert fake_model.is_loaded

        CleaningPipeline(model=managed).process_image(noise_image)
        assert fake_model.is_loaded
        assert fake_model.load_calls == 1

    def test_concurrent_runs_load_once(self, noise_image):
        model = FakeModel()
        managed = ManagedModel(model)
        results = []

        def run():
            pipeline = CleaningPipeline(model=managed)
            results.append(pipeline.process_image(noise_image))

        threads = [threading.Thread(target=run) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 4
        assert model.load_calls == 1
        assert model.inference_calls == 4

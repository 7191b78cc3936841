"""Command line interface for the cleaning pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ...application.services.cleaning_pipeline import CleaningPipeline
from ...application.services.model_manager import get_shared_model
from ...config import (
    DEFAULT_MODEL_TYPE,
    IMAGE_CONFIG,
    SUPPORTED_IMAGE_EXTENSIONS,
    Backend,
    ModelType,
)
from ...domain.value_objects.config import CleaningOptions
from ...domain.value_objects.geometry import VALID_ROTATIONS
from ...exceptions import DrawingCleanerError
from ...utils.env import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="drawing-cleaner",
        description="Turn photos of children's drawings into clean artwork"
    )

    parser.add_argument("input", help="Input image or folder")
    parser.add_argument("-o", "--output", required=True, help="Output folder")

    # Geometry
    parser.add_argument(
        "-r", "--rotation",
        type=int,
        choices=VALID_ROTATIONS,
        default=0,
        help="Clockwise rotation in degrees (default: 0)"
    )
    parser.add_argument(
        "--crop",
        type=float,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        help="Crop box; in display coordinates when --display-size is given"
    )
    parser.add_argument(
        "--display-size",
        type=float,
        nargs=2,
        metavar=("W", "H"),
        help="Size the image was displayed at when the crop box was drawn"
    )

    # Extraction
    parser.add_argument(
        "-s", "--sensitivity",
        type=float,
        default=IMAGE_CONFIG.default_sensitivity,
        help=f"Background removal sensitivity 0-100 (default: {IMAGE_CONFIG.default_sensitivity:g})"
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Use the colour threshold algorithm instead of the AI model"
    )
    parser.add_argument(
        "-m", "--model",
        choices=[m.value for m in ModelType],
        default=DEFAULT_MODEL_TYPE.value,
        help=f"AI model to use (default: {DEFAULT_MODEL_TYPE.value})"
    )
    parser.add_argument(
        "-d", "--device",
        choices=[b.value for b in Backend],
        default=Backend.AUTO.value,
        help="Compute device (default: auto)"
    )

    # Error handling
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Continue processing remaining images if one fails"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def build_options(parsed: argparse.Namespace) -> CleaningOptions:
    """Translate parsed arguments into cleaning options."""
    return CleaningOptions(
        sensitivity=parsed.sensitivity,
        crop_box=tuple(parsed.crop) if parsed.crop else None,
        displayed_image_size=tuple(parsed.display_size) if parsed.display_size else None,
        use_ai=not parsed.no_ai,
        model_type=ModelType(parsed.model),
        device=parsed.device,
    )


def collect_files(input_path: Path) -> list[Path]:
    """Single file, or every supported image in a folder."""
    if input_path.is_file():
        return [input_path]
    return sorted(
        f for f in input_path.iterdir()
        if f.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
    )


def process_file(
    pipeline: CleaningPipeline,
    input_path: Path,
    output_path: Path,
    rotation: int,
    options: CleaningOptions
) -> list[Path]:
    """Clean one image and write its variants.

    Returns:
        Paths of the written files
    """
    logger.info(f"Processing {input_path.name}...")
    variants = pipeline.process_image(input_path, rotation, options)

    written = []
    for variant in variants:
        output_file = output_path / f"{input_path.stem}_{variant.id}.png"
        output_file.write_bytes(variant.image_data)
        written.append(output_file)
        logger.info(f"Saved: {output_file.name} ({variant.width}x{variant.height})")
    return written


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    setup_logging(
        logging.DEBUG if parsed.verbose else logging.INFO,
        log_file=parsed.log_file
    )

    input_path = Path(parsed.input)
    output_path = Path(parsed.output)

    if not input_path.exists():
        logger.error(f"Input not found: {input_path}")
        return 1

    try:
        options = build_options(parsed)
    except (DrawingCleanerError, ValueError) as e:
        logger.error(f"Invalid options: {e}")
        return 1

    files = collect_files(input_path)
    if not files:
        logger.error("No image files found")
        return 1

    output_path.mkdir(parents=True, exist_ok=True)

    model = get_shared_model(options.model_type, options.device) if options.use_ai else None
    pipeline = CleaningPipeline(model=model)

    logger.info(f"Processing {len(files)} image(s)...")
    logger.info(f"Extraction: {'AI (' + parsed.model + ')' if options.use_ai else 'threshold'}")

    success_count = 0
    failed = []

    try:
        for i, file_path in enumerate(files, 1):
            logger.info(f"[{i}/{len(files)}] {file_path.name}")
            try:
                process_file(pipeline, file_path, output_path, parsed.rotation, options)
                success_count += 1
            except DrawingCleanerError as e:
                logger.error(f"Failed: {file_path.name}: {e}")
                failed.append((file_path.name, str(e)))
                if not parsed.continue_on_error:
                    break
            except OSError as e:
                logger.error(f"Could not write output for {file_path.name}: {e}")
                failed.append((file_path.name, f"{type(e).__name__}: {e}"))
                if not parsed.continue_on_error:
                    break
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1

    if failed:
        logger.warning(f"Completed: {success_count}/{len(files)} succeeded")
        for name, error in failed:
            logger.error(f"  - {name}: {error}")
        return 1

    logger.info(f"Completed: All {len(files)} images processed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())

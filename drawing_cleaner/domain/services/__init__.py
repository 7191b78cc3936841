"""Domain services - pure pixel operations."""

from .geometry import rotate, resolve_crop_box, manual_crop, find_content_bounds, auto_crop
from .alpha import apply_alpha_threshold, feather_edges, postprocess_alpha
from .threshold_removal import remove_background_by_threshold
from .variants import synthesize_variants

__all__ = [
    'rotate',
    'resolve_crop_box',
    'manual_crop',
    'find_content_bounds',
    'auto_crop',
    'apply_alpha_threshold',
    'feather_edges',
    'postprocess_alpha',
    'remove_background_by_threshold',
    'synthesize_variants',
]

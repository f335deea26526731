"""Pixel level kernels invoked by the step kinds."""

from .conversions import CHANNEL_MODES, CHANNEL_ORDERS, SCALE_FUNCTIONS, scale, to_float
from .geometry import extract_grid, extract_polygon, extract_rect
from .rendering import BRIGHTNESS_MODES, DRAW_MODES, blank_canvas, draw_shapes, normalize_brightness

__all__ = [
    "BRIGHTNESS_MODES",
    "CHANNEL_MODES",
    "CHANNEL_ORDERS",
    "DRAW_MODES",
    "SCALE_FUNCTIONS",
    "blank_canvas",
    "draw_shapes",
    "extract_grid",
    "extract_polygon",
    "extract_rect",
    "normalize_brightness",
    "scale",
    "to_float",
]

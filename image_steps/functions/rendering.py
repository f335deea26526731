"""Shape rasterisation and brightness kernels."""
from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

DRAW_MODES = ("Outline", "Fill")
BRIGHTNESS_MODES = ("Global", "Local")

_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def blank_canvas(width: int, height: int, channels: int = 4) -> np.ndarray:
    canvas = np.zeros((height, width, channels), dtype=np.uint8)
    if channels == 4:
        canvas[..., 3] = 255
    return canvas


def draw_shapes(
    canvas: np.ndarray,
    shapes: Sequence[np.ndarray],
    color: Sequence[int],
    fill: bool = False,
    thickness: int = 1,
) -> np.ndarray:
    """Return a copy of ``canvas`` with every closed shape drawn on it."""

    result = np.ascontiguousarray(canvas).copy()
    channels = result.shape[2] if result.ndim == 3 else 1
    pixel = tuple(int(c) for c in color)[:channels]
    pixel += (255,) * (channels - len(pixel))

    polygons = [np.rint(shape).astype(np.int32).reshape(-1, 1, 2) for shape in shapes if len(shape)]
    if not polygons:
        return result
    if fill:
        cv2.fillPoly(result, polygons, pixel)
    else:
        cv2.polylines(result, polygons, True, pixel, thickness=thickness)
    return result


def _luminance(image: np.ndarray) -> np.ndarray:
    pixels = image.astype(np.float32)
    if pixels.ndim == 2:
        return pixels
    return pixels[..., :3] @ _LUMA


def normalize_brightness(
    image: np.ndarray,
    mode: str = "Global",
    target: int = 128,
    radius: int = 32,
) -> np.ndarray:
    """Rescale ``image`` so its luminance sits at ``target``.

    ``Global`` applies one gain to the whole image. ``Local`` computes the
    gain per pixel against a Gaussian blurred luminance with sigma ``radius``.
    Alpha is left untouched.
    """

    if image.size == 0:
        return image.copy()

    luminance = _luminance(image)
    if mode == "Local":
        blurred = cv2.GaussianBlur(luminance, (0, 0), sigmaX=float(radius))
        gain = float(target) / np.maximum(blurred, 1.0)
    else:
        mean = float(luminance.mean())
        gain = np.full(luminance.shape, float(target) / mean if mean > 0 else 1.0, dtype=np.float32)

    result = image.astype(np.float32)
    if result.ndim == 2:
        result *= gain
    else:
        result[..., :3] *= gain[..., np.newaxis]
    return np.clip(np.rint(result), 0, 255).astype(image.dtype)

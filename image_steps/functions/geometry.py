"""Sub-region extraction kernels."""
from __future__ import annotations

from typing import List, Sequence

import cv2
import numpy as np
from skimage.transform import estimate_transform, warp

from image_steps.data.members import Grid


def _fill_pixel(image: np.ndarray, fill: Sequence[int]) -> np.ndarray:
    channels = image.shape[2] if image.ndim == 3 else 1
    pixel = list(fill)[:channels]
    pixel += [255] * (channels - len(pixel))
    return np.asarray(pixel, dtype=image.dtype)


def _output_corners(width: int, height: int) -> np.ndarray:
    return np.array(
        [[0.0, 0.0], [width - 1.0, 0.0], [width - 1.0, height - 1.0], [0.0, height - 1.0]],
        dtype=np.float64,
    )


def extract_rect(
    image: np.ndarray,
    x: int,
    y: int,
    width: int,
    height: int,
    fill: Sequence[int] = (0, 0, 0, 255),
) -> np.ndarray:
    """Copy the axis aligned ``width`` x ``height`` window at ``(x, y)``.

    Pixels of the window that fall outside ``image`` take the ``fill`` colour.
    """

    shape = (height, width) + tuple(image.shape[2:])
    result = np.empty(shape, dtype=image.dtype)
    result[...] = _fill_pixel(image, fill)

    src_h, src_w = image.shape[:2]
    right = min(x + width, src_w)
    bottom = min(y + height, src_h)
    if right > x and bottom > y:
        result[: bottom - y, : right - x, ...] = image[y:bottom, x:right, ...]
    return result


def _empty_like(image: np.ndarray) -> np.ndarray:
    return np.zeros((0, 0) + tuple(image.shape[2:]), dtype=image.dtype)


def extract_polygon(
    image: np.ndarray,
    polygon: np.ndarray,
    width: int,
    height: int,
    errors: List[str],
) -> np.ndarray:
    """Warp the quadrilateral ``polygon`` into a ``width`` x ``height`` image.

    ``polygon`` holds four corners taken clockwise from the top-left of the
    output. A fifth point repeating the first one closes the loop and is
    ignored. Problems are appended to ``errors`` and an empty array is
    returned.
    """

    points = np.asarray(polygon, dtype=np.float32).reshape(-1, 2)
    if len(points) == 5 and np.array_equal(points[0], points[-1]):
        points = points[:4]
    if len(points) != 4:
        errors.append(f"Clipping area must have exactly four corners, got {len(points)}.")
        return _empty_like(image)

    matrix = cv2.getPerspectiveTransform(points, _output_corners(width, height).astype(np.float32))
    return cv2.warpPerspective(image, matrix, (width, height), flags=cv2.INTER_LINEAR)


def extract_grid(
    image: np.ndarray,
    grid: Grid,
    width: int,
    height: int,
    errors: List[str],
) -> np.ndarray:
    """Resample the full extent of ``grid`` into a ``width`` x ``height`` image."""

    if grid.x_cells < 1 or grid.y_cells < 1:
        errors.append("Clipping grid has no cells.")
        return _empty_like(image)

    # Output corners collapse onto each other below two pixels per side.
    transform = None
    if width >= 2 and height >= 2:
        # warp() expects the output -> input mapping.
        transform = estimate_transform("projective", _output_corners(width, height), grid.corners())
    params = getattr(transform, "params", None)
    if not transform or params is None or not np.all(np.isfinite(params)):
        errors.append("Clipping grid could not be mapped to the output size.")
        return _empty_like(image)

    warped = warp(
        image,
        transform,
        output_shape=(height, width),
        order=1,
        preserve_range=True,
    )
    return np.clip(np.rint(warped), 0, 255).astype(image.dtype)

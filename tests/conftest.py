from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest


# Ensure the project root is on ``sys.path`` so tests can import ``image_steps``
# without requiring the package to be installed in the environment.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def make_image() -> Callable[..., "object"]:
    """Return a factory for RGBA ``uint8`` images of a given size."""

    np = pytest.importorskip("numpy")

    def _make(width: int, height: int, value: int = 0, channels: int = 4):
        image = np.full((height, width, channels), value, dtype=np.uint8)
        if channels == 4:
            image[..., 3] = 255
        return image

    return _make


@pytest.fixture()
def coordinate_image():
    """RGBA image whose red channel holds the column and green the row."""

    np = pytest.importorskip("numpy")
    height, width = 60, 100
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., 0] = np.arange(width, dtype=np.uint8)[np.newaxis, :]
    image[..., 1] = np.arange(height, dtype=np.uint8)[:, np.newaxis]
    image[..., 3] = 255
    return image

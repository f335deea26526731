"""Typed members published by pipeline steps.

Every value that flows between steps is wrapped in a :class:`Member`. The
member carries the name it was published under and an explicit
:class:`MemberKind` discriminator so consumers can dispatch on the payload
kind without inspecting the payload itself.

Payloads are plain :mod:`numpy` arrays where possible:

* ``COLOR_MAP`` - ``(height, width, channels)`` ``uint8`` array, RGB or RGBA.
* ``BYTE_MAP`` - ``(height, width)`` ``uint8`` array.
* ``FLOATS`` - :class:`FloatsPayload`.
* ``LINE_COLLECTION`` - tuple of ``(N, 2)`` float arrays, one per closed shape.
* ``GRID`` - :class:`Grid`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Sequence, Tuple

import numpy as np


__all__ = [
    "MemberKind",
    "Member",
    "Grid",
    "FloatsPayload",
    "color_map_member",
    "byte_map_member",
    "floats_member",
    "line_collection_member",
    "grid_member",
    "image_size",
]


class MemberKind(Enum):
    """Discriminator attached to every published member."""

    COLOR_MAP = "color_map"
    BYTE_MAP = "byte_map"
    FLOATS = "floats"
    LINE_COLLECTION = "line_collection"
    GRID = "grid"


@dataclass(frozen=True)
class Grid:
    """A regular grid of cells laid out along two axis vectors.

    ``x_axis`` and ``y_axis`` describe a single cell edge, so the full grid
    spans ``x_axis * x_cells`` by ``y_axis * y_cells`` starting at ``origin``.
    """

    origin: Tuple[float, float] = (0.0, 0.0)
    x_axis: Tuple[float, float] = (1.0, 0.0)
    y_axis: Tuple[float, float] = (0.0, 1.0)
    x_cells: int = 0
    y_cells: int = 0

    @property
    def x_axis_length(self) -> float:
        return math.hypot(*self.x_axis)

    @property
    def y_axis_length(self) -> float:
        return math.hypot(*self.y_axis)

    def corners(self) -> np.ndarray:
        """Return the four outer corners as a ``(4, 2)`` array.

        Order is top-left, top-right, bottom-right, bottom-left in grid space.
        """

        origin = np.asarray(self.origin, dtype=np.float64)
        span_x = np.asarray(self.x_axis, dtype=np.float64) * self.x_cells
        span_y = np.asarray(self.y_axis, dtype=np.float64) * self.y_cells
        return np.array(
            [origin, origin + span_x, origin + span_x + span_y, origin + span_y],
            dtype=np.float64,
        )


@dataclass(frozen=True)
class FloatsPayload:
    """Flat floating point representation of an image."""

    data: np.ndarray
    width: int
    height: int
    channels: int
    channel_mode: str
    channel_order: str


@dataclass(frozen=True)
class Member:
    """A payload published by a step under ``name``."""

    name: str
    kind: MemberKind
    data: Any = field(repr=False, compare=False)

    def is_kind(self, kind: MemberKind) -> bool:
        return self.kind is kind


def image_size(array: np.ndarray) -> Tuple[int, int]:
    """Return ``(width, height)`` for an image array."""

    if array.ndim < 2:
        return (0, 0)
    return (int(array.shape[1]), int(array.shape[0]))


def color_map_member(name: str, data: np.ndarray) -> Member:
    array = np.asarray(data)
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        if array.size:
            raise ValueError(
                f"Color maps must have shape (height, width, 3|4); got {array.shape}"
            )
    return Member(name, MemberKind.COLOR_MAP, array)


def byte_map_member(name: str, data: np.ndarray) -> Member:
    array = np.asarray(data, dtype=np.uint8)
    if array.ndim != 2 and array.size:
        raise ValueError(f"Byte maps must be two dimensional; got {array.shape}")
    return Member(name, MemberKind.BYTE_MAP, array)


def floats_member(name: str, payload: FloatsPayload) -> Member:
    return Member(name, MemberKind.FLOATS, payload)


def line_collection_member(name: str, shapes: Iterable[Sequence[Sequence[float]]]) -> Member:
    polygons = tuple(np.asarray(shape, dtype=np.float64).reshape(-1, 2) for shape in shapes)
    return Member(name, MemberKind.LINE_COLLECTION, polygons)


def grid_member(name: str, grid: Grid) -> Member:
    return Member(name, MemberKind.GRID, grid)

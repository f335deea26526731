"""Step kinds shipped with the library and the default catalog."""
from __future__ import annotations

from . import draw_shapes, extract_rect, normalize_brightness, scale, to_float
from .base import StepCatalog, StepCategory, StepDelegate, StepKind, resolve_sources
from .draw_shapes import make_draw_shapes_step
from .extract_rect import make_extract_rect_step
from .scale import make_scale_step

BUILTIN_DELEGATES = (
    extract_rect.DELEGATE,
    scale.DELEGATE,
    to_float.DELEGATE,
    draw_shapes.DELEGATE,
    normalize_brightness.DELEGATE,
)


def default_catalog() -> StepCatalog:
    """Return a catalog holding every built-in step kind."""

    return StepCatalog.from_delegates(BUILTIN_DELEGATES)


STEP_CATALOG = default_catalog()

__all__ = [
    "BUILTIN_DELEGATES",
    "STEP_CATALOG",
    "StepCatalog",
    "StepCategory",
    "StepDelegate",
    "StepKind",
    "default_catalog",
    "make_draw_shapes_step",
    "make_extract_rect_step",
    "make_scale_step",
    "resolve_sources",
]

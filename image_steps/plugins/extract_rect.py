"""Cut a sub-region out of a color image.

Three mutually exclusive area modes select how the region is chosen:

``Rect``
    An explicit ``(x, y, width, height)`` window, or a center crop when the
    origin mode is ``CenterCrop``.
``Area``
    The first closed shape of a named line collection.
``Grid``
    The full extent of a named grid.

Width and height of ``0`` mean "unset". They default from the grid cell
metrics when a grid resolves (even outside ``Grid`` mode) and from the
source image otherwise.
"""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

import numpy as np

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import Grid, MemberKind, color_map_member, image_size
from image_steps.functions import extract_grid, extract_polygon, extract_rect
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterStore, ParameterType
from image_steps.processing.step_io import OutputSink, StepInput

from . import names
from .base import StepCategory, StepDelegate, StepKind

AREA_MODES = ("Rect", "Area", "Grid")
ORIGIN_MODES = ("XY", "CenterCrop")
OUTPUT_DATA = "Output data"


def fixup_parameters(builder: ParameterBuilder) -> None:
    max_dimension = builder.settings.max_dimension

    mode = builder.declare(
        names.MODE,
        description="The type of area to cut out.",
        type=ParameterType.ENUM,
        choices=AREA_MODES,
    ).value

    origin_mode = builder.declare(
        names.ORIGIN_MODE,
        description="How to calculate the x,y coords of the rect.",
        type=ParameterType.ENUM,
        choices=ORIGIN_MODES,
        enabled=mode == "Rect",
    ).value

    builder.declare(
        names.COLOR_IMAGE,
        description="The source image to cut the shape from.",
        type=ParameterType.NAMED_DATA,
    )

    for name, description in (
        (names.WIDTH, "The width of the image generated by this step."),
        (names.HEIGHT, "The height of the image generated by this step."),
    ):
        builder.declare(
            name,
            description=description,
            type=ParameterType.SIZE,
            minimum=0,
            maximum=max_dimension,
        )

    xy_enabled = mode == "Rect" and origin_mode == "XY"
    for name, description in (
        (names.X, "The x origin of this rect."),
        (names.Y, "The y origin of this rect."),
    ):
        builder.declare(
            name,
            description=description,
            type=ParameterType.SIZE,
            minimum=0,
            maximum=max_dimension,
            enabled=xy_enabled,
        )

    builder.declare(
        names.CLIPPING_AREA,
        description="The shape to cut out.",
        type=ParameterType.NAMED_DATA,
        enabled=mode == "Area",
    )
    builder.declare(
        names.CLIPPING_GRID,
        description="The grid to cut out.",
        type=ParameterType.NAMED_GRID,
        enabled=mode == "Grid",
    )


def default_size(
    width: int,
    height: int,
    source: np.ndarray,
    grid: Optional[Grid] = None,
) -> Tuple[int, int]:
    """Fill in unset (``< 1``) dimensions from ``grid`` or ``source``."""

    src_width, src_height = image_size(source)
    if width < 1:
        if grid is not None and grid.x_cells > 0:
            width = int(grid.x_cells * math.ceil(grid.x_axis_length))
        else:
            width = src_width
    if height < 1:
        if grid is not None and grid.y_cells > 0:
            height = int(grid.y_cells * math.ceil(grid.y_axis_length))
        else:
            height = src_height
    return width, height


def center_crop_origin(
    x: int,
    y: int,
    source: np.ndarray,
    width: int,
    height: int,
    fix_vertical: bool = False,
) -> Tuple[int, int]:
    """Return the origin of a centered ``width`` x ``height`` crop.

    Unless ``fix_vertical`` is set the vertical offset is written into ``x``,
    overriding the horizontal one, and ``y`` is returned unchanged. Pipelines
    saved against that behaviour depend on it.
    """

    src_width, src_height = image_size(source)
    if src_width > width:
        x = (src_width - width) // 2
    if src_height > height:
        if fix_vertical:
            y = (src_height - height) // 2
        else:
            x = (src_height - height) // 2
    return x, y


def execute_step(
    parameters: ParameterSnapshot,
    step_input: StepInput,
    output: OutputSink,
    settings: StepSettings,
) -> None:
    width = parameters.size(names.WIDTH)
    height = parameters.size(names.HEIGHT)
    x = parameters.size(names.X)
    y = parameters.size(names.Y)
    area_mode = parameters.enum(names.MODE, AREA_MODES)
    origin_mode = parameters.enum(names.ORIGIN_MODE, ORIGIN_MODES)

    source = step_input.member(parameters.string(names.COLOR_IMAGE), MemberKind.COLOR_MAP)
    if source is None:
        output.add_error("Failed to find source image.")
        return

    clipping_area = step_input.member(parameters.string(names.CLIPPING_AREA), MemberKind.LINE_COLLECTION)
    clipping_grid = step_input.member(parameters.string(names.CLIPPING_GRID), MemberKind.GRID)

    if area_mode == "Area" and (
        clipping_area is None or not clipping_area.data or len(clipping_area.data[0]) == 0
    ):
        output.add_error("Failed to find clipping area!")
        return

    if area_mode == "Grid" and clipping_grid is None:
        output.add_error("Failed to find clipping grid!")
        return

    image = source.data
    if image.size == 0:
        return

    grid = clipping_grid.data if clipping_grid is not None else None
    width, height = default_size(width, height, image, grid)

    errors: List[str] = []
    output_name = parameters.lookup_output_name(OUTPUT_DATA)

    if area_mode == "Area":
        data = extract_polygon(image, clipping_area.data[0], width, height, errors)
    elif area_mode == "Grid":
        data = extract_grid(image, grid, width, height, errors)
    elif width > 0 and height > 0:
        if origin_mode == "CenterCrop":
            x, y = center_crop_origin(x, y, image, width, height, settings.center_crop_fix)
        data = extract_rect(image, x, y, width, height, settings.fill_color)
    else:
        return

    if errors:
        for error in errors:
            output.add_error(error)
        return
    output.add_member(color_map_member(output_name, data))


DELEGATE = StepDelegate(
    kind=StepKind.EXTRACT_RECT,
    categories=frozenset({StepCategory.FIND_AND_SEGMENT}),
    output_names=(OUTPUT_DATA,),
    fixup_parameters=fixup_parameters,
    execute_step=execute_step,
    description="Cut a rect, shape or grid out of an image.",
)


def make_extract_rect_step(
    in_name: str,
    out_name: str,
    origin_mode: str = "XY",
    width: int = 0,
    height: int = 0,
    settings: Optional[StepSettings] = None,
) -> ParameterStore:
    """Create a ready to run rect extraction step."""

    store = ParameterStore(StepKind.EXTRACT_RECT)
    store.set_value(names.COLOR_IMAGE, in_name)
    store.set_value(names.ORIGIN_MODE, origin_mode)
    store.set_value(names.WIDTH, width)
    store.set_value(names.HEIGHT, height)
    store.set_output_mapping({OUTPUT_DATA: out_name})
    DELEGATE.recompute_parameters(store, settings)
    return store

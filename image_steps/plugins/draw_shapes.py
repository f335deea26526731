"""Rasterise a named line collection onto an image or a blank canvas."""
from __future__ import annotations

from typing import Optional

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import MemberKind, color_map_member
from image_steps.functions import DRAW_MODES, blank_canvas, draw_shapes
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterStore, ParameterType
from image_steps.processing.step_io import OutputSink, StepInput

from . import names
from .base import StepCategory, StepDelegate, StepKind

OUTPUT_IMAGE = "Output image"


def fixup_parameters(builder: ParameterBuilder) -> None:
    max_dimension = builder.settings.max_dimension

    canvas_name = builder.declare(
        names.COLOR_IMAGE,
        description="The image to draw on, leave empty to draw on a blank canvas.",
        type=ParameterType.NAMED_DATA,
    ).value

    for name, description in (
        (names.WIDTH, "The width of the blank canvas."),
        (names.HEIGHT, "The height of the blank canvas."),
    ):
        builder.declare(
            name,
            description=description,
            type=ParameterType.SIZE,
            minimum=1,
            maximum=max_dimension,
            enabled=not canvas_name,
            default=1,
        )

    builder.declare(
        names.SHAPES,
        description="The shapes to draw.",
        type=ParameterType.NAMED_DATA,
    )

    draw_mode = builder.declare(
        names.DRAW_MODE,
        description="Draw the outline of each shape or fill it.",
        type=ParameterType.ENUM,
        choices=DRAW_MODES,
    ).value

    builder.declare(
        names.THICKNESS,
        description="Line thickness in pixels.",
        type=ParameterType.INT,
        minimum=1,
        maximum=100,
        enabled=draw_mode == "Outline",
        default=1,
    )

    for name in (names.RED, names.GREEN, names.BLUE):
        builder.declare(
            name,
            description=f"The {name} component of the drawing color.",
            type=ParameterType.INT,
            minimum=0,
            maximum=255,
            default=255,
        )


def execute_step(
    parameters: ParameterSnapshot,
    step_input: StepInput,
    output: OutputSink,
    settings: StepSettings,
) -> None:
    shapes = step_input.member(parameters.string(names.SHAPES), MemberKind.LINE_COLLECTION)
    if shapes is None:
        output.add_error("Failed to find shapes.")
        return

    canvas_name = parameters.string(names.COLOR_IMAGE)
    if canvas_name:
        source = step_input.member(canvas_name, MemberKind.COLOR_MAP)
        if source is None:
            output.add_error("Failed to find source image.")
            return
        canvas = source.data
    else:
        canvas = blank_canvas(max(1, parameters.size(names.WIDTH)), max(1, parameters.size(names.HEIGHT)))

    color = tuple(parameters.integer(name) for name in (names.RED, names.GREEN, names.BLUE))
    fill = parameters.enum(names.DRAW_MODE, DRAW_MODES) == "Fill"
    data = draw_shapes(canvas, shapes.data, color, fill=fill, thickness=max(1, parameters.integer(names.THICKNESS, 1)))
    output.add_member(color_map_member(parameters.lookup_output_name(OUTPUT_IMAGE), data))


DELEGATE = StepDelegate(
    kind=StepKind.DRAW_SHAPES,
    categories=frozenset({StepCategory.RENDERING}),
    output_names=(OUTPUT_IMAGE,),
    fixup_parameters=fixup_parameters,
    execute_step=execute_step,
    description="Draw closed shapes as outlines or filled polygons.",
)


def make_draw_shapes_step(
    shapes_name: str,
    out_name: str,
    canvas_name: str = "",
    fill: bool = False,
    settings: Optional[StepSettings] = None,
) -> ParameterStore:
    store = ParameterStore(StepKind.DRAW_SHAPES)
    store.set_value(names.SHAPES, shapes_name)
    store.set_value(names.COLOR_IMAGE, canvas_name)
    store.set_value(names.DRAW_MODE, "Fill" if fill else "Outline")
    store.set_output_mapping({OUTPUT_IMAGE: out_name})
    DELEGATE.recompute_parameters(store, settings)
    return store

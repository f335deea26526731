"""Rescale a color image and/or a byte map."""
from __future__ import annotations

from typing import Optional, Tuple

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import MemberKind, byte_map_member, color_map_member, image_size
from image_steps.functions import SCALE_FUNCTIONS, scale
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterStore, ParameterType
from image_steps.processing.step_io import OutputSink, StepInput

from . import names
from .base import StepCategory, StepDelegate, StepKind

OUTPUT_COLOR_IMAGE = "Output color image"
OUTPUT_BYTE_MAP = "Output byte map"


def calculate_size(width: int, height: int, src_width: int, src_height: int) -> Tuple[int, int]:
    """Resolve the target size, ``0`` meaning unset.

    A single unset dimension follows the source aspect ratio. Anything still
    below one pixel falls back to the source dimension.
    """

    # round() rounds exact halves to even.
    if width == 0 and height > 0 and src_height > 0:
        width = int(round(src_width * height / src_height))
    elif height == 0 and width > 0 and src_width > 0:
        height = int(round(src_height * width / src_width))

    if width < 1:
        width = src_width
    if height < 1:
        height = src_height
    return width, height


def fixup_parameters(builder: ParameterBuilder) -> None:
    max_dimension = builder.settings.max_dimension

    builder.declare(
        names.WIDTH,
        description="The width of the image generated by this step.",
        type=ParameterType.SIZE,
        minimum=0,
        maximum=max_dimension,
    )
    builder.declare(
        names.HEIGHT,
        description="The height of the image generated by this step.",
        type=ParameterType.SIZE,
        minimum=0,
        maximum=max_dimension,
    )
    builder.declare(
        names.COLOR_IMAGE,
        description="The source image to scale.",
        type=ParameterType.NAMED_DATA,
    )
    builder.declare(
        names.BYTE_MAP,
        description="The source byte map to scale.",
        type=ParameterType.NAMED_DATA,
    )
    builder.declare(
        names.FUNCTION,
        description="The function to use for downscaling images.",
        type=ParameterType.ENUM,
        choices=SCALE_FUNCTIONS,
    )


def execute_step(
    parameters: ParameterSnapshot,
    step_input: StepInput,
    output: OutputSink,
    settings: StepSettings,
) -> None:
    width = parameters.size(names.WIDTH)
    height = parameters.size(names.HEIGHT)
    function = parameters.enum(names.FUNCTION, SCALE_FUNCTIONS)

    slots = (
        (names.COLOR_IMAGE, MemberKind.COLOR_MAP, OUTPUT_COLOR_IMAGE, color_map_member, "Failed to find color image."),
        (names.BYTE_MAP, MemberKind.BYTE_MAP, OUTPUT_BYTE_MAP, byte_map_member, "Failed to find byte map image."),
    )
    for parameter, kind, slot, make_member, missing in slots:
        source_name = parameters.string(parameter)
        if not source_name:
            continue
        source = step_input.member(source_name, kind)
        if source is None:
            output.add_error(missing)
            continue
        src_width, src_height = image_size(source.data)
        size = calculate_size(width, height, src_width, src_height)
        output.add_member(
            make_member(parameters.lookup_output_name(slot), scale(source.data, size[0], size[1], function))
        )


DELEGATE = StepDelegate(
    kind=StepKind.SCALE,
    categories=frozenset({StepCategory.PROCESSING}),
    output_names=(OUTPUT_COLOR_IMAGE, OUTPUT_BYTE_MAP),
    fixup_parameters=fixup_parameters,
    execute_step=execute_step,
    description="Resize images, optionally preserving the aspect ratio.",
)


def make_scale_step(width: int, height: int, settings: Optional[StepSettings] = None) -> ParameterStore:
    store = ParameterStore(StepKind.SCALE)
    store.set_value(names.WIDTH, width)
    store.set_value(names.HEIGHT, height)
    DELEGATE.recompute_parameters(store, settings)
    return store

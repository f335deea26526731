"""Convert color images into flat float buffers.

With an empty source name every color image published by the previous step
is converted, each result published under the same ``Output data`` slot.
"""
from __future__ import annotations

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import MemberKind, floats_member
from image_steps.functions import CHANNEL_MODES, CHANNEL_ORDERS, to_float
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterType
from image_steps.processing.step_io import OutputSink, StepInput

from . import names
from .base import StepCategory, StepDelegate, StepKind, resolve_sources

OUTPUT_DATA = "Output data"


def fixup_parameters(builder: ParameterBuilder) -> None:
    builder.declare(
        names.COLOR_IMAGE,
        description="The source image to convert, leave empty to use the previous step.",
        type=ParameterType.NAMED_DATA,
    )
    builder.declare(
        names.CHANNEL_MODE,
        description="Select how channels are stored in memory.",
        type=ParameterType.ENUM,
        choices=CHANNEL_MODES,
    )
    builder.declare(
        names.CHANNEL_ORDER,
        description="Select how channels are ordered in memory.",
        type=ParameterType.ENUM,
        choices=CHANNEL_ORDERS,
    )


def execute_step(
    parameters: ParameterSnapshot,
    step_input: StepInput,
    output: OutputSink,
    settings: StepSettings,
) -> None:
    channel_mode = parameters.enum(names.CHANNEL_MODE, CHANNEL_MODES)
    channel_order = parameters.enum(names.CHANNEL_ORDER, CHANNEL_ORDERS)
    output_name = parameters.lookup_output_name(OUTPUT_DATA)

    sources = resolve_sources(
        parameters.string(names.COLOR_IMAGE),
        MemberKind.COLOR_MAP,
        step_input,
        output,
        "Failed to find source color image.",
    )
    for source in sources:
        output.add_member(floats_member(output_name, to_float(source.data, channel_mode, channel_order)))


DELEGATE = StepDelegate(
    kind=StepKind.TO_FLOAT,
    categories=frozenset({StepCategory.CONVERSION}),
    output_names=(OUTPUT_DATA,),
    fixup_parameters=fixup_parameters,
    execute_step=execute_step,
    description="Convert color images to normalised floats.",
)

"""Normalise image brightness globally or against a local average."""
from __future__ import annotations

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import MemberKind, color_map_member
from image_steps.functions import BRIGHTNESS_MODES, normalize_brightness
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterType
from image_steps.processing.step_io import OutputSink, StepInput

from . import names
from .base import StepCategory, StepDelegate, StepKind, resolve_sources

OUTPUT_DATA = "Output data"


def fixup_parameters(builder: ParameterBuilder) -> None:
    builder.declare(
        names.COLOR_IMAGE,
        description="The image to normalize, leave empty to use the previous step.",
        type=ParameterType.NAMED_DATA,
    )
    mode = builder.declare(
        names.MODE,
        description="Normalize the whole image at once or against a local average.",
        type=ParameterType.ENUM,
        choices=BRIGHTNESS_MODES,
    ).value
    builder.declare(
        names.RADIUS,
        description="Blur radius of the local average.",
        type=ParameterType.INT,
        minimum=1,
        maximum=builder.settings.max_dimension,
        enabled=mode == "Local",
        default=32,
    )
    builder.declare(
        names.TARGET,
        description="Target mean brightness.",
        type=ParameterType.INT,
        minimum=0,
        maximum=255,
        default=128,
    )


def execute_step(
    parameters: ParameterSnapshot,
    step_input: StepInput,
    output: OutputSink,
    settings: StepSettings,
) -> None:
    mode = parameters.enum(names.MODE, BRIGHTNESS_MODES)
    radius = max(1, parameters.integer(names.RADIUS, 32))
    target = parameters.integer(names.TARGET, 128)
    output_name = parameters.lookup_output_name(OUTPUT_DATA)

    sources = resolve_sources(
        parameters.string(names.COLOR_IMAGE),
        MemberKind.COLOR_MAP,
        step_input,
        output,
        "Failed to find source color image.",
    )
    for source in sources:
        data = normalize_brightness(source.data, mode=mode, target=target, radius=radius)
        output.add_member(color_map_member(output_name, data))


DELEGATE = StepDelegate(
    kind=StepKind.NORMALIZE_BRIGHTNESS,
    categories=frozenset({StepCategory.PROCESSING}),
    output_names=(OUTPUT_DATA,),
    fixup_parameters=fixup_parameters,
    execute_step=execute_step,
    description="Even out image brightness.",
)

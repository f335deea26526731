"""Parameter stores, step inputs and output sinks.

:mod:`image_steps.processing.pipeline_manager` depends on the step catalog and
is imported from the package root instead of here.
"""

from .errors import ParameterValidationError, StepError, UnknownParameterError, UnknownStepKindError
from .parameters import ParameterBuilder, ParameterDescriptor, ParameterSnapshot, ParameterStore, ParameterType
from .step_io import OutputSink, StepInput

__all__ = [
    "OutputSink",
    "ParameterBuilder",
    "ParameterDescriptor",
    "ParameterSnapshot",
    "ParameterStore",
    "ParameterType",
    "ParameterValidationError",
    "StepError",
    "StepInput",
    "UnknownParameterError",
    "UnknownStepKindError",
]

"""Exceptions raised for configuration mistakes.

Execution problems are never raised; they are reported as strings on the
step's :class:`~image_steps.processing.step_io.OutputSink`.
"""
from __future__ import annotations

from typing import Sequence


class StepError(Exception):
    """Base class for step configuration errors."""


class UnknownStepKindError(StepError, KeyError):
    """Raised when a step kind has no registered delegate."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"No step delegate registered for kind {kind!r}")
        self.kind = kind


class UnknownParameterError(StepError, KeyError):
    """Raised when a parameter name is not declared by the step."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown parameter {name!r}")
        self.name = name


class ParameterValidationError(StepError, ValueError):
    """Raised when enabled parameters hold values outside their bounds."""

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems = tuple(problems)
        super().__init__("Invalid step parameters: " + "; ".join(self.problems))

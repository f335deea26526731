"""Top level package for the image_steps library."""

from __future__ import annotations

from importlib import metadata as _importlib_metadata


def _resolve_distribution_version() -> str:
    """Best-effort retrieval of the installed package version."""

    candidates = ("image-steps", "image_steps")
    for name in candidates:
        try:
            return _importlib_metadata.version(name)
        except _importlib_metadata.PackageNotFoundError:  # pragma: no cover - metadata lookup
            continue
    return "0.0.0"


__version__ = _resolve_distribution_version()


def get_version() -> str:
    """Return the discovered package version."""

    return __version__


from .processing.pipeline_manager import PipelineManager, PipelineRun, StepOutcome  # noqa: E402
from .plugins import STEP_CATALOG, StepCategory, StepKind  # noqa: E402

__all__ = [
    "PipelineManager",
    "PipelineRun",
    "STEP_CATALOG",
    "StepCategory",
    "StepKind",
    "StepOutcome",
    "__version__",
    "get_version",
]

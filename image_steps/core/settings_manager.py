"""Settings store with JSON import/export and the step settings it feeds."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


LOGGER = logging.getLogger(__name__)


def parse_bool(val: Any) -> bool:
    """Interpret typical truthy values coming from stored settings."""

    if isinstance(val, str):
        return val.lower() in ["true", "1"]
    return bool(val)


class SettingsManager:
    """Flat ``prefix/key`` settings a host persists as JSON.

    Step settings live under :attr:`StepSettings.KEY_PREFIX`; other keys are
    kept untouched so hosts can share one file.
    """

    def __init__(self, organization: str, application: str, values: Optional[Dict[str, Any]] = None) -> None:
        self.organization = organization
        self.application = application
        self._values: Dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return dict(sorted(self._values.items()))

    def from_dict(self, values: Dict[str, Any], *, clear: bool = False) -> None:
        if clear:
            self._values = {}
        self._values.update(values)

    def export_json(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        LOGGER.debug("Exported %d setting(s) to %s", len(self._values), path, extra={"component": "SettingsManager"})

    def import_json(self, path: Path, *, clear: bool = False) -> None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must hold a JSON object")
        self.from_dict(data, clear=clear)

    def step_settings(self) -> "StepSettings":
        return StepSettings.from_manager(self)


@dataclass(frozen=True)
class StepSettings:
    """Settings consulted by step kinds while recomputing and executing.

    ``center_crop_fix`` switches rect extraction to compute the vertical
    center-crop offset into ``y``. It is off by default, which keeps the
    historical behaviour of writing the vertical offset into ``x``.
    """

    max_dimension: int = 10000
    fill_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    center_crop_fix: bool = False

    KEY_PREFIX = "steps/"

    @classmethod
    def from_manager(cls, manager: SettingsManager) -> "StepSettings":
        defaults = cls()
        prefix = cls.KEY_PREFIX
        try:
            max_dimension = int(manager.get(prefix + "max_dimension", defaults.max_dimension))
        except (TypeError, ValueError):
            LOGGER.warning("Ignoring invalid max_dimension setting", extra={"component": "StepSettings"})
            max_dimension = defaults.max_dimension

        fill = manager.get(prefix + "fill_color", defaults.fill_color)
        try:
            fill_color = tuple(int(channel) for channel in fill)
        except (TypeError, ValueError):
            LOGGER.warning("Ignoring invalid fill_color setting", extra={"component": "StepSettings"})
            fill_color = defaults.fill_color
        if len(fill_color) == 3:
            fill_color = fill_color + (255,)

        return cls(
            max_dimension=max(1, max_dimension),
            fill_color=fill_color[:4],  # type: ignore[arg-type]
            center_crop_fix=parse_bool(manager.get(prefix + "center_crop_fix", defaults.center_crop_fix)),
        )

    def apply_to(self, manager: SettingsManager) -> None:
        prefix = self.KEY_PREFIX
        manager.set(prefix + "max_dimension", self.max_dimension)
        manager.set(prefix + "fill_color", list(self.fill_color))
        manager.set(prefix + "center_crop_fix", self.center_crop_fix)

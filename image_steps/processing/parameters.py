"""Parameter descriptors and the per-step parameter store.

A step kind never owns state. Everything configurable about one step in a
pipeline lives in a :class:`ParameterStore`:

* the ordered :class:`ParameterDescriptor` set, rebuilt by the kind's
  recompute function through a :class:`ParameterBuilder`;
* the declared output slot names and the slot -> published name mapping.

Execution only ever receives a :class:`ParameterSnapshot`, an immutable copy of
the resolved values, so recomputation and execution never alias each other.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ParameterValidationError, UnknownParameterError


LOGGER = logging.getLogger(__name__)


class ParameterType(Enum):
    """Type tag carried by every descriptor."""

    SIZE = "size"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    ENUM = "enum"
    NAMED_DATA = "named_data"
    NAMED_GRID = "named_grid"

    @property
    def is_numeric(self) -> bool:
        return self in (ParameterType.SIZE, ParameterType.INT, ParameterType.FLOAT)

    @property
    def is_reference(self) -> bool:
        return self in (ParameterType.NAMED_DATA, ParameterType.NAMED_GRID)


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single configurable value of a step.

    ``type`` is ``None`` for a raw backing value that has been set but not yet
    declared by a recompute pass.
    """

    name: str
    description: str = ""
    type: Optional[ParameterType] = None
    value: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Tuple[str, ...] = ()
    enabled: bool = True

    def with_value(self, value: Any) -> "ParameterDescriptor":
        return replace(self, value=value)

    def validate_bounds(self, default: Any) -> Any:
        """Return the descriptor value clamped into its declared bounds."""

        if self.type is ParameterType.ENUM:
            if self.value in self.choices:
                return self.value
            return self.choices[0] if self.choices else default

        if self.type is not None and self.type.is_numeric:
            try:
                number = float(self.value)
            except (TypeError, ValueError):
                return default
            if math.isnan(number):
                return default
            if self.minimum is not None:
                number = max(number, self.minimum)
            if self.maximum is not None:
                number = min(number, self.maximum)
            if self.type is ParameterType.FLOAT:
                return number
            return int(round(number))

        if self.value is None:
            return default
        return str(self.value)

    def problems(self) -> List[str]:
        """Describe every way the current value violates the declaration."""

        if self.type is ParameterType.ENUM:
            if self.value not in self.choices:
                return [f"{self.name}: {self.value!r} is not one of {list(self.choices)}"]
            return []

        if self.type is not None and self.type.is_numeric:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                return [f"{self.name}: expected a number, got {self.value!r}"]
            found: List[str] = []
            if self.minimum is not None and self.value < self.minimum:
                found.append(f"{self.name}: {self.value} is below the minimum {self.minimum}")
            if self.maximum is not None and self.value > self.maximum:
                found.append(f"{self.name}: {self.value} is above the maximum {self.maximum}")
            return found

        return []


class ParameterBuilder:
    """Mutable view handed to a kind's recompute function.

    Parameters are declared in their canonical order. Each declaration starts
    from the previous descriptor of the same name, keeping its value only when
    the type matches. Anything not declared is dropped when the builder is
    applied to the store.
    """

    def __init__(self, previous: Mapping[str, ParameterDescriptor], settings: Any) -> None:
        self.settings = settings
        self._previous = dict(previous)
        self._declared: Dict[str, ParameterDescriptor] = {}
        self._valid: List[str] = []
        self._output_names: Tuple[str, ...] = ()

    def set_output_names(self, names: Sequence[str]) -> None:
        self._output_names = tuple(names)

    def declare(
        self,
        name: str,
        *,
        description: str,
        type: ParameterType,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        choices: Sequence[str] = (),
        enabled: bool = True,
        default: Any = None,
    ) -> ParameterDescriptor:
        """Declare ``name`` and return its fully resolved descriptor."""

        previous = self._declared.get(name) or self._previous.get(name)
        value = None
        if previous is not None and previous.type in (None, type):
            value = previous.value
        elif previous is not None:
            LOGGER.debug(
                "Dropping value of parameter '%s' (type %s -> %s)",
                name,
                previous.type,
                type,
            )

        descriptor = ParameterDescriptor(
            name=name,
            description=description,
            type=type,
            value=value,
            minimum=minimum,
            maximum=maximum,
            choices=tuple(choices),
            enabled=enabled,
        )
        if default is None:
            default = _type_default(type)
        descriptor = descriptor.with_value(descriptor.validate_bounds(default))

        if name not in self._declared:
            self._valid.append(name)
        self._declared[name] = descriptor
        return descriptor

    def build(self) -> Tuple[Dict[str, ParameterDescriptor], List[str], Tuple[str, ...]]:
        return dict(self._declared), list(self._valid), self._output_names


def _type_default(type: ParameterType) -> Any:
    if type is ParameterType.FLOAT:
        return 0.0
    if type.is_numeric:
        return 0
    return ""


class ParameterSnapshot:
    """Read-only resolved values handed to a step's execute function."""

    def __init__(
        self,
        kind: Any,
        parameters: Mapping[str, ParameterDescriptor],
        output_names: Sequence[str],
        output_mapping: Mapping[str, str],
    ) -> None:
        self.kind = kind
        self._parameters = MappingProxyType(dict(parameters))
        self.output_names = tuple(output_names)
        self._output_mapping = MappingProxyType(dict(output_mapping))

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def value(self, name: str, default: Any = None) -> Any:
        descriptor = self._parameters.get(name)
        if descriptor is None or descriptor.value is None:
            return default
        return descriptor.value

    def size(self, name: str) -> int:
        return max(0, self.integer(name))

    def integer(self, name: str, default: int = 0) -> int:
        try:
            return int(self.value(name, default))
        except (TypeError, ValueError):
            return default

    def number(self, name: str, default: float = 0.0) -> float:
        try:
            return float(self.value(name, default))
        except (TypeError, ValueError):
            return default

    def string(self, name: str) -> str:
        value = self.value(name, "")
        return value if isinstance(value, str) else str(value)

    def enum(self, name: str, choices: Sequence[str] = ()) -> str:
        """Return the enum value, falling back to the first declared option."""

        descriptor = self._parameters.get(name)
        options = tuple(choices) or (descriptor.choices if descriptor is not None else ())
        value = self.value(name)
        if value in options:
            return value
        return options[0] if options else ""

    def lookup_output_name(self, slot: str) -> str:
        return self._output_mapping.get(slot, slot)


@dataclass
class ParameterStore:
    """All mutable configuration of one step instance."""

    kind: Any
    _parameters: Dict[str, ParameterDescriptor] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False)
    _valid: List[str] = field(default_factory=list, init=False)
    _output_names: Tuple[str, ...] = field(default=(), init=False)
    _output_mapping: Dict[str, str] = field(default_factory=dict, init=False)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------
    def set_value(self, name: str, value: Any) -> None:
        """Record a backing value; descriptors are refreshed on recompute."""

        descriptor = self._parameters.get(name)
        if descriptor is None:
            self._parameters[name] = ParameterDescriptor(name=name, value=value)
        else:
            self._parameters[name] = descriptor.with_value(value)

    def value(self, name: str, default: Any = None) -> Any:
        descriptor = self._parameters.get(name)
        if descriptor is None or descriptor.value is None:
            return default
        return descriptor.value

    def descriptor(self, name: str) -> ParameterDescriptor:
        try:
            return self._parameters[name]
        except KeyError:
            raise UnknownParameterError(name) from None

    def parameters(self) -> Tuple[ParameterDescriptor, ...]:
        """Declared descriptors in canonical order."""

        return tuple(self._parameters[name] for name in self._order if name in self._parameters)

    def presented_parameters(self) -> Tuple[ParameterDescriptor, ...]:
        """Enabled descriptors in canonical order."""

        return tuple(descriptor for descriptor in self.parameters() if descriptor.enabled)

    @property
    def parameter_order(self) -> Tuple[str, ...]:
        return tuple(self._order)

    @property
    def valid_parameters(self) -> Tuple[str, ...]:
        return tuple(self._valid)

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------
    @property
    def output_names(self) -> Tuple[str, ...]:
        return self._output_names

    def set_output_mapping(self, mapping: Mapping[str, str]) -> None:
        self._output_mapping = dict(mapping)

    @property
    def output_mapping(self) -> Mapping[str, str]:
        return MappingProxyType(self._output_mapping)

    def lookup_output_name(self, slot: str) -> str:
        return self._output_mapping.get(slot, slot)

    # ------------------------------------------------------------------
    # Recompute support
    # ------------------------------------------------------------------
    def builder(self, settings: Any) -> ParameterBuilder:
        return ParameterBuilder(self._parameters, settings)

    def apply(self, builder: ParameterBuilder) -> None:
        parameters, valid, output_names = builder.build()
        dropped = sorted(set(self._parameters) - set(parameters))
        if dropped:
            LOGGER.debug("Dropping stale parameters %s from %s step", dropped, self.kind)
        self._parameters = parameters
        self._order = list(valid)
        self._valid = list(valid)
        self._output_names = output_names

    def change_kind(self, kind: Any) -> None:
        """Switch to another step kind; call recompute afterwards."""

        LOGGER.debug("Changing step kind %s -> %s", self.kind, kind)
        self.kind = kind

    def validate(self) -> None:
        """Raise :class:`ParameterValidationError` for out of bounds values."""

        problems: List[str] = []
        for name in self._valid:
            descriptor = self._parameters.get(name)
            if descriptor is None or not descriptor.enabled:
                continue
            problems.extend(descriptor.problems())
        if problems:
            raise ParameterValidationError(problems)

    def snapshot(self) -> ParameterSnapshot:
        return ParameterSnapshot(
            self.kind,
            {name: self._parameters[name] for name in self._valid if name in self._parameters},
            self._output_names,
            self._output_mapping,
        )

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Serialise backing values into a JSON friendly structure."""

        payload: Dict[str, Any] = {
            "kind": getattr(self.kind, "value", self.kind),
            "parameters": {
                descriptor.name: copy.deepcopy(descriptor.value)
                for descriptor in self._parameters.values()
            },
        }
        if self._output_mapping:
            payload["output_mapping"] = dict(self._output_mapping)
        return payload

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        kind_resolver: Callable[[Any], Any],
    ) -> "ParameterStore":
        """Restore a store created by :meth:`to_dict`.

        ``kind_resolver`` converts the stored kind identifier back into a step
        kind. Descriptors are untyped until the next recompute.
        """

        store = cls(kind_resolver(data["kind"]))
        for name, value in dict(data.get("parameters", {})).items():
            store.set_value(name, copy.deepcopy(value))
        store.set_output_mapping(data.get("output_mapping", {}))
        return store

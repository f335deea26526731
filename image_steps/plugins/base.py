"""Step contract shared by every step kind.

Step kinds form a closed catalog. Each :class:`StepKind` maps to exactly one
:class:`StepDelegate`, a frozen pair of functions:

``fixup_parameters(builder)``
    Declare the kind's parameters in canonical order, resolving every value a
    later parameter depends on before that parameter is declared.

``execute_step(parameters, step_input, output, settings)``
    Read the snapshot, resolve inputs, call the pixel kernels and append
    members or error strings to ``output``.

Delegates hold no per-instance state; the :class:`ParameterStore` passed in
by the caller owns it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Optional, Tuple, Union

from image_steps.core.settings_manager import StepSettings
from image_steps.data.members import Member, MemberKind
from image_steps.processing.errors import UnknownStepKindError
from image_steps.processing.parameters import ParameterBuilder, ParameterSnapshot, ParameterStore
from image_steps.processing.step_io import OutputSink, StepInput


LOGGER = logging.getLogger(__name__)


__all__ = [
    "StepKind",
    "StepCategory",
    "StepDelegate",
    "StepCatalog",
    "resolve_sources",
]


class StepKind(Enum):
    """Identifiers of the available step kinds."""

    EXTRACT_RECT = "extract_rect"
    SCALE = "scale"
    TO_FLOAT = "to_float"
    DRAW_SHAPES = "draw_shapes"
    NORMALIZE_BRIGHTNESS = "normalize_brightness"


class StepCategory(Enum):
    """Tags a host uses to group step kinds."""

    FIND_AND_SEGMENT = "find_and_segment"
    PROCESSING = "processing"
    CONVERSION = "conversion"
    RENDERING = "rendering"


FixupFunction = Callable[[ParameterBuilder], None]
ExecuteFunction = Callable[[ParameterSnapshot, StepInput, OutputSink, StepSettings], None]


@dataclass(frozen=True)
class StepDelegate:
    """Recompute and execute behaviour of one step kind."""

    kind: StepKind
    categories: FrozenSet[StepCategory]
    output_names: Tuple[str, ...]
    fixup_parameters: FixupFunction = field(repr=False)
    execute_step: ExecuteFunction = field(repr=False)
    description: str = ""

    def recompute_parameters(self, store: ParameterStore, settings: Optional[StepSettings] = None) -> None:
        if store.kind is not self.kind:
            raise ValueError(f"Cannot recompute a {store.kind} store with the {self.kind.value} delegate")
        builder = store.builder(settings or StepSettings())
        builder.set_output_names(self.output_names)
        self.fixup_parameters(builder)
        store.apply(builder)

    def execute(
        self,
        parameters: Union[ParameterStore, ParameterSnapshot],
        step_input: StepInput,
        settings: Optional[StepSettings] = None,
    ) -> OutputSink:
        """Run the step and return its sink; failures end up in ``sink.errors``."""

        snapshot = parameters.snapshot() if isinstance(parameters, ParameterStore) else parameters
        output = OutputSink()
        try:
            self.execute_step(snapshot, step_input, output, settings or StepSettings())
        except Exception as exc:
            LOGGER.error(
                "Step kernel raised",
                exc_info=exc,
                extra={"component": "StepDelegate", "step": self.kind.value},
            )
            output.add_error(f"{self.kind.value} failed: {exc}")
        for message in output.errors:
            LOGGER.warning(message, extra={"component": "StepDelegate", "step": self.kind.value})
        return output


@dataclass
class StepCatalog:
    """Registry mapping every :class:`StepKind` to its delegate."""

    settings: StepSettings = field(default_factory=StepSettings)
    _delegates: Dict[StepKind, StepDelegate] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_delegates(
        cls, delegates: Iterable[StepDelegate], settings: Optional[StepSettings] = None
    ) -> "StepCatalog":
        catalog = cls(settings or StepSettings())
        for delegate in delegates:
            catalog.register(delegate)
        return catalog

    def register(self, delegate: StepDelegate) -> None:
        if not isinstance(delegate.kind, StepKind):
            raise TypeError(f"{delegate!r} does not declare a StepKind")
        existing = self._delegates.get(delegate.kind)
        if existing is delegate:
            LOGGER.debug("Ignoring duplicate registration for %s", delegate.kind.value)
            return
        if existing is not None:
            raise ValueError(f"A delegate is already registered for {delegate.kind.value}")
        self._delegates[delegate.kind] = delegate
        LOGGER.debug(
            "Registered step kind %s (%s)",
            delegate.kind.value,
            ", ".join(sorted(category.value for category in delegate.categories)),
        )

    def with_settings(self, settings: StepSettings) -> "StepCatalog":
        return StepCatalog.from_delegates(self._delegates.values(), settings)

    def get_delegate(self, kind: Union[StepKind, str]) -> StepDelegate:
        try:
            return self._delegates[StepKind(kind)]
        except (KeyError, ValueError):
            raise UnknownStepKindError(kind) from None

    def iter_delegates(self, category: Optional[StepCategory] = None) -> Iterator[StepDelegate]:
        for delegate in self._delegates.values():
            if category is None or category in delegate.categories:
                yield delegate

    def kinds(self) -> Tuple[StepKind, ...]:
        return tuple(self._delegates)

    # ------------------------------------------------------------------
    # Step contract entry points
    # ------------------------------------------------------------------
    def create_store(self, kind: Union[StepKind, str]) -> ParameterStore:
        delegate = self.get_delegate(kind)
        store = ParameterStore(delegate.kind)
        delegate.recompute_parameters(store, self.settings)
        return store

    def recompute_parameters(self, store: ParameterStore) -> None:
        self.get_delegate(store.kind).recompute_parameters(store, self.settings)

    def change_kind(self, store: ParameterStore, kind: Union[StepKind, str]) -> None:
        delegate = self.get_delegate(kind)
        store.change_kind(delegate.kind)
        delegate.recompute_parameters(store, self.settings)

    def execute(
        self,
        parameters: Union[ParameterStore, ParameterSnapshot],
        step_input: StepInput,
    ) -> OutputSink:
        return self.get_delegate(parameters.kind).execute(parameters, step_input, self.settings)


def resolve_sources(
    source_name: str,
    kind: MemberKind,
    step_input: StepInput,
    output: OutputSink,
    missing_error: str,
) -> Tuple[Member, ...]:
    """Resolve the members a single-input transform should process.

    A named source resolves to exactly that member. An empty name selects
    every ``kind`` member of the preceding step, so the transform runs once
    per match. Failures are appended to ``output`` and yield no members.
    """

    if source_name:
        member = step_input.member(source_name, kind)
        if member is None:
            output.add_error(missing_error)
            return ()
        return (member,)

    if not step_input.has_previous_step:
        output.add_error("No input data found.")
        return ()
    return tuple(step_input.previous_members_of(kind))

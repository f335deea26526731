"""Ordered collections of configured steps and their sequential execution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from image_steps.core.settings_manager import SettingsManager
from image_steps.data.members import Member, MemberKind
from image_steps.plugins import STEP_CATALOG, StepCatalog, StepKind

from .errors import ParameterValidationError
from .parameters import ParameterStore
from .step_io import OutputSink, StepInput


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Result of executing the step at ``index``."""

    index: int
    kind: StepKind
    sink: OutputSink

    @property
    def succeeded(self) -> bool:
        return not self.sink.has_errors

    @property
    def members(self) -> Tuple[Member, ...]:
        return tuple(self.sink.members)

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(self.sink.errors)


@dataclass
class PipelineRun:
    """Everything one call to :meth:`PipelineManager.run` produced."""

    outcomes: List[StepOutcome] = field(default_factory=list)
    published: StepInput = field(default_factory=StepInput)

    @property
    def succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self.outcomes)

    def errors(self) -> List[Tuple[int, str]]:
        return [(outcome.index, error) for outcome in self.outcomes for error in outcome.errors]

    def member(self, name: str, kind: MemberKind) -> Optional[Member]:
        return self.published.member(name, kind)


class PipelineManager:
    """Manage an ordered collection of configured steps.

    Every step is a :class:`ParameterStore`. Parameter edits go through the
    manager so the owning step kind recomputes its descriptors after each
    change. A ``settings_manager`` replaces the catalog settings with the
    :class:`StepSettings` it holds.
    """

    def __init__(
        self,
        steps: Optional[Iterable[ParameterStore]] = None,
        *,
        catalog: Optional[StepCatalog] = None,
        settings_manager: Optional[SettingsManager] = None,
    ) -> None:
        self.catalog = catalog or STEP_CATALOG
        if settings_manager is not None:
            self.catalog = self.catalog.with_settings(settings_manager.step_settings())
        self.steps: List[ParameterStore] = []
        for step in steps or []:
            self.add_step(step)

    # ------------------------------------------------------------------
    # Step management helpers
    # ------------------------------------------------------------------
    def add_step(
        self,
        step: Union[ParameterStore, StepKind, str],
        index: Optional[int] = None,
    ) -> ParameterStore:
        """Append ``step`` (a store or a kind to instantiate) or insert at ``index``."""

        if isinstance(step, ParameterStore):
            self.catalog.recompute_parameters(step)
        else:
            step = self.catalog.create_store(step)

        if index is None:
            LOGGER.debug("Appending %s step", step.kind.value)
            self.steps.append(step)
        else:
            LOGGER.debug("Inserting %s step at index %s", step.kind.value, index)
            self.steps.insert(index, step)
        return step

    def remove_step(self, index: int) -> ParameterStore:
        step = self.steps.pop(index)
        LOGGER.debug("Removed %s step at index %s", step.kind.value, index)
        return step

    def move_step(self, old_index: int, new_index: int) -> None:
        step = self.steps.pop(old_index)
        self.steps.insert(new_index, step)
        LOGGER.info("Moved %s step from %s to %s", step.kind.value, old_index, new_index)

    def get_step(self, index: int) -> ParameterStore:
        return self.steps[index]

    def set_parameter(self, index: int, name: str, value: Any) -> None:
        """Set a backing value and recompute the step's descriptors."""

        step = self.steps[index]
        step.set_value(name, value)
        self.catalog.recompute_parameters(step)

    def set_output_mapping(self, index: int, mapping: Mapping[str, str]) -> None:
        step = self.steps[index]
        unknown = sorted(set(mapping) - set(step.output_names))
        if unknown:
            raise KeyError(f"{step.kind.value} step has no output slots {unknown}")
        step.set_output_mapping(mapping)

    def change_step_kind(self, index: int, kind: Union[StepKind, str]) -> ParameterStore:
        """Switch the step at ``index`` to ``kind`` keeping compatible values."""

        step = self.steps[index]
        self.catalog.change_kind(step, kind)
        LOGGER.info("Step %s is now a %s step", index, step.kind.value)
        return step

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Raise :class:`ParameterValidationError` listing every invalid step."""

        problems: List[str] = []
        for index, step in enumerate(self.steps):
            try:
                step.validate()
            except ParameterValidationError as exc:
                problems.extend(f"step {index} ({step.kind.value}) {problem}" for problem in exc.problems)
        if problems:
            raise ParameterValidationError(problems)

    def run(self, initial_members: Sequence[Member] = ()) -> PipelineRun:
        """Execute every step in order.

        ``initial_members`` act as the output of a step preceding the first
        one. A step that reports errors does not stop later steps; they simply
        fail to resolve whatever it did not publish.
        """

        self.validate()
        published = StepInput([initial_members]) if initial_members else StepInput()
        run = PipelineRun()
        for index, step in enumerate(self.steps):
            sink = self.catalog.execute(step.snapshot(), published)
            outcome = StepOutcome(index, step.kind, sink)
            run.outcomes.append(outcome)
            if sink.has_errors:
                LOGGER.warning(
                    "Pipeline step reported %d error(s)",
                    len(sink.errors),
                    extra={"component": "PipelineManager", "step": f"{index}:{step.kind.value}"},
                )
            published = published.extend(sink.members)
        run.published = published
        LOGGER.info(
            "Pipeline finished: %d step(s), %d error(s)", len(run.outcomes), len(run.errors())
        )
        return run

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {"steps": [step.to_dict() for step in self.steps]}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        catalog: Optional[StepCatalog] = None,
        settings_manager: Optional[SettingsManager] = None,
    ) -> "PipelineManager":
        manager = cls(catalog=catalog, settings_manager=settings_manager)
        for entry in data.get("steps", []):
            manager.add_step(ParameterStore.from_dict(entry, lambda kind: manager.catalog.get_delegate(kind).kind))
        return manager

    def __len__(self) -> int:  # pragma: no cover - container convenience
        return len(self.steps)

    def __iter__(self) -> Iterator[ParameterStore]:  # pragma: no cover - container convenience
        return iter(self.steps)

"""Inputs visible to a step and the sink a step writes into."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from image_steps.data.members import Member, MemberKind


LOGGER = logging.getLogger(__name__)


class StepInput:
    """Read-only view over everything published before the current step.

    ``member`` looks names up across all upstream outputs, the most recent
    publication winning, and returns ``None`` rather than raising when the
    name is unknown or the payload kind does not match. ``previous_members``
    holds the immediately preceding step's output in publication order.
    """

    def __init__(
        self,
        upstream: Iterable[Sequence[Member]] = (),
    ) -> None:
        self._steps: Tuple[Tuple[Member, ...], ...] = tuple(tuple(members) for members in upstream)
        index = {}
        for members in self._steps:
            for member in members:
                index[member.name] = member
        self._index = index

    @classmethod
    def from_members(cls, members: Sequence[Member]) -> "StepInput":
        """Build an input whose single preceding step published ``members``."""

        return cls([members])

    def member(self, name: str, kind: MemberKind) -> Optional[Member]:
        if not name:
            return None
        member = self._index.get(name)
        if member is None:
            return None
        if member.kind is not kind:
            LOGGER.debug(
                "Member '%s' is a %s, expected %s", name, member.kind.value, kind.value
            )
            return None
        return member

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @property
    def has_previous_step(self) -> bool:
        return bool(self._steps)

    @property
    def previous_members(self) -> Tuple[Member, ...]:
        return self._steps[-1] if self._steps else ()

    def previous_members_of(self, kind: MemberKind) -> Iterator[Member]:
        return (member for member in self.previous_members if member.kind is kind)

    def extend(self, members: Sequence[Member]) -> "StepInput":
        """Return a new input with ``members`` appended as the latest step."""

        return StepInput(self._steps + (tuple(members),))


@dataclass
class OutputSink:
    """Append-only members and error strings produced by one execution."""

    members: List[Member] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_member(self, member: Member) -> Member:
        self.members.append(member)
        return member

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def members_named(self, name: str) -> List[Member]:
        return [member for member in self.members if member.name == name]

"""Tests for :mod:`image_steps.processing.step_io`."""
from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")

from image_steps.data.members import MemberKind, byte_map_member, color_map_member
from image_steps.processing.step_io import OutputSink, StepInput


def test_member_lookup_miss_returns_none() -> None:
    step_input = StepInput.from_members([color_map_member("a", np.zeros((2, 2, 4), np.uint8))])

    assert step_input.member("missing", MemberKind.COLOR_MAP) is None
    assert step_input.member("", MemberKind.COLOR_MAP) is None


def test_member_lookup_checks_kind() -> None:
    mask = byte_map_member("mask", np.zeros((2, 2)))
    step_input = StepInput.from_members([mask])

    assert step_input.member("mask", MemberKind.COLOR_MAP) is None
    assert step_input.member("mask", MemberKind.BYTE_MAP) is mask


def test_latest_publication_wins_across_steps() -> None:
    older = color_map_member("image", np.zeros((1, 1, 4), np.uint8))
    newer = color_map_member("image", np.ones((1, 1, 4), np.uint8))
    step_input = StepInput([[older], [newer]])

    assert step_input.member("image", MemberKind.COLOR_MAP) is newer


def test_previous_members_are_the_last_step_only() -> None:
    first = color_map_member("first", np.zeros((1, 1, 4), np.uint8))
    second = color_map_member("second", np.zeros((1, 1, 4), np.uint8))
    mask = byte_map_member("mask", np.zeros((1, 1)))
    step_input = StepInput([[first], [second, mask]])

    assert step_input.previous_members == (second, mask)
    assert list(step_input.previous_members_of(MemberKind.COLOR_MAP)) == [second]
    assert "first" in step_input


def test_extend_adds_a_step_without_mutating() -> None:
    base = StepInput()
    extended = base.extend([])

    assert not base.has_previous_step
    assert extended.has_previous_step
    assert extended.previous_members == ()


def test_output_sink_appends_in_order() -> None:
    sink = OutputSink()
    first = sink.add_member(color_map_member("out", np.zeros((1, 1, 4), np.uint8)))
    sink.add_error("first problem")
    second = sink.add_member(color_map_member("out", np.zeros((1, 1, 4), np.uint8)))
    sink.add_error("second problem")

    assert sink.members == [first, second]
    assert sink.members_named("out") == [first, second]
    assert sink.errors == ["first problem", "second problem"]
    assert sink.has_errors


def test_color_map_member_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError):
        color_map_member("bad", np.zeros((2, 2, 2), np.uint8))

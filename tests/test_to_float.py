"""Tests for the convert-to-float step."""
from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")
pytest.importorskip("cv2")

from image_steps.data.members import MemberKind, byte_map_member, color_map_member
from image_steps.plugins import STEP_CATALOG, StepKind, names
from image_steps.processing.step_io import StepInput


def _store(**values):
    store = STEP_CATALOG.create_store(StepKind.TO_FLOAT)
    for name, value in values.items():
        store.set_value(name, value)
    STEP_CATALOG.recompute_parameters(store)
    return store


def test_empty_name_converts_every_previous_color_member(make_image) -> None:
    store = _store()
    store.set_output_mapping({"Output data": "floats"})
    upstream = [
        color_map_member("a", make_image(4, 2)),
        byte_map_member("mask", np.zeros((2, 4), dtype=np.uint8)),
        color_map_member("b", make_image(3, 3)),
    ]

    sink = STEP_CATALOG.execute(store, StepInput.from_members(upstream))

    assert sink.errors == []
    assert len(sink.members) == 2
    assert {member.name for member in sink.members} == {"floats"}
    assert all(member.kind is MemberKind.FLOATS for member in sink.members)
    assert [(m.data.width, m.data.height) for m in sink.members] == [(4, 2), (3, 3)]


def test_fallback_only_looks_at_the_previous_step(make_image) -> None:
    older = [color_map_member("a", make_image(2, 2))]
    step_input = StepInput([older, []])

    sink = STEP_CATALOG.execute(_store(), step_input)

    assert sink.errors == []
    assert sink.members == []


def test_no_previous_step_is_an_error() -> None:
    sink = STEP_CATALOG.execute(_store(), StepInput())

    assert sink.errors == ["No input data found."]
    assert sink.members == []


def test_explicit_name_converts_only_that_member(make_image) -> None:
    upstream = [color_map_member("a", make_image(4, 2)), color_map_member("b", make_image(3, 3))]

    sink = STEP_CATALOG.execute(_store(**{names.COLOR_IMAGE: "b"}), StepInput.from_members(upstream))

    assert len(sink.members) == 1
    assert sink.members[0].data.width == 3


def test_explicit_name_missing_is_an_error(make_image) -> None:
    sink = STEP_CATALOG.execute(
        _store(**{names.COLOR_IMAGE: "nope"}),
        StepInput.from_members([color_map_member("a", make_image(2, 2))]),
    )

    assert sink.errors == ["Failed to find source color image."]
    assert sink.members == []


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        ("Interleaved", [1.0, 0.0, 0.0, 0.0, 1.0, 0.0]),
        ("Planar", [1.0, 0.0, 0.0, 1.0, 0.0, 0.0]),
    ],
)
def test_channel_modes(mode, expected) -> None:
    image = np.array([[[255, 0, 0], [0, 255, 0]]], dtype=np.uint8)
    store = _store(**{names.COLOR_IMAGE: "img", names.CHANNEL_MODE: mode, names.CHANNEL_ORDER: "RGB"})

    payload = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("img", image)])).members[0].data

    assert payload.channels == 3
    np.testing.assert_allclose(payload.data, expected)


def test_mono_and_alpha_orders() -> None:
    image = np.array([[[255, 255, 255]]], dtype=np.uint8)
    step_input = StepInput.from_members([color_map_member("img", image)])

    mono = STEP_CATALOG.execute(_store(**{names.COLOR_IMAGE: "img", names.CHANNEL_ORDER: "Mono"}), step_input)
    bgra = STEP_CATALOG.execute(_store(**{names.COLOR_IMAGE: "img", names.CHANNEL_ORDER: "BGRA"}), step_input)

    assert mono.members[0].data.channels == 1
    np.testing.assert_allclose(mono.members[0].data.data, [1.0], rtol=1e-5)
    assert bgra.members[0].data.channels == 4
    np.testing.assert_allclose(bgra.members[0].data.data, [1.0, 1.0, 1.0, 1.0])

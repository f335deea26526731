"""Tests for the scale step."""
from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")
pytest.importorskip("cv2")

from image_steps.data.members import MemberKind, byte_map_member, color_map_member
from image_steps.plugins import STEP_CATALOG, StepKind, make_scale_step, names
from image_steps.plugins.scale import calculate_size
from image_steps.processing.step_io import StepInput


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ((100, 0), (100, 50)),
        ((0, 50), (100, 50)),
        ((0, 0), (200, 100)),
        ((30, 40), (30, 40)),
        ((1, 0), (1, 100)),
    ],
)
def test_calculate_size(target, expected) -> None:
    assert calculate_size(target[0], target[1], 200, 100) == expected


def test_calculate_size_rounds_aspect_ratio() -> None:
    assert calculate_size(0, 10, 15, 20) == (8, 10)


def test_calculate_size_rounds_exact_halves_to_even() -> None:
    assert calculate_size(100, 0, 200, 101) == (100, 50)
    assert calculate_size(100, 0, 200, 103) == (100, 52)


def test_scale_preserves_aspect_ratio(make_image) -> None:
    store = make_scale_step(100, 0)
    store.set_value(names.COLOR_IMAGE, "img")
    STEP_CATALOG.recompute_parameters(store)

    sink = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("img", make_image(200, 100))]))

    assert sink.errors == []
    assert [member.name for member in sink.members] == ["Output color image"]
    assert sink.members[0].data.shape == (50, 100, 4)


def test_unset_size_keeps_source_dimensions(make_image) -> None:
    store = make_scale_step(0, 0)
    store.set_value(names.COLOR_IMAGE, "img")
    STEP_CATALOG.recompute_parameters(store)

    sink = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("img", make_image(200, 100))]))

    assert sink.members[0].data.shape == (100, 200, 4)


def test_color_image_and_byte_map_scale_independently(make_image) -> None:
    store = make_scale_step(50, 0)
    store.set_value(names.COLOR_IMAGE, "img")
    store.set_value(names.BYTE_MAP, "mask")
    store.set_output_mapping({"Output byte map": "small mask"})
    STEP_CATALOG.recompute_parameters(store)
    members = [
        color_map_member("img", make_image(100, 100)),
        byte_map_member("mask", np.zeros((40, 200), dtype=np.uint8)),
    ]

    sink = STEP_CATALOG.execute(store, StepInput.from_members(members))

    assert sink.errors == []
    color, mask = sink.members
    assert (color.name, color.kind, color.data.shape) == ("Output color image", MemberKind.COLOR_MAP, (50, 50, 4))
    assert (mask.name, mask.kind, mask.data.shape) == ("small mask", MemberKind.BYTE_MAP, (10, 50))


def test_missing_named_input_is_an_error_per_slot(make_image) -> None:
    store = STEP_CATALOG.create_store(StepKind.SCALE)
    store.set_value(names.COLOR_IMAGE, "missing")
    store.set_value(names.BYTE_MAP, "mask")
    STEP_CATALOG.recompute_parameters(store)

    sink = STEP_CATALOG.execute(
        store, StepInput.from_members([byte_map_member("mask", np.zeros((4, 4), dtype=np.uint8))])
    )

    assert sink.errors == ["Failed to find color image."]
    assert [member.name for member in sink.members] == ["Output byte map"]


def test_empty_names_produce_nothing(make_image) -> None:
    store = STEP_CATALOG.create_store(StepKind.SCALE)

    sink = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("img", make_image(4, 4))]))

    assert sink.errors == []
    assert sink.members == []


def test_only_missing_color_image_gives_one_error(make_image) -> None:
    store = make_scale_step(10, 10)
    store.set_value(names.COLOR_IMAGE, "missing")
    STEP_CATALOG.recompute_parameters(store)

    sink = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("img", make_image(4, 4))]))

    assert sink.errors == ["Failed to find color image."]
    assert sink.members == []

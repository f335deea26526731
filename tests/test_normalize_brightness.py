"""Tests for the brightness normalisation step."""
from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")
pytest.importorskip("cv2")

from image_steps.data.members import color_map_member
from image_steps.functions import normalize_brightness
from image_steps.plugins import STEP_CATALOG, StepKind, names
from image_steps.processing.step_io import StepInput


def test_global_mode_reaches_target(make_image) -> None:
    result = normalize_brightness(make_image(8, 8, value=64), mode="Global", target=128)

    assert (result[..., :3] == 128).all()
    assert (result[..., 3] == 255).all()


def test_local_mode_flattens_uniform_images(make_image) -> None:
    result = normalize_brightness(make_image(16, 16, value=100), mode="Local", target=50, radius=4)

    assert (result[..., :3] == 50).all()


def test_black_image_is_left_alone(make_image) -> None:
    result = normalize_brightness(make_image(4, 4), mode="Global", target=200)

    assert not result[..., :3].any()


def test_step_converts_every_previous_color_member(make_image) -> None:
    store = STEP_CATALOG.create_store(StepKind.NORMALIZE_BRIGHTNESS)
    step_input = StepInput.from_members(
        [color_map_member("a", make_image(4, 4, value=32)), color_map_member("b", make_image(2, 2, value=64))]
    )

    sink = STEP_CATALOG.execute(store, step_input)

    assert sink.errors == []
    assert [member.name for member in sink.members] == ["Output data", "Output data"]
    assert all((member.data[..., :3] == 128).all() for member in sink.members)


def test_radius_is_only_enabled_in_local_mode() -> None:
    store = STEP_CATALOG.create_store(StepKind.NORMALIZE_BRIGHTNESS)
    assert not store.descriptor(names.RADIUS).enabled

    store.set_value(names.MODE, "Local")
    STEP_CATALOG.recompute_parameters(store)

    assert store.descriptor(names.RADIUS).enabled
    assert store.value(names.RADIUS) == 32


def test_explicit_name_missing_is_an_error(make_image) -> None:
    store = STEP_CATALOG.create_store(StepKind.NORMALIZE_BRIGHTNESS)
    store.set_value(names.COLOR_IMAGE, "nope")
    STEP_CATALOG.recompute_parameters(store)

    sink = STEP_CATALOG.execute(store, StepInput.from_members([color_map_member("a", make_image(2, 2))]))

    assert sink.errors == ["Failed to find source color image."]
    assert sink.members == []


def test_no_previous_step_is_an_error() -> None:
    sink = STEP_CATALOG.execute(STEP_CATALOG.create_store(StepKind.NORMALIZE_BRIGHTNESS), StepInput())

    assert sink.errors == ["No input data found."]
    assert sink.members == []

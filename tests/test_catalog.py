"""Tests for the step catalog and the delegate contract."""
from __future__ import annotations

import pytest

pytest.importorskip("numpy")

from image_steps.plugins import (
    BUILTIN_DELEGATES,
    STEP_CATALOG,
    StepCatalog,
    StepCategory,
    StepDelegate,
    StepKind,
    default_catalog,
)
from image_steps.plugins import to_float
from image_steps.processing.errors import UnknownStepKindError
from image_steps.processing.step_io import StepInput


def test_every_kind_has_a_delegate() -> None:
    assert set(STEP_CATALOG.kinds()) == set(StepKind)
    for kind in StepKind:
        assert STEP_CATALOG.get_delegate(kind).kind is kind
        assert STEP_CATALOG.get_delegate(kind.value).kind is kind


def test_categories_filter_delegates() -> None:
    processing = {delegate.kind for delegate in STEP_CATALOG.iter_delegates(StepCategory.PROCESSING)}

    assert processing == {StepKind.SCALE, StepKind.NORMALIZE_BRIGHTNESS}
    assert len(list(STEP_CATALOG.iter_delegates())) == len(StepKind)


def test_unknown_kind_raises() -> None:
    with pytest.raises(UnknownStepKindError):
        STEP_CATALOG.get_delegate("blur")
    with pytest.raises(KeyError):
        STEP_CATALOG.create_store("blur")


@pytest.mark.parametrize(
    ("kind", "outputs"),
    [
        (StepKind.EXTRACT_RECT, ("Output data",)),
        (StepKind.SCALE, ("Output color image", "Output byte map")),
        (StepKind.TO_FLOAT, ("Output data",)),
        (StepKind.DRAW_SHAPES, ("Output image",)),
        (StepKind.NORMALIZE_BRIGHTNESS, ("Output data",)),
    ],
)
def test_output_names_are_stable(kind, outputs) -> None:
    assert STEP_CATALOG.get_delegate(kind).output_names == outputs
    assert STEP_CATALOG.create_store(kind).output_names == outputs


def test_kernel_exceptions_become_step_errors() -> None:
    def explode(parameters, step_input, output, settings):
        output.add_error("partial")
        raise RuntimeError("boom")

    delegate = StepDelegate(
        kind=StepKind.TO_FLOAT,
        categories=frozenset({StepCategory.CONVERSION}),
        output_names=("Output data",),
        fixup_parameters=to_float.fixup_parameters,
        execute_step=explode,
    )
    catalog = StepCatalog.from_delegates([delegate])

    sink = catalog.execute(catalog.create_store(StepKind.TO_FLOAT), StepInput())

    assert sink.errors == ["partial", "to_float failed: boom"]


def test_recompute_rejects_a_store_of_another_kind() -> None:
    store = STEP_CATALOG.create_store(StepKind.SCALE)

    with pytest.raises(ValueError):
        STEP_CATALOG.get_delegate(StepKind.TO_FLOAT).recompute_parameters(store)


def test_registration_rejects_conflicting_delegates() -> None:
    catalog = default_catalog()
    catalog.register(BUILTIN_DELEGATES[0])

    clone = StepDelegate(
        kind=BUILTIN_DELEGATES[0].kind,
        categories=BUILTIN_DELEGATES[0].categories,
        output_names=BUILTIN_DELEGATES[0].output_names,
        fixup_parameters=BUILTIN_DELEGATES[0].fixup_parameters,
        execute_step=to_float.execute_step,
    )
    with pytest.raises(ValueError):
        catalog.register(clone)

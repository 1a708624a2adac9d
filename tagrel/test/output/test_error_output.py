from __future__ import annotations

import pytest

from tagrel.core.errors import ErrorCode
from tagrel.output.console import MockConsole, Style
from tagrel.output.errors import (
    pipeline_error_exit_code,
    print_pipeline_error,
    print_pipeline_failure,
)
from tagrel.pipeline.errors import (
    AssetUploadFailed,
    BuildStepFailed,
    FormulaUpdateFailed,
    MalformedReference,
    PackagingFailed,
    PipelineError,
    ReleaseCreateFailed,
)
from tagrel.pipeline.runner import PipelineFailure


@pytest.mark.parametrize(
    ("error", "code", "label"),
    [
        (
            MalformedReference("refs/heads/main", "not a tag"),
            ErrorCode.USER_ERROR,
            "MalformedReference",
        ),
        (
            BuildStepFailed("test", 2, "test phase failed"),
            ErrorCode.BUILD_ERROR,
            "BuildStepFailed{test}",
        ),
        (PackagingFailed("missing"), ErrorCode.PACKAGING_ERROR, "PackagingFailed"),
        (ReleaseCreateFailed("v1", "denied"), ErrorCode.PUBLISH_ERROR, "ReleaseCreateFailed"),
        (
            AssetUploadFailed("v1", "a.tar.gz", "boom"),
            ErrorCode.PUBLISH_ERROR,
            "AssetUploadFailed",
        ),
        (FormulaUpdateFailed("v1", "brew failed"), ErrorCode.FORMULA_ERROR, "FormulaUpdateFailed"),
    ],
)
def test_each_error_has_label_and_code(error: PipelineError, code: ErrorCode, label: str) -> None:
    console = MockConsole()
    print_pipeline_error(error, console)

    assert console.outputs[0].style == Style.ERROR
    assert label in console.outputs[0].message
    assert pipeline_error_exit_code(error) == int(code)


def test_hint_is_printed_dimmed() -> None:
    console = MockConsole()
    print_pipeline_error(PackagingFailed("missing", hint="check product.binary"), console)

    assert console.outputs[-1].message == "hint: check product.binary"
    assert console.outputs[-1].style == Style.DIM


def test_failure_names_the_step() -> None:
    console = MockConsole()
    failure = PipelineFailure(
        step="building",
        error=BuildStepFailed("lint", 1, "lint phase failed"),
        states=("resolving", "building", "failed"),
    )
    print_pipeline_failure(failure, console)

    assert "failed step: building" in console.messages

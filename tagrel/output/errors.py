"""Error presentation utilities.

Centralized formatting and exit code mapping for pipeline failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagrel.core.errors import ErrorCode
from tagrel.output.console import Style
from tagrel.pipeline.errors import (
    AssetUploadFailed,
    BuildStepFailed,
    FormulaUpdateFailed,
    MalformedReference,
    PackagingFailed,
    PipelineError,
    ReleaseCreateFailed,
)

if TYPE_CHECKING:
    from tagrel.output.console import ConsoleProtocol
    from tagrel.pipeline.runner import PipelineFailure

__all__ = ["print_pipeline_error", "pipeline_error_exit_code", "print_pipeline_failure"]


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    match error:
        case MalformedReference(message=message):
            console.error(f"MalformedReference: {message}")
        case BuildStepFailed(phase=phase, message=message):
            console.error(f"BuildStepFailed{{{phase}}}: {message}")
        case PackagingFailed(message=message):
            console.error(f"PackagingFailed: {message}")
        case ReleaseCreateFailed(message=message):
            console.error(f"ReleaseCreateFailed: {message}")
        case AssetUploadFailed(message=message):
            console.error(f"AssetUploadFailed: {message}")
        case FormulaUpdateFailed(message=message):
            console.error(f"FormulaUpdateFailed: {message}")

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def print_pipeline_failure(failure: PipelineFailure, console: ConsoleProtocol) -> None:
    print_pipeline_error(failure.error, console)
    console.print(f"failed step: {failure.step}", Style.DIM)


def pipeline_error_exit_code(error: PipelineError) -> int:
    match error:
        case MalformedReference():
            return int(ErrorCode.USER_ERROR)
        case BuildStepFailed():
            return int(ErrorCode.BUILD_ERROR)
        case PackagingFailed():
            return int(ErrorCode.PACKAGING_ERROR)
        case ReleaseCreateFailed() | AssetUploadFailed():
            return int(ErrorCode.PUBLISH_ERROR)
        case FormulaUpdateFailed():
            return int(ErrorCode.FORMULA_ERROR)

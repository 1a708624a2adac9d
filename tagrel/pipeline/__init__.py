"""Release pipeline steps and their orchestration."""

from .errors import (
    AssetUploadFailed,
    BuildStepFailed,
    FormulaUpdateFailed,
    MalformedReference,
    PackagingFailed,
    PipelineError,
    ReleaseCreateFailed,
)
from .runner import PipelineFailure, PipelineOutcome, Secrets, run_pipeline

__all__ = [
    # errors
    "AssetUploadFailed",
    "BuildStepFailed",
    "FormulaUpdateFailed",
    "MalformedReference",
    "PackagingFailed",
    "PipelineError",
    "ReleaseCreateFailed",
    # runner
    "PipelineFailure",
    "PipelineOutcome",
    "Secrets",
    "run_pipeline",
]

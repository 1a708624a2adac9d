from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

BuildPhase = Literal["compile", "test", "lint"]


@dataclass(frozen=True, slots=True)
class MalformedReference:
    reference: str
    message: str
    hint: str | None = "Expected a tag reference such as refs/tags/v1.2.3"


@dataclass(frozen=True, slots=True)
class BuildStepFailed:
    phase: BuildPhase
    returncode: int
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PackagingFailed:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseCreateFailed:
    tag: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class AssetUploadFailed:
    tag: str
    asset: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class FormulaUpdateFailed:
    version: str
    message: str
    hint: str | None = None


PublishError = ReleaseCreateFailed | AssetUploadFailed

PipelineError = (
    MalformedReference
    | BuildStepFailed
    | PackagingFailed
    | ReleaseCreateFailed
    | AssetUploadFailed
    | FormulaUpdateFailed
)

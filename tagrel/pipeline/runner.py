"""Pipeline orchestration.

    Resolving -> Building -> Packaging -> Publishing -> UpdatingFormula -> Done

Any step may end the run in ``Failed{step, error}``. There is no resumption:
every step receives the previous step's output explicitly and nothing is read
back from shared locations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from tagrel.core.config import PipelineConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol
from tagrel.pipeline.build import run_build
from tagrel.pipeline.errors import PipelineError
from tagrel.pipeline.formula import build_request, update_formula
from tagrel.pipeline.github import ReleaseApi
from tagrel.pipeline.model import (
    BuildOutput,
    FormulaUpdateRequest,
    PackagedArchive,
    PublishedRelease,
    ReleaseTag,
)
from tagrel.pipeline.package import package_archive
from tagrel.pipeline.publish import publish_release
from tagrel.pipeline.version import resolve_version

PipelineStep = Literal["resolving", "building", "packaging", "publishing", "updating_formula"]
PipelineState = PipelineStep | Literal["done", "failed"]

STEP_TITLES: dict[PipelineStep, str] = {
    "resolving": "Resolve version",
    "building": "Build, test, lint",
    "packaging": "Package archive",
    "publishing": "Publish release",
    "updating_formula": "Update formula",
}


@dataclass(frozen=True, slots=True)
class Secrets:
    """Opaque credentials handed through to collaborators."""

    release_token: str | None = field(default=None, repr=False)
    formula_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class PipelineFailure:
    step: PipelineStep
    error: PipelineError
    states: tuple[PipelineState, ...]


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    tag: ReleaseTag
    build: BuildOutput
    archive: PackagedArchive
    release: PublishedRelease
    formula: FormulaUpdateRequest
    states: tuple[PipelineState, ...]


@dataclass
class _Trace:
    console: ConsoleProtocol
    states: list[PipelineState] = field(default_factory=list)

    def enter(self, step: PipelineStep) -> None:
        self.states.append(step)
        self.console.header(STEP_TITLES[step])

    def fail(self, step: PipelineStep, error: PipelineError) -> Err[PipelineFailure]:
        self.states.append("failed")
        return Err(PipelineFailure(step=step, error=error, states=tuple(self.states)))


def run_pipeline(
    *,
    reference: str,
    source_root: Path,
    config: PipelineConfig,
    api: ReleaseApi,
    console: ConsoleProtocol,
    secrets: Secrets | None = None,
    dry_run: bool = False,
) -> Result[PipelineOutcome, PipelineFailure]:
    secrets = secrets or Secrets()
    trace = _Trace(console=console)

    trace.enter("resolving")
    tag = resolve_version(reference, tag_pattern=config.release.tag_pattern)
    if isinstance(tag, Err):
        return trace.fail("resolving", tag.error)
    console.success(f"version {tag.value}")

    trace.enter("building")
    build = run_build(
        source_root=source_root,
        build=config.build,
        product=config.product,
        console=console,
        dry_run=dry_run,
    )
    if isinstance(build, Err):
        return trace.fail("building", build.error)
    console.success("compile, test and lint passed")

    trace.enter("packaging")
    archive = package_archive(
        build.value, product=config.product, console=console, dry_run=dry_run
    )
    if isinstance(archive, Err):
        return trace.fail("packaging", archive.error)
    console.success(f"{archive.value.name} sha256={archive.value.sha256}")

    trace.enter("publishing")
    release = publish_release(
        api=api,
        tag=tag.value,
        archive=archive.value,
        settings=config.release,
        console=console,
        dry_run=dry_run,
    )
    if isinstance(release, Err):
        return trace.fail("publishing", release.error)
    console.success(f"release {tag.value} {release.value.record.html_url}")

    trace.enter("updating_formula")
    request = build_request(
        tag=tag.value,
        archive=archive.value,
        settings=config.formula,
        repo=config.release.repo,
    )
    if isinstance(request, Err):
        return trace.fail("updating_formula", request.error)
    formula = update_formula(
        request.value,
        workspace_root=source_root,
        console=console,
        token=secrets.formula_token,
        timeout=config.timeouts.brew,
        dry_run=dry_run,
    )
    if isinstance(formula, Err):
        return trace.fail("updating_formula", formula.error)
    console.success(f"formula {request.value.formula} -> {request.value.version}")

    trace.states.append("done")
    return Ok(
        PipelineOutcome(
            tag=tag.value,
            build=build.value,
            archive=archive.value,
            release=release.value,
            formula=formula.value,
            states=tuple(trace.states),
        )
    )

"""Homebrew formula bump.

Runs ``brew bump-formula-pr`` non-interactively with explicit version,
checksum and URL, so brew neither downloads the archive to hash it nor opens
a browser. The result is a pull request against the tap repository.
"""

from __future__ import annotations

from pathlib import Path

from tagrel.core.config import FormulaConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol
from tagrel.pipeline.errors import FormulaUpdateFailed
from tagrel.pipeline.model import FormulaUpdateRequest, PackagedArchive, ReleaseTag
from tagrel.pipeline.timeouts import BREW_TIMEOUT_SECONDS
from tagrel.platform.process import run_live as run_process


def download_url(*, template: str, repo: str | None, version: str, asset: str) -> str:
    return template.format(repo=repo or "", version=version, asset=asset)


def build_request(
    *,
    tag: ReleaseTag,
    archive: PackagedArchive,
    settings: FormulaConfig,
    repo: str | None,
) -> Result[FormulaUpdateRequest, FormulaUpdateFailed]:
    if settings.formula is None:
        return Err(
            FormulaUpdateFailed(
                version=tag.value,
                message="no formula configured",
                hint="Set formula.formula (e.g. owner/tap/name) in release.toml.",
            )
        )
    if "{repo}" in settings.url_template and repo is None:
        return Err(
            FormulaUpdateFailed(
                version=tag.value,
                message="download URL needs release.repo",
                hint="Set release.repo in release.toml or GITHUB_REPOSITORY.",
            )
        )

    return Ok(
        FormulaUpdateRequest(
            version=tag.value,
            sha256=archive.sha256,
            url=download_url(
                template=settings.url_template,
                repo=repo,
                version=tag.value,
                asset=archive.name,
            ),
            formula=settings.formula,
            tap=settings.tap,
        )
    )


def bump_command(request: FormulaUpdateRequest) -> list[str]:
    return [
        "brew",
        "bump-formula-pr",
        "--force",
        "--no-browse",
        "--no-audit",
        f"--version={request.version}",
        f"--sha256={request.sha256}",
        f"--url={request.url}",
        request.formula,
    ]


def update_formula(
    request: FormulaUpdateRequest,
    *,
    workspace_root: Path,
    console: ConsoleProtocol,
    token: str | None = None,
    timeout: float = BREW_TIMEOUT_SECONDS,
    dry_run: bool = False,
) -> Result[FormulaUpdateRequest, FormulaUpdateFailed]:
    env = {"HOMEBREW_GITHUB_API_TOKEN": token} if token else None

    commands: list[list[str]] = []
    if request.tap is not None:
        commands.append(["brew", "tap", request.tap])
    commands.append(bump_command(request))

    for cmd in commands:
        console.command(cmd)
        if dry_run:
            continue
        result = run_process(cmd, cwd=workspace_root, env_overrides=env, timeout=timeout)
        if isinstance(result, Err):
            e = result.error
            return Err(
                FormulaUpdateFailed(
                    version=request.version,
                    message=f"{' '.join(cmd[:2])} failed (exit {e.returncode})",
                    hint=e.stderr.strip() or None,
                )
            )

    return Ok(request)

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

import typer

from tagrel.core.config import (
    DEFAULT_CONFIG_NAME,
    PipelineConfig,
    load_config,
    load_config_or_default,
)
from tagrel.core.errors import ErrorCode
from tagrel.core.result import Err
from tagrel.output.console import ConsoleProtocol, RichConsole, Style
from tagrel.pipeline.github import GhReleaseApi
from tagrel.pipeline.runner import Secrets


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: PipelineConfig
    console: ConsoleProtocol
    secrets: Secrets

    def release_api(self) -> GhReleaseApi:
        return GhReleaseApi(
            workspace_root=self.root,
            repo=self.config.release.repo or "",
            token=self.secrets.release_token,
            timeout=self.config.timeouts.api,
            upload_timeout=self.config.timeouts.upload,
        )


def _env_value(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def build_context(*, root: Path | None, config_path: Path | None) -> CLIContext:
    console = RichConsole()
    root = (root or Path.cwd()).expanduser().resolve()
    path = config_path or (root / DEFAULT_CONFIG_NAME)

    if config_path is None and not path.exists():
        console.print(f"no {DEFAULT_CONFIG_NAME} in {root}, using defaults", Style.DIM)

    loaded = load_config(path) if config_path is not None else load_config_or_default(path)
    if isinstance(loaded, Err):
        typer.echo(f"error: {loaded.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = loaded.value
    if config.release.repo is None:
        # Set by GitHub Actions for the repository that pushed the tag.
        repo = _env_value("GITHUB_REPOSITORY")
        if repo is not None:
            config = replace(config, release=replace(config.release, repo=repo))

    return CLIContext(
        root=root,
        config=config,
        console=console,
        secrets=Secrets(
            release_token=_env_value(config.release.token_env),
            formula_token=_env_value(config.formula.token_env),
        ),
    )

from __future__ import annotations

from pathlib import Path

import typer

from tagrel.cli.commands._helpers import (
    CONFIG_OPTION,
    DRY_RUN_OPTION,
    ROOT_OPTION,
    reference_or_exit,
)
from tagrel.cli.context import build_context
from tagrel.core.result import Err
from tagrel.output.console import Style
from tagrel.output.errors import pipeline_error_exit_code, print_pipeline_failure
from tagrel.pipeline.runner import run_pipeline


def run(
    reference: str | None = typer.Argument(
        None, help="Trigger reference, e.g. refs/tags/v1.2.3 (default: $GITHUB_REF)"
    ),
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Run the whole release: build, package, publish, bump formula."""
    ref = reference_or_exit(reference)
    ctx = build_context(root=root, config_path=config)

    result = run_pipeline(
        reference=ref,
        source_root=ctx.root,
        config=ctx.config,
        api=ctx.release_api(),
        console=ctx.console,
        secrets=ctx.secrets,
        dry_run=dry_run,
    )
    if isinstance(result, Err):
        print_pipeline_failure(result.error, ctx.console)
        raise typer.Exit(code=pipeline_error_exit_code(result.error.error))

    outcome = result.value
    ctx.console.newline()
    ctx.console.success(f"released {outcome.tag.value}")
    ctx.console.print(" -> ".join(outcome.states), Style.DIM)

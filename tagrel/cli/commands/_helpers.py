"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import NoReturn, TypeVar

import typer

from tagrel.core.errors import ErrorCode
from tagrel.core.result import Err, Result
from tagrel.output.console import ConsoleProtocol
from tagrel.output.errors import pipeline_error_exit_code, print_pipeline_error
from tagrel.pipeline.errors import PipelineError

T = TypeVar("T")

ROOT_OPTION = typer.Option(None, "--root", help="Source tree root (default: current directory)")
CONFIG_OPTION = typer.Option(None, "--config", help="Path to release.toml")
DRY_RUN_OPTION = typer.Option(False, "--dry-run", help="Print what would run; change nothing")


def reference_or_exit(reference: str | None) -> str:
    """Use the given reference, else GITHUB_REF from the CI environment."""
    ref = reference or os.environ.get("GITHUB_REF", "").strip()
    if not ref:
        exit_with_message("no reference given and GITHUB_REF is not set", ErrorCode.USER_ERROR)
    return ref


def unwrap_or_exit(result: Result[T, PipelineError], console: ConsoleProtocol) -> T:
    """Return the value of an Ok, or print the error and exit with its code."""
    if isinstance(result, Err):
        print_pipeline_error(result.error, console)
        raise typer.Exit(code=pipeline_error_exit_code(result.error))
    return result.value


def exit_with_message(message: str, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def existing_file_or_exit(path: Path) -> Path:
    if not path.is_file():
        exit_with_message(f"file not found: {path}", ErrorCode.USER_ERROR)
    return path

"""Compile, test and lint phases.

Phases run strictly in order and the first failure stops the build: a failed
compile never reaches the test runner, a failed test run never reaches the
linter.
"""

from __future__ import annotations

from pathlib import Path

from tagrel.core.config import BuildConfig, ProductConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol, Style
from tagrel.pipeline.errors import BuildPhase, BuildStepFailed
from tagrel.pipeline.model import BuildOutput
from tagrel.platform.process import run_live as run_process

PHASES: tuple[BuildPhase, ...] = ("compile", "test", "lint")


def phase_commands(settings: BuildConfig) -> tuple[tuple[BuildPhase, tuple[str, ...]], ...]:
    return tuple((phase, getattr(settings, phase)) for phase in PHASES)


def run_build(
    *,
    source_root: Path,
    build: BuildConfig,
    product: ProductConfig,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[BuildOutput, BuildStepFailed]:
    for phase, cmd in phase_commands(build):
        console.print(f"[{phase}]", Style.INFO)
        console.command(cmd)
        if dry_run:
            continue

        result = run_process(cmd, cwd=source_root, timeout=build.phase_timeout)
        if isinstance(result, Err):
            e = result.error
            if e.timed_out:
                hint = f"phase exceeded build.phase_timeout ({build.phase_timeout}s)"
            else:
                hint = e.stderr.strip() or None
            return Err(
                BuildStepFailed(
                    phase=phase,
                    returncode=e.returncode,
                    message=f"{phase} phase failed (exit {e.returncode})",
                    hint=hint,
                )
            )

    return Ok(BuildOutput(source_root=source_root, binary=source_root / product.binary))

"""Single-step commands, for re-running one stage by hand."""

from __future__ import annotations

from pathlib import Path

import typer

from tagrel.cli.commands._helpers import (
    CONFIG_OPTION,
    DRY_RUN_OPTION,
    ROOT_OPTION,
    existing_file_or_exit,
    reference_or_exit,
    unwrap_or_exit,
)
from tagrel.cli.context import build_context
from tagrel.pipeline.build import run_build
from tagrel.pipeline.formula import build_request, update_formula
from tagrel.pipeline.model import BuildOutput, PackagedArchive
from tagrel.pipeline.package import package_archive, sha256_file
from tagrel.pipeline.publish import publish_release
from tagrel.pipeline.version import resolve_version

REFERENCE_ARGUMENT = typer.Argument(
    None, help="Trigger reference, e.g. refs/tags/v1.2.3 (default: $GITHUB_REF)"
)


def resolve(
    reference: str | None = REFERENCE_ARGUMENT,
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Print the version a tag reference resolves to."""
    ctx = build_context(root=root, config_path=config)
    tag = unwrap_or_exit(
        resolve_version(reference_or_exit(reference), tag_pattern=ctx.config.release.tag_pattern),
        ctx.console,
    )
    typer.echo(tag.value)


def build(
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Run the compile, test and lint phases."""
    ctx = build_context(root=root, config_path=config)
    output = unwrap_or_exit(
        run_build(
            source_root=ctx.root,
            build=ctx.config.build,
            product=ctx.config.product,
            console=ctx.console,
            dry_run=dry_run,
        ),
        ctx.console,
    )
    ctx.console.success(f"build output: {output.binary}")


def package(
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Package the already-built binary and print its checksum."""
    ctx = build_context(root=root, config_path=config)
    output = BuildOutput(source_root=ctx.root, binary=ctx.root / ctx.config.product.binary)
    archive = unwrap_or_exit(
        package_archive(output, product=ctx.config.product, console=ctx.console),
        ctx.console,
    )
    ctx.console.success(str(archive.path))
    typer.echo(archive.sha256)


def publish(
    archive: Path = typer.Argument(..., help="Archive to attach"),
    reference: str | None = REFERENCE_ARGUMENT,
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Create (or reuse) the release for a tag and attach an archive."""
    ref = reference_or_exit(reference)
    ctx = build_context(root=root, config_path=config)
    tag = unwrap_or_exit(
        resolve_version(ref, tag_pattern=ctx.config.release.tag_pattern), ctx.console
    )
    path = existing_file_or_exit(archive)
    packaged = PackagedArchive(
        path=path, name=path.name, sha256=sha256_file(path), size=path.stat().st_size
    )
    published = unwrap_or_exit(
        publish_release(
            api=ctx.release_api(),
            tag=tag,
            archive=packaged,
            settings=ctx.config.release,
            console=ctx.console,
            dry_run=dry_run,
        ),
        ctx.console,
    )
    ctx.console.success(f"{published.asset.name} -> {published.record.html_url}")


def formula(
    sha256: str = typer.Option(..., "--sha256", help="Checksum of the released archive"),
    reference: str | None = REFERENCE_ARGUMENT,
    root: Path | None = ROOT_OPTION,
    config: Path | None = CONFIG_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Open the formula bump for an already-published release."""
    ref = reference_or_exit(reference)
    ctx = build_context(root=root, config_path=config)
    tag = unwrap_or_exit(
        resolve_version(ref, tag_pattern=ctx.config.release.tag_pattern), ctx.console
    )
    name = ctx.config.product.resolved_archive_name
    archive = PackagedArchive(
        path=ctx.root / ctx.config.product.dist_dir / name, name=name, sha256=sha256, size=0
    )
    request = unwrap_or_exit(
        build_request(
            tag=tag,
            archive=archive,
            settings=ctx.config.formula,
            repo=ctx.config.release.repo,
        ),
        ctx.console,
    )
    unwrap_or_exit(
        update_formula(
            request,
            workspace_root=ctx.root,
            console=ctx.console,
            token=ctx.secrets.formula_token,
            timeout=ctx.config.timeouts.brew,
            dry_run=dry_run,
        ),
        ctx.console,
    )
    ctx.console.success(f"formula {request.formula} -> {request.version}")

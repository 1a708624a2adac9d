"""Release archive packaging.

Design goals:

- Fixed archive name across releases (the formula URL only varies by version)
- Reproducible bytes: identical binary in, identical archive and checksum out
- Checksum taken from the closed archive file, i.e. exactly what gets uploaded
"""

from __future__ import annotations

import gzip
import hashlib
import tarfile
from pathlib import Path

from tagrel.core.config import ProductConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol, Style
from tagrel.pipeline.errors import PackagingFailed
from tagrel.pipeline.model import BuildOutput, PackagedArchive

_CHUNK_SIZE = 1024 * 1024


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def _normalized(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # Strip host-specific metadata so the archive only depends on content.
    info.mtime = 0
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    info.mode = 0o755
    return info


def _write_tar_gz(archive_path: Path, *, files: list[tuple[Path, str]]) -> None:
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    # Never leave a truncated archive under the release name.
    partial = archive_path.with_name(archive_path.name + ".partial")
    try:
        with partial.open("wb") as raw:
            # filename="" and mtime=0 keep the gzip header stable.
            with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                with tarfile.open(fileobj=gz, mode="w", format=tarfile.GNU_FORMAT) as tar:
                    for src, arcname in files:
                        tar.add(src, arcname=arcname, recursive=False, filter=_normalized)
        partial.replace(archive_path)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise


def package_archive(
    build: BuildOutput,
    *,
    product: ProductConfig,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[PackagedArchive, PackagingFailed]:
    """Bundle the built binary into the release archive and checksum it."""
    name = product.resolved_archive_name
    archive_path = build.source_root / product.dist_dir / name

    console.print(f"package {build.binary} -> {archive_path}", Style.DIM)
    if dry_run:
        return Ok(PackagedArchive(path=archive_path, name=name, sha256="0" * 64, size=0))

    if not build.binary.is_file():
        return Err(
            PackagingFailed(
                message=f"build output missing: {build.binary}",
                hint="Check product.binary in release.toml matches the compile output.",
            )
        )

    try:
        _write_tar_gz(archive_path, files=[(build.binary, build.binary.name)])
    except (OSError, tarfile.TarError) as e:
        return Err(PackagingFailed(message=f"failed to write archive {archive_path}: {e}"))

    try:
        digest = sha256_file(archive_path)
        size = archive_path.stat().st_size
    except OSError as e:
        return Err(PackagingFailed(message=f"failed to read archive {archive_path}: {e}"))

    return Ok(PackagedArchive(path=archive_path, name=name, sha256=digest, size=size))

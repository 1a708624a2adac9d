from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    """Version identifier taken verbatim from refs/tags/<value>."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class BuildOutput:
    source_root: Path
    binary: Path


@dataclass(frozen=True, slots=True)
class PackagedArchive:
    path: Path
    name: str
    sha256: str
    size: int


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    name: str
    download_url: str | None
    # "sha256:<hex>" when the hosting service reports it
    digest: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    id: int
    tag: str
    html_url: str
    upload_url: str
    assets: tuple[ReleaseAsset, ...] = ()

    def asset(self, name: str) -> ReleaseAsset | None:
        for a in self.assets:
            if a.name == name:
                return a
        return None


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    record: ReleaseRecord
    asset: ReleaseAsset
    reused_release: bool
    uploaded: bool


@dataclass(frozen=True, slots=True)
class FormulaUpdateRequest:
    version: str
    sha256: str
    url: str
    formula: str
    tap: str | None

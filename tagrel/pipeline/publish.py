"""Release publication: create (or reuse) the release, then attach the archive.

The two API calls are not atomic. A failed upload leaves a release without
its asset; nothing is rolled back. Re-running the pipeline for the same tag
picks the existing release up again and only retries the upload.
"""

from __future__ import annotations

from tagrel.core.config import ReleaseConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol, Style
from tagrel.pipeline.errors import AssetUploadFailed, PublishError, ReleaseCreateFailed
from tagrel.pipeline.github import ReleaseApi
from tagrel.pipeline.model import (
    PackagedArchive,
    PublishedRelease,
    ReleaseAsset,
    ReleaseRecord,
    ReleaseTag,
)


def publish_release(
    *,
    api: ReleaseApi,
    tag: ReleaseTag,
    archive: PackagedArchive,
    settings: ReleaseConfig,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[PublishedRelease, PublishError]:
    name = tag.value
    console.print(
        f"release {name} (draft={settings.draft}, prerelease={settings.prerelease})", Style.DIM
    )
    console.print(f"asset {archive.name} ({settings.content_type})", Style.DIM)
    if dry_run:
        record = ReleaseRecord(id=0, tag=name, html_url="(dry-run)", upload_url="(dry-run)")
        return Ok(
            PublishedRelease(
                record=record,
                asset=ReleaseAsset(name=archive.name, download_url=None),
                reused_release=False,
                uploaded=False,
            )
        )

    if settings.repo is None:
        return Err(
            ReleaseCreateFailed(
                tag=name,
                message="no release repository configured",
                hint="Set release.repo in release.toml or GITHUB_REPOSITORY.",
            )
        )

    existing = api.find_release(name)
    if isinstance(existing, Err):
        e = existing.error
        return Err(ReleaseCreateFailed(tag=name, message=e.message, hint=e.hint))

    reused = existing.value is not None
    if existing.value is not None:
        record = existing.value
        console.warning(f"release {name} already exists, reusing it: {record.html_url}")
    else:
        created = api.create_release(
            tag=name,
            name=name,
            draft=settings.draft,
            prerelease=settings.prerelease,
        )
        if isinstance(created, Err):
            e = created.error
            return Err(ReleaseCreateFailed(tag=name, message=e.message, hint=e.hint))
        record = created.value

    attached = record.asset(archive.name)
    if attached is not None:
        if attached.digest == f"sha256:{archive.sha256}":
            console.print(f"asset {archive.name} already attached with same checksum", Style.DIM)
            return Ok(
                PublishedRelease(
                    record=record, asset=attached, reused_release=reused, uploaded=False
                )
            )
        return Err(
            AssetUploadFailed(
                tag=name,
                asset=archive.name,
                message=f"release {name} already has an asset named {archive.name}",
                hint=(
                    "Its checksum differs from this build or is unknown. "
                    f"Delete the asset from {record.html_url} and re-run."
                ),
            )
        )

    uploaded = api.upload_asset(
        upload_url=record.upload_url,
        path=archive.path,
        name=archive.name,
        content_type=settings.content_type,
    )
    if isinstance(uploaded, Err):
        e = uploaded.error
        return Err(
            AssetUploadFailed(
                tag=name,
                asset=archive.name,
                message=f"{e.message} (release {name} is published without its asset)",
                hint=e.hint,
            )
        )

    return Ok(
        PublishedRelease(record=record, asset=uploaded.value, reused_release=reused, uploaded=True)
    )

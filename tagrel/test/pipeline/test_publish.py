from __future__ import annotations

from pathlib import Path

import pytest

from tagrel.core.config import ReleaseConfig
from tagrel.core.result import Err, Ok
from tagrel.output.console import MockConsole
from tagrel.pipeline.errors import AssetUploadFailed, ReleaseCreateFailed
from tagrel.pipeline.github import ApiError
from tagrel.pipeline.model import PackagedArchive, ReleaseAsset, ReleaseTag
from tagrel.pipeline.publish import publish_release
from tagrel.test.pipeline._fakes import UPLOAD_URL, FakeReleaseApi, release_record

SETTINGS = ReleaseConfig(repo="acme/product")
TAG = ReleaseTag("v1.2.3")


@pytest.fixture
def archive(tmp_path: Path) -> PackagedArchive:
    path = tmp_path / "product-mac.tar.gz"
    path.write_bytes(b"archive-bytes")
    return PackagedArchive(path=path, name=path.name, sha256="ab" * 32, size=13)


def _publish(api: FakeReleaseApi, archive: PackagedArchive, **kwargs: object):
    return publish_release(
        api=api,
        tag=TAG,
        archive=archive,
        settings=SETTINGS,
        console=MockConsole(),
        **kwargs,  # type: ignore[arg-type]
    )


def test_creates_prerelease_then_uploads(archive: PackagedArchive) -> None:
    api = FakeReleaseApi()

    result = _publish(api, archive)

    assert isinstance(result, Ok)
    assert api.calls == [
        ("find", "v1.2.3"),
        ("create", ("v1.2.3", "v1.2.3", False, True)),
        ("upload", (UPLOAD_URL, "product-mac.tar.gz", "application/gzip")),
    ]
    assert api.uploaded_bytes == b"archive-bytes"
    assert result.value.uploaded
    assert not result.value.reused_release


def test_create_failure_attempts_no_upload(archive: PackagedArchive) -> None:
    api = FakeReleaseApi(create_error=ApiError("failed to create release v1.2.3", hint="HTTP 403"))

    result = _publish(api, archive)

    assert isinstance(result, Err)
    assert isinstance(result.error, ReleaseCreateFailed)
    assert result.error.hint == "HTTP 403"
    assert api.count("upload") == 0


def test_lookup_failure_is_create_failure(archive: PackagedArchive) -> None:
    api = FakeReleaseApi(find_error=ApiError("failed to look up release v1.2.3"))

    result = _publish(api, archive)

    assert isinstance(result, Err)
    assert isinstance(result.error, ReleaseCreateFailed)
    assert api.count("create") == 0
    assert api.count("upload") == 0


def test_upload_failure_leaves_release_in_place(archive: PackagedArchive) -> None:
    api = FakeReleaseApi(upload_error=ApiError("failed to upload product-mac.tar.gz"))

    result = _publish(api, archive)

    assert isinstance(result, Err)
    assert isinstance(result.error, AssetUploadFailed)
    assert result.error.asset == "product-mac.tar.gz"
    assert "without its asset" in result.error.message
    assert api.count("create") == 1


def test_rerun_reuses_existing_release(archive: PackagedArchive) -> None:
    api = FakeReleaseApi(existing=release_record("v1.2.3"))
    console = MockConsole()

    result = publish_release(
        api=api, tag=TAG, archive=archive, settings=SETTINGS, console=console
    )

    assert isinstance(result, Ok)
    assert result.value.reused_release
    assert api.count("create") == 0
    assert api.count("upload") == 1
    assert console.find("already exists")


def test_same_asset_already_attached_is_skipped(archive: PackagedArchive) -> None:
    attached = ReleaseAsset(
        name="product-mac.tar.gz", download_url="https://x", digest=f"sha256:{archive.sha256}"
    )
    api = FakeReleaseApi(existing=release_record("v1.2.3", assets=(attached,)))

    result = _publish(api, archive)

    assert isinstance(result, Ok)
    assert not result.value.uploaded
    assert result.value.asset == attached
    assert api.count("upload") == 0


def test_different_asset_with_same_name_fails(archive: PackagedArchive) -> None:
    attached = ReleaseAsset(name="product-mac.tar.gz", download_url="https://x", digest=None)
    api = FakeReleaseApi(existing=release_record("v1.2.3", assets=(attached,)))

    result = _publish(api, archive)

    assert isinstance(result, Err)
    assert isinstance(result.error, AssetUploadFailed)
    assert api.count("upload") == 0


def test_missing_repo_fails_before_any_call(archive: PackagedArchive) -> None:
    api = FakeReleaseApi()

    result = publish_release(
        api=api, tag=TAG, archive=archive, settings=ReleaseConfig(), console=MockConsole()
    )

    assert isinstance(result, Err)
    assert isinstance(result.error, ReleaseCreateFailed)
    assert api.calls == []


def test_dry_run_makes_no_calls(archive: PackagedArchive) -> None:
    api = FakeReleaseApi()

    result = _publish(api, archive, dry_run=True)

    assert isinstance(result, Ok)
    assert api.calls == []

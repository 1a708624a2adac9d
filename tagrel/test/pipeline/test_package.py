from __future__ import annotations

import hashlib
import tarfile
from pathlib import Path

import pytest

from tagrel.core.config import ProductConfig
from tagrel.core.result import Err, Ok
from tagrel.output.console import MockConsole
from tagrel.pipeline.model import BuildOutput
from tagrel.pipeline.package import package_archive, sha256_file

PRODUCT = ProductConfig(name="product", platform="mac", binary="target/release/product")


def _build(root: Path, content: bytes = b"binary-v1") -> BuildOutput:
    binary = root / "target" / "release" / "product"
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(content)
    return BuildOutput(source_root=root, binary=binary)


def test_archive_has_fixed_name_and_contains_binary(tmp_path: Path) -> None:
    result = package_archive(_build(tmp_path), product=PRODUCT, console=MockConsole())

    assert isinstance(result, Ok)
    archive = result.value
    assert archive.name == "product-mac.tar.gz"
    assert archive.path == tmp_path / "dist" / "product-mac.tar.gz"
    with tarfile.open(archive.path, "r:gz") as tar:
        assert tar.getnames() == ["product"]
        member = tar.getmember("product")
        assert member.mode == 0o755
        extracted = tar.extractfile(member)
        assert extracted is not None
        assert extracted.read() == b"binary-v1"


def test_checksum_is_over_final_archive_bytes(tmp_path: Path) -> None:
    result = package_archive(_build(tmp_path), product=PRODUCT, console=MockConsole())

    assert isinstance(result, Ok)
    data = result.value.path.read_bytes()
    assert result.value.sha256 == hashlib.sha256(data).hexdigest()
    assert result.value.size == len(data)


def test_identical_input_gives_identical_checksum(tmp_path: Path) -> None:
    first = package_archive(_build(tmp_path / "a"), product=PRODUCT, console=MockConsole())
    second = package_archive(_build(tmp_path / "b"), product=PRODUCT, console=MockConsole())

    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert first.value.sha256 == second.value.sha256
    assert first.value.path.read_bytes() == second.value.path.read_bytes()


def test_one_changed_byte_changes_checksum(tmp_path: Path) -> None:
    first = package_archive(
        _build(tmp_path / "a", b"binary-v1"), product=PRODUCT, console=MockConsole()
    )
    second = package_archive(
        _build(tmp_path / "b", b"binary-v2"), product=PRODUCT, console=MockConsole()
    )

    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert first.value.sha256 != second.value.sha256


def test_custom_archive_name(tmp_path: Path) -> None:
    product = ProductConfig(
        name="product", binary="target/release/product", archive_name="product.tgz"
    )
    result = package_archive(_build(tmp_path), product=product, console=MockConsole())

    assert isinstance(result, Ok)
    assert result.value.path.name == "product.tgz"


def test_missing_build_output_fails(tmp_path: Path) -> None:
    build = BuildOutput(source_root=tmp_path, binary=tmp_path / "target/release/product")

    result = package_archive(build, product=PRODUCT, console=MockConsole())

    assert isinstance(result, Err)
    assert "missing" in result.error.message
    assert not (tmp_path / "dist").exists()


def test_sha256_file_streams(tmp_path: Path) -> None:
    path = tmp_path / "big.bin"
    data = b"x" * (3 * 1024 * 1024 + 17)
    path.write_bytes(data)

    assert sha256_file(path) == hashlib.sha256(data).hexdigest()


def test_successful_run_leaves_only_the_archive(tmp_path: Path) -> None:
    result = package_archive(_build(tmp_path), product=PRODUCT, console=MockConsole())

    assert isinstance(result, Ok)
    assert [p.name for p in (tmp_path / "dist").iterdir()] == ["product-mac.tar.gz"]


def test_write_failure_leaves_no_archive(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _disk_full(self: tarfile.TarFile, *args: object, **kwargs: object) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(tarfile.TarFile, "add", _disk_full)

    result = package_archive(_build(tmp_path), product=PRODUCT, console=MockConsole())

    assert isinstance(result, Err)
    assert "No space left" in result.error.message
    assert list((tmp_path / "dist").iterdir()) == []

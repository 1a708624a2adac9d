"""Tests for tagrel.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from tagrel.core.result import Err, Ok
from tagrel.platform.process import ProcessError, run, run_live


class TestProcessError:
    def test_str_truncates_long_commands(self) -> None:
        error = ProcessError(
            command=("gh", "api", "--method", "POST", "repos/o/r/releases"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "gh api --method ... failed (exit 1)"

    def test_timed_out(self) -> None:
        error = ProcessError(("brew",), -1, "", "Command timed out after 1.0s")
        assert error.timed_out
        assert not ProcessError(("brew",), 1, "", "timed out").timed_out

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_env_overrides_reach_child(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['TAGREL_TEST_TOKEN'])"],
            cwd=tmp_path,
            env_overrides={"TAGREL_TEST_TOKEN": "s3cret"},
        )

        assert isinstance(result, Ok)
        assert result.value.strip() == "s3cret"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2
        )

        assert isinstance(result, Err)
        assert result.error.timed_out


class TestRunLive:
    def test_success(self, tmp_path: Path) -> None:
        assert run_live([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure_keeps_returncode(self, tmp_path: Path) -> None:
        result = run_live([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3

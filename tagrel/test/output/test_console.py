"""Tests for tagrel.output.console module."""

from __future__ import annotations

import pytest

from tagrel.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("broken")
        console.header("Build")

        assert console.messages == ["OK done", "error: broken", "Build"]
        assert [o.style for o in console.outputs] == [Style.SUCCESS, Style.ERROR, Style.HEADER]

    def test_command_is_dimmed(self) -> None:
        console = MockConsole()
        console.command(["cargo", "build", "--release"])

        assert console.outputs[0].message == "$ cargo build --release"
        assert console.outputs[0].style == Style.DIM

    def test_find(self) -> None:
        console = MockConsole()
        console.warning("release v1.2.3 already exists")
        console.print("[compile]", Style.INFO)

        assert len(console.find("v1.2.3")) == 1
        assert console.find("[compile]")[0].style == Style.INFO


class TestRichConsole:
    def test_markup_in_messages_is_not_interpreted(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.error("phase [test] failed")
        console.command(["make", "[lint]"])

        out = capsys.readouterr().out
        assert "phase [test] failed" in out
        assert "$ make [lint]" in out

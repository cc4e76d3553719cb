"""Tests for hcs.output.console."""

from __future__ import annotations

import pytest

from hcs.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    def test_print_captures_message_and_style(self) -> None:
        console = MockConsole()
        console.print("packing", Style.DIM)
        assert console.outputs[0].message == "packing"
        assert console.outputs[0].style == Style.DIM

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("broken")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: broken", "warning: careful", "info: fyi"]

    def test_flags_and_find(self) -> None:
        console = MockConsole()
        console.print("Uploaded a.png")
        console.warning("slow")
        assert console.has_warning()
        assert not console.has_error()
        assert len(console.find("a.png")) == 1
        assert "slow" in console.text


class TestRichConsole:
    def test_markup_in_messages_is_not_interpreted(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.error("bad value [red]x[/red]")
        console.print("[bold]raw[/bold]", Style.DIM)
        out = capsys.readouterr().out
        assert "[red]x[/red]" in out
        assert "[bold]raw[/bold]" in out

"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- Markup stripping in no-colour mode
- Global instance management
- Convenience functions
"""

from __future__ import annotations

import pytest

from feedauth import output as output_module
from feedauth.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


# ------------------------------------------------------------------ #
# Colour control
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_color_enabled_by_default(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Stream discipline
# ------------------------------------------------------------------ #


class TestStreams:
    def test_print_data_goes_to_stdout(self, capsys):
        OutputManager(no_color=True).print_data("https://feed/")
        captured = capsys.readouterr()
        assert captured.out == "https://feed/\n"
        assert captured.err == ""

    def test_print_data_is_literal(self, capsys):
        long_url = "https://pkgs.dev.azure.com/contoso/_packaging/" + "x" * 200 + "/npm/registry/"
        mgr = OutputManager()
        mgr.print_data("[bold]feed[/bold] :smile:")
        mgr.print_data(long_url)
        assert capsys.readouterr().out == f"[bold]feed[/bold] :smile:\n{long_url}\n"

    @pytest.mark.parametrize("method", ["info", "notice", "success", "warning", "error", "progress"])
    def test_diagnostics_go_to_stderr(self, capsys, method):
        getattr(OutputManager(no_color=True), method)("hello")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello" in captured.err

    def test_prefixes_in_no_color_mode(self, capsys):
        mgr = OutputManager(no_color=True, verbose=True)
        mgr.warning("careful")
        mgr.error("broken")
        mgr.debug("detail")
        err = capsys.readouterr().err.splitlines()
        assert err == ["Warning: careful", "Error: broken", "[debug] detail"]

    def test_markup_stripped_in_no_color_mode(self, capsys):
        OutputManager(no_color=True).info("Found registry [cyan]https://feed/[/cyan]")
        assert capsys.readouterr().err == "Found registry https://feed/\n"

    def test_rich_mode_escapes_messages(self, capsys, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        OutputManager().error("value [not-markup]")
        assert "[not-markup]" in capsys.readouterr().err


# ------------------------------------------------------------------ #
# Quiet / verbose
# ------------------------------------------------------------------ #


class TestQuietMode:
    @pytest.mark.parametrize("method", ["info", "success", "progress"])
    def test_suppressed(self, capsys, method):
        getattr(OutputManager(no_color=True, quiet=True), method)("hidden")
        assert capsys.readouterr().err == ""

    @pytest.mark.parametrize("method", ["notice", "warning", "error"])
    def test_not_suppressed(self, capsys, method):
        getattr(OutputManager(no_color=True, quiet=True), method)("shown")
        assert "shown" in capsys.readouterr().err

    def test_data_not_suppressed(self, capsys):
        OutputManager(no_color=True, quiet=True).print_data("https://feed/")
        assert capsys.readouterr().out == "https://feed/\n"

    def test_is_quiet(self):
        assert OutputManager(quiet=True).is_quiet is True
        assert OutputManager().is_quiet is False


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capsys):
        OutputManager(no_color=True).debug("detail")
        assert capsys.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capsys):
        mgr = OutputManager(no_color=True, verbose=True)
        assert mgr.is_verbose is True
        mgr.debug("detail")
        assert "detail" in capsys.readouterr().err


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazily_created(self):
        mgr = get_output()
        assert isinstance(mgr, OutputManager)
        assert get_output() is mgr

    def test_set_and_reset(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_convenience_functions_delegate(self, capsys):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.print_data("data")
        output_module.info("info")
        output_module.notice("notice")
        output_module.success("success")
        output_module.warning("warning")
        output_module.error("error")
        output_module.debug("debug")
        output_module.progress("progress")

        captured = capsys.readouterr()
        assert captured.out == "data\n"
        assert captured.err.splitlines() == [
            "info",
            "notice",
            "success",
            "Warning: warning",
            "Error: error",
            "[debug] debug",
            "progress",
        ]

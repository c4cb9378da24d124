"""Tests for the clipboard, browser, and Enter-key helpers."""

from __future__ import annotations

import io
import subprocess
import webbrowser
from unittest.mock import MagicMock, patch

import pytest

from feedauth import desktop
from feedauth.desktop import DesktopActions, copy_to_clipboard, open_browser, wait_for_enter


class TestClipboardCommands:
    def test_windows(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "win32")
        assert desktop._clipboard_commands() == [["clip"]]

    def test_macos(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "darwin")
        assert desktop._clipboard_commands() == [["pbcopy"]]

    def test_linux_prefers_wayland(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "linux")
        assert [c[0] for c in desktop._clipboard_commands()] == ["wl-copy", "xclip", "xsel"]


class TestCopyToClipboard:
    def test_first_available_command_wins(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "linux")
        available = {"xclip": "/usr/bin/xclip", "xsel": "/usr/bin/xsel"}
        with patch("feedauth.desktop.shutil.which", side_effect=available.get):
            with patch("feedauth.desktop.subprocess.run") as mock_run:
                assert copy_to_clipboard("ABCD1234") is True

        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["xclip", "-selection", "clipboard"]
        assert mock_run.call_args.kwargs["input"] == "ABCD1234"

    def test_falls_through_failing_command(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "linux")
        failure = subprocess.CalledProcessError(1, ["wl-copy"])
        with patch("feedauth.desktop.shutil.which", return_value="/usr/bin/tool"):
            with patch("feedauth.desktop.subprocess.run", side_effect=[failure, MagicMock()]) as mock_run:
                assert copy_to_clipboard("code") is True
        assert mock_run.call_count == 2

    def test_no_command_available(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "linux")
        with patch("feedauth.desktop.shutil.which", return_value=None):
            with patch("feedauth.desktop.subprocess.run") as mock_run:
                assert copy_to_clipboard("code") is False
        mock_run.assert_not_called()

    def test_all_commands_fail(self, monkeypatch):
        monkeypatch.setattr(desktop.sys, "platform", "darwin")
        with patch("feedauth.desktop.shutil.which", return_value="/usr/bin/pbcopy"):
            with patch(
                "feedauth.desktop.subprocess.run",
                side_effect=subprocess.TimeoutExpired(["pbcopy"], 5),
            ):
                assert copy_to_clipboard("code") is False


class TestOpenBrowser:
    def test_success(self):
        with patch("feedauth.desktop.webbrowser.open", return_value=True) as mock_open:
            assert open_browser("https://microsoft.com/devicelogin") is True
        mock_open.assert_called_once_with("https://microsoft.com/devicelogin")

    def test_no_browser(self):
        with patch("feedauth.desktop.webbrowser.open", return_value=False):
            assert open_browser("https://x") is False

    def test_browser_error(self):
        with patch("feedauth.desktop.webbrowser.open", side_effect=webbrowser.Error("none")):
            assert open_browser("https://x") is False


def test_wait_for_enter_reads_one_line(monkeypatch):
    stdin = io.StringIO("\nleftover\n")
    monkeypatch.setattr(desktop.sys, "stdin", stdin)
    wait_for_enter()
    assert stdin.read() == "leftover\n"


def test_wait_for_enter_at_eof(monkeypatch):
    monkeypatch.setattr(desktop.sys, "stdin", io.StringIO(""))
    wait_for_enter()


@pytest.mark.parametrize(
    ("method", "target", "args"),
    [
        ("copy_to_clipboard", "feedauth.desktop.copy_to_clipboard", ("code",)),
        ("open_browser", "feedauth.desktop.open_browser", ("https://x",)),
        ("wait_for_enter", "feedauth.desktop.wait_for_enter", ()),
    ],
)
def test_desktop_actions_delegate(method, target, args):
    with patch(target) as mock_fn:
        getattr(DesktopActions(), method)(*args)
    mock_fn.assert_called_once_with(*args)

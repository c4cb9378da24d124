"""Shared test fixtures for feedauth.

Provides isolated home and project directories, a discovered issuer, fake
desktop side actions, and output-state management. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from feedauth.models import Issuer
from feedauth.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``Path.home()`` at a temporary directory.

    Also clears npm's user-config override and redirects the XDG data
    directory so that tests never touch the real ``~/.npmrc``.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("NPM_CONFIG_USERCONFIG", raising=False)
    monkeypatch.delenv("npm_config_userconfig", raising=False)
    monkeypatch.delenv("FEEDAUTH_CLIENT_ID", raising=False)
    monkeypatch.delenv("FEEDAUTH_TENANT_ID", raising=False)
    monkeypatch.delenv("TF_BUILD", raising=False)
    return home


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Identity provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def issuer() -> Issuer:
    """Endpoints as published for the ``common`` tenant."""
    return Issuer(
        issuer="https://login.microsoftonline.com/{tenantid}/v2.0",
        token_endpoint="https://login.microsoftonline.com/common/oauth2/v2.0/token",
        device_authorization_endpoint="https://login.microsoftonline.com/common/oauth2/v2.0/devicecode",
        authorization_endpoint="https://login.microsoftonline.com/common/oauth2/v2.0/authorize",
    )


class FakeActions:
    """Records desktop side actions instead of performing them."""

    def __init__(
        self,
        clipboard: bool = True,
        browser: bool = True,
        clipboard_error: Exception | None = None,
        browser_error: Exception | None = None,
    ) -> None:
        self._clipboard = clipboard
        self._browser = browser
        self._clipboard_error = clipboard_error
        self._browser_error = browser_error
        self.copied: list[str] = []
        self.opened: list[str] = []
        self.enter_presses = 0

    def copy_to_clipboard(self, text: str) -> bool:
        self.copied.append(text)
        if self._clipboard_error is not None:
            raise self._clipboard_error
        return self._clipboard

    def open_browser(self, url: str) -> bool:
        self.opened.append(url)
        if self._browser_error is not None:
            raise self._browser_error
        return self._browser

    def wait_for_enter(self) -> None:
        self.enter_presses += 1


@pytest.fixture
def fake_actions() -> FakeActions:
    return FakeActions()


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for tests that don't care about output."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_actions() -> type[FakeActions]:
    """Factory for :class:`FakeActions` with custom outcomes."""
    return FakeActions

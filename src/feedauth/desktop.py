"""Best-effort desktop helpers used during the device code flow.

Copying the user code to the clipboard and opening the verification page in
a browser only save the operator some typing. Both report success as a
boolean and log failures instead of raising. :func:`wait_for_enter` blocks on
a line of input with no timeout.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import webbrowser

logger = logging.getLogger(__name__)

_CLIPBOARD_TIMEOUT = 5


def _clipboard_commands() -> list[list[str]]:
    """Candidate clipboard commands for the current platform, in preference order."""
    if sys.platform == "win32":
        return [["clip"]]
    if sys.platform == "darwin":
        return [["pbcopy"]]
    return [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


def copy_to_clipboard(text: str) -> bool:
    """Copy *text* to the system clipboard.

    Tries each platform clipboard command that is installed until one
    succeeds.

    Returns:
        ``True`` if a command accepted the text, ``False`` otherwise.
    """
    for command in _clipboard_commands():
        if shutil.which(command[0]) is None:
            continue
        try:
            subprocess.run(
                command,
                input=text,
                text=True,
                check=True,
                capture_output=True,
                timeout=_CLIPBOARD_TIMEOUT,
            )
            return True
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Clipboard command %s failed: %s", command[0], exc)
    logger.debug("No working clipboard command found")
    return False


def open_browser(url: str) -> bool:
    """Open *url* in the default browser.

    Returns:
        ``True`` if a browser was launched, ``False`` otherwise.
    """
    try:
        return webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.debug("Could not open browser for %s: %s", url, exc)
        return False


def wait_for_enter() -> None:
    """Block until the operator presses Enter (or stdin reaches end of file)."""
    sys.stdin.readline()


class DesktopActions:
    """The side actions of the device code flow, grouped for injection.

    :class:`~feedauth.lifecycle.TokenLifecycleManager` calls these methods;
    tests substitute an object with the same three methods.
    """

    def copy_to_clipboard(self, text: str) -> bool:
        return copy_to_clipboard(text)

    def open_browser(self, url: str) -> bool:
        return open_browser(url)

    def wait_for_enter(self) -> None:
        wait_for_enter()

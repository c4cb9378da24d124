"""Typer application and CLI entry point for feedauth.

The application has a single command, :func:`authenticate`, so ``feedauth``
runs it directly. Options are read with the usual precedence: command-line
flag, then ``FEEDAUTH_*`` environment variable, then built-in default.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and writes a crash log under
the data directory for unexpected exceptions.

See Also:
    :mod:`feedauth.runner`: The orchestration invoked by the command.
    :mod:`feedauth.output`: Output formatting initialised by the command.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from feedauth import __version__
from feedauth.config import (
    CI_DEFAULT_ENV_VARIABLE,
    DEFAULT_CLIENT_ID,
    DEFAULT_TENANT_ID,
    ENV_CLIENT_ID,
    ENV_TENANT_ID,
)
from feedauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="feedauth",
    help="Authenticate npm and Yarn against Azure DevOps package feeds.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"feedauth {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def authenticate(
    client_id: str = typer.Option(
        DEFAULT_CLIENT_ID,
        "--client-id",
        "--cid",
        envvar=ENV_CLIENT_ID,
        help="Application (client) id used to sign in.",
    ),
    tenant_id: str = typer.Option(
        DEFAULT_TENANT_ID,
        "--tenant-id",
        "--tid",
        envvar=ENV_TENANT_ID,
        help="Tenant id or domain used for OpenID discovery.",
    ),
    ci: bool = typer.Option(
        False,
        "--ci",
        help=f"Skip authentication when the {CI_DEFAULT_ENV_VARIABLE} variable is set.",
    ),
    ci_variable: Optional[str] = typer.Option(
        None,
        "--ci-variable",
        metavar="NAME",
        help="Skip authentication when the NAME variable is set.",
    ),
    project_base_path: Optional[Path] = typer.Option(
        None,
        "--project-base-path",
        "--pbp",
        help="Project directory (default: current directory).",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Sign in and store registry tokens in [bold].npmrc[/bold] or [bold].yarnrc.yml[/bold].

    Registries declared by the project take precedence over user-level
    ones. A stored refresh token is tried first; otherwise the device code
    flow asks you to sign in from a browser.
    """
    from feedauth.exceptions import FeedauthError
    from feedauth.models import RunOptions
    from feedauth.output import OutputManager, error, print_data, set_output
    from feedauth.runner import run

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    options = RunOptions(
        client_id=client_id,
        tenant_id=tenant_id,
        ci=ci_variable or ci,
        project_base_path=project_base_path,
    )

    try:
        registries = run(options)
    except FeedauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for registry in registries:
        print_data(registry)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from feedauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``feedauth`` console script.

    :class:`~feedauth.exceptions.FeedauthError` instances are reported by
    the command itself and exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from feedauth.output import error

        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

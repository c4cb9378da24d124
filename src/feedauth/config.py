"""Configuration constants, file locations, CI detection, and atomic writes.

This module holds everything feedauth knows about its environment:

* **Identity constants** -- the default application id, tenant, the Azure
  DevOps resource id used to build the device code scope, and the fixed
  per-request timeout for every call to the identity provider.
* **Registry file locations** -- where the user-level and project-level
  ``.npmrc`` / ``.yarnrc.yml`` files live. See :func:`user_config_path` and
  :func:`project_config_path`.
* **Directory layout** -- XDG Base Directory compliant data directory for
  crash logs (:func:`get_data_dir`).
* **CI detection** -- :func:`in_ci` decides whether a run should be skipped,
  reading from an explicitly passed environment mapping.

All registry file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so that a crash never leaves a half-written ``.npmrc``.
"""

from __future__ import annotations

import os
import platform
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Optional, Union

_APP_NAME = "feedauth"

DEFAULT_CLIENT_ID = "f9d5fef7-a410-4582-bb27-68a319b1e5a1"
"""Application id of the Azure DevOps npm authentication client."""

DEFAULT_TENANT_ID = "common"

AZURE_DEVOPS_RESOURCE_ID = "499b84ac-1321-427f-aa17-267ca6975798"

DEVICE_CODE_SCOPE = f"{AZURE_DEVOPS_RESOURCE_ID}/.default offline_access"
"""``offline_access`` is required for the provider to issue a refresh token."""

DISCOVERY_URL_TEMPLATE = (
    "https://login.microsoftonline.com/{tenant}/v2.0/.well-known/openid-configuration"
)

REQUEST_TIMEOUT = 5.0
"""Seconds allowed for each identity provider request. Not configurable."""

CI_DEFAULT_ENV_VARIABLE = "TF_BUILD"
"""Set by Azure Pipelines on every build agent."""

ENV_CLIENT_ID = "FEEDAUTH_CLIENT_ID"
ENV_TENANT_ID = "FEEDAUTH_TENANT_ID"

NPMRC_FILENAME = ".npmrc"
YARNRC_FILENAME = ".yarnrc.yml"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/feedauth/`` (default ``~/.local/share/feedauth/``).
    On macOS/Windows: ``~/.feedauth/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Registry configuration files ---


def user_config_path(filename: str, environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the user-level configuration file for *filename*.

    ``.npmrc`` honours ``NPM_CONFIG_USERCONFIG`` the same way npm does;
    everything else lives in the home directory.

    Args:
        filename: :data:`NPMRC_FILENAME` or :data:`YARNRC_FILENAME`.
        environ: Environment to consult. Defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    if filename == NPMRC_FILENAME:
        override = env.get("NPM_CONFIG_USERCONFIG") or env.get("npm_config_userconfig")
        if override:
            return Path(override).expanduser()
    return Path.home() / filename


def project_config_path(filename: str, project_base_path: Path) -> Path:
    """Return the project-level configuration file for *filename*."""
    return project_base_path / filename


def resolve_project_base_path(project_base_path: Optional[Path] = None) -> Path:
    """Return the absolute project directory, defaulting to the working directory."""
    if project_base_path is None:
        return Path.cwd()
    return Path(project_base_path).expanduser().resolve()


# --- CI detection ---


def in_ci(ci: Union[bool, str, None], environ: Mapping[str, str]) -> bool:
    """Decide whether authentication should be skipped in a CI environment.

    Args:
        ci: ``False``/``None``/``""`` never skips. ``True`` checks
            :data:`CI_DEFAULT_ENV_VARIABLE`. Any other string is the name of
            the variable to check.
        environ: The process environment (passed explicitly so callers and
            tests control it).

    Returns:
        ``True`` when the selected variable is set to a non-empty value.
    """
    if not ci:
        return False
    variable = ci if isinstance(ci, str) else CI_DEFAULT_ENV_VARIABLE
    return bool(environ.get(variable))


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: int = 0o600) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    Permissions are restricted before any content is written because
    registry configuration files hold secrets.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise

"""Registry configuration backends for npm and Yarn.

A backend is a :class:`ConfigBackend` bound to one scope (user or project)
and one file format (``.npmrc`` or ``.yarnrc.yml``). The two axes are
independent, so every combination is built by :func:`open_backend` without
any branching at the call sites.

Typical usage::

    from feedauth.backends import detect_backend_kind, open_backend

    kind = detect_backend_kind(project_dir)
    user = open_backend(ConfigScope.USER, kind, project_dir)
    project = open_backend(ConfigScope.PROJECT, kind, project_dir)
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from feedauth.backends.base import ConfigBackend, RegistryFileFormat, TokenKind
from feedauth.backends.npmrc import NpmrcFormat
from feedauth.backends.yarnrc import YarnrcFormat
from feedauth.config import YARNRC_FILENAME, project_config_path, user_config_path
from feedauth.models import BackendKind, ConfigScope

_FORMATS: dict[BackendKind, type[RegistryFileFormat]] = {
    BackendKind.NPMRC: NpmrcFormat,
    BackendKind.YARNRC: YarnrcFormat,
}


def detect_backend_kind(project_base_path: Path) -> BackendKind:
    """Return ``YARNRC`` when the project has a ``.yarnrc.yml``, else ``NPMRC``."""
    if (project_base_path / YARNRC_FILENAME).exists():
        return BackendKind.YARNRC
    return BackendKind.NPMRC


def open_backend(
    scope: ConfigScope,
    kind: BackendKind,
    project_base_path: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> ConfigBackend:
    """Build the backend for *scope* and *kind*.

    Args:
        scope: User-level or project-level file.
        kind: File format selected for the run.
        project_base_path: Project directory holding the project-level file.
        environ: Environment consulted for user-level overrides such as
            ``NPM_CONFIG_USERCONFIG``. Defaults to ``os.environ``.
    """
    file_format = _FORMATS[kind]()
    if scope is ConfigScope.USER:
        path = user_config_path(file_format.filename, environ)
    else:
        path = project_config_path(file_format.filename, project_base_path)
    return ConfigBackend(scope, path, file_format)


__all__ = [
    "ConfigBackend",
    "NpmrcFormat",
    "RegistryFileFormat",
    "TokenKind",
    "YarnrcFormat",
    "detect_backend_kind",
    "open_backend",
]

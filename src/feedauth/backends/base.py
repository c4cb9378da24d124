"""Registry configuration backend and the file-format strategy it delegates to.

This module defines the two types behind every configuration file feedauth
touches:

- :class:`RegistryFileFormat` -- abstract strategy that knows how one file
  format (``.npmrc`` or ``.yarnrc.yml``) lists registries and stores tokens.
- :class:`ConfigBackend` -- the single capability interface used by the rest
  of the package. It binds a :class:`~feedauth.models.ConfigScope` and a file
  path to a format, so the four scope x format combinations share one
  implementation of reading, upserting, and atomically writing the file.

See Also:
    :func:`feedauth.backends.open_backend` for building a backend.
"""

from __future__ import annotations

import enum
import stat
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

from feedauth.config import atomic_write
from feedauth.exceptions import ConfigurationError
from feedauth.models import ConfigScope


class TokenKind(str, enum.Enum):
    """The two per-registry secrets a backend stores."""

    AUTH = "auth"
    REFRESH = "refresh"


class RegistryFileFormat(ABC):
    """Strategy for one on-disk registry configuration format.

    A format converts between file text and an in-memory *document* (whatever
    representation suits the format) and answers registry and token
    questions against that document. Formats never touch the filesystem.
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Conventional file name, e.g. ``".npmrc"``."""
        ...

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse file text into a document.

        Raises:
            ConfigurationError: If the text is not valid for this format.
        """
        ...

    @abstractmethod
    def render(self, document: Any) -> str:
        """Serialise a document back to file text."""
        ...

    @abstractmethod
    def registries(self, document: Any) -> list[str]:
        """Return every registry URL declared in *document*, in file order."""
        ...

    @abstractmethod
    def get_token(self, document: Any, registry: str, kind: TokenKind) -> Optional[str]:
        """Return the stored token of *kind* for *registry*, or ``None``."""
        ...

    @abstractmethod
    def set_token(self, document: Any, registry: str, kind: TokenKind, token: str) -> None:
        """Insert or replace the token of *kind* for *registry* in place."""
        ...


class ConfigBackend:
    """Read/write access to one registry configuration file.

    Each call re-reads the file, so consecutive writes made by different
    backend instances for the same path never overwrite each other. A file
    that does not exist reads as empty and is created on the first write.

    Args:
        scope: Whether this is the user-level or project-level file.
        path: Location of the file.
        file_format: The format strategy for the file.

    Example::

        backend = ConfigBackend(ConfigScope.USER, Path.home() / ".npmrc", NpmrcFormat())
        for registry in backend.get_registries():
            print(registry, backend.get_registry_refresh_token(registry))
    """

    def __init__(self, scope: ConfigScope, path: Path, file_format: RegistryFileFormat) -> None:
        self._scope = scope
        self._path = path
        self._format = file_format

    @property
    def scope(self) -> ConfigScope:
        return self._scope

    @property
    def path(self) -> Path:
        """The filesystem path this backend reads and writes."""
        return self._path

    @property
    def file_format(self) -> RegistryFileFormat:
        return self._format

    def get_registries(self) -> list[str]:
        """Return all registries configured in this file, in file order."""
        return self._format.registries(self._load())

    def get_registry_refresh_token(self, registry: str) -> Optional[str]:
        """Return the refresh token stored for exactly *registry*, if any."""
        return self._format.get_token(self._load(), registry, TokenKind.REFRESH)

    def set_registry_auth_token(self, registry: str, token: str) -> None:
        """Insert or replace the access token for *registry*."""
        self._update(registry, TokenKind.AUTH, token)

    def set_registry_refresh_token(self, registry: str, token: str) -> None:
        """Insert or replace the refresh token for *registry*."""
        self._update(registry, TokenKind.REFRESH, token)

    def __repr__(self) -> str:
        return f"ConfigBackend(scope={self._scope.value!r}, path={str(self._path)!r})"

    def _load(self) -> Any:
        if not self._path.is_file():
            return self._format.parse("")
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {self._path}: {exc}") from exc
        try:
            return self._format.parse(text)
        except ConfigurationError as exc:
            raise ConfigurationError(f"Invalid {self._format.filename} at {self._path}: {exc}") from exc

    def _update(self, registry: str, kind: TokenKind, token: str) -> None:
        document = self._load()
        self._format.set_token(document, registry, kind, token)
        # Symlinks stay in place; the file they point to is rewritten.
        target = self._path.resolve()
        mode = 0o600
        if target.is_file():
            mode = stat.S_IMODE(target.stat().st_mode)
        atomic_write(target, self._format.render(document), mode=mode)


def nerf_dart(registry: str) -> str:
    """Return npm's credential key prefix for *registry*.

    Mirrors npm's nerf-dart: the scheme, query, and last path segment are
    dropped, so ``https://h/a/npm/registry/`` -> ``//h/a/npm/registry/`` and
    ``https://h/a/npm/registry`` -> ``//h/a/npm/``.
    """
    if "://" not in registry:
        registry = "//" + registry.lstrip("/")
    parts = urlsplit(registry)
    path = parts.path[: parts.path.rfind("/") + 1] or "/"
    return f"//{parts.netloc}{path}"

"""``.npmrc`` format: flat ``key=value`` lines, one credential key per registry.

Registries are the values of the ``registry`` key and of scoped
``@scope:registry`` keys. Tokens are keyed by the scheme-less registry URL::

    @contoso:registry=https://pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/
    //pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/:_authToken=eyJ0...
    //pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/:_refreshToken=0.AX...

The document is the list of raw lines so that comments, blank lines, and
unrelated settings survive a rewrite untouched.
"""

from __future__ import annotations

import re
from typing import Optional

from feedauth.backends.base import RegistryFileFormat, TokenKind, nerf_dart
from feedauth.config import NPMRC_FILENAME

_REGISTRY_KEY = re.compile(r"^(@[^:]+:)?registry$")

_TOKEN_SUFFIX = {
    TokenKind.AUTH: ":_authToken",
    TokenKind.REFRESH: ":_refreshToken",
}


def _split_line(line: str) -> Optional[tuple[str, str]]:
    """Return ``(key, value)`` for a setting line, ``None`` for anything else."""
    stripped = line.strip()
    if not stripped or stripped[0] in ";#[":
        return None
    if "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key.strip(), value


class NpmrcFormat(RegistryFileFormat):
    """Line-preserving reader/writer for ``.npmrc`` files."""

    @property
    def filename(self) -> str:
        return NPMRC_FILENAME

    def parse(self, text: str) -> list[str]:
        return text.splitlines()

    def render(self, document: list[str]) -> str:
        if not document:
            return ""
        return "\n".join(document) + "\n"

    def registries(self, document: list[str]) -> list[str]:
        found: list[str] = []
        for line in document:
            setting = _split_line(line)
            if setting is not None and _REGISTRY_KEY.match(setting[0]) and setting[1]:
                found.append(setting[1])
        return found

    def get_token(self, document: list[str], registry: str, kind: TokenKind) -> Optional[str]:
        key = self.token_key(registry, kind)
        value: Optional[str] = None
        # Later lines override earlier ones, as in npm itself.
        for line in document:
            setting = _split_line(line)
            if setting is not None and setting[0] == key:
                value = setting[1]
        return value or None

    def set_token(self, document: list[str], registry: str, kind: TokenKind, token: str) -> None:
        key = self.token_key(registry, kind)
        new_line = f"{key}={token}"
        matches: list[int] = []
        for index, line in enumerate(document):
            setting = _split_line(line)
            if setting is not None and setting[0] == key:
                matches.append(index)
        if not matches:
            document.append(new_line)
            return
        document[matches[0]] = new_line
        for index in reversed(matches[1:]):
            del document[index]

    @staticmethod
    def token_key(registry: str, kind: TokenKind) -> str:
        """Return the ``.npmrc`` key holding the token of *kind* for *registry*."""
        return nerf_dart(registry) + _TOKEN_SUFFIX[kind]

"""``.yarnrc.yml`` format (Yarn 2+): nested YAML mapping per registry.

Registries come from the top-level ``npmRegistryServer`` and from each
``npmScopes.<scope>.npmRegistryServer``. Tokens live under ``npmRegistries``
keyed by the scheme-less registry URL::

    npmScopes:
      contoso:
        npmRegistryServer: https://pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/
    npmRegistries:
      //pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry:
        npmAlwaysAuth: true
        npmAuthToken: eyJ0...
        npmRefreshToken: 0.AX...

Yarn also accepts the full URL (with scheme, with or without a trailing
slash) as an ``npmRegistries`` key; existing entries in any of those spellings
are found and updated in place.
"""

from __future__ import annotations

from typing import Any, Optional

import yaml

from feedauth.backends.base import RegistryFileFormat, TokenKind
from feedauth.config import YARNRC_FILENAME
from feedauth.exceptions import ConfigurationError

_TOKEN_FIELD = {
    TokenKind.AUTH: "npmAuthToken",
    TokenKind.REFRESH: "npmRefreshToken",
}


def _registry_key(registry: str) -> str:
    """Scheme-less registry URL without a trailing slash: ``//host/path``."""
    without_scheme = registry.split("//", 1)[1] if "//" in registry else registry
    return "//" + without_scheme.strip("/")


def _candidate_keys(registry: str) -> list[str]:
    """All ``npmRegistries`` spellings Yarn would match to *registry*."""
    bare = registry.rstrip("/")
    keys = [_registry_key(registry), _registry_key(registry) + "/", bare, bare + "/"]
    return list(dict.fromkeys(keys))


class YarnrcFormat(RegistryFileFormat):
    """Reader/writer for ``.yarnrc.yml`` files using PyYAML.

    Key order is preserved on rewrite; YAML comments are not.
    """

    @property
    def filename(self) -> str:
        return YARNRC_FILENAME

    def parse(self, text: str) -> dict[str, Any]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"YAML error: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError("top-level value must be a mapping")
        return data

    def render(self, document: dict[str, Any]) -> str:
        if not document:
            return ""
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)

    def registries(self, document: dict[str, Any]) -> list[str]:
        found: list[str] = []
        for key, value in document.items():
            if key == "npmRegistryServer" and isinstance(value, str) and value:
                found.append(value)
            elif key == "npmScopes" and isinstance(value, dict):
                for scope in value.values():
                    if not isinstance(scope, dict):
                        continue
                    server = scope.get("npmRegistryServer")
                    if isinstance(server, str) and server:
                        found.append(server)
        return found

    def get_token(self, document: dict[str, Any], registry: str, kind: TokenKind) -> Optional[str]:
        entry = self._find_entry(document, registry)
        if entry is None:
            return None
        value = entry.get(_TOKEN_FIELD[kind])
        return str(value) if value else None

    def set_token(self, document: dict[str, Any], registry: str, kind: TokenKind, token: str) -> None:
        entry = self._find_entry(document, registry)
        if entry is None:
            registries = document.get("npmRegistries")
            if not isinstance(registries, dict):
                registries = {}
                document["npmRegistries"] = registries
            entry = {}
            registries[_registry_key(registry)] = entry
        if kind is TokenKind.AUTH:
            entry["npmAlwaysAuth"] = True
        entry[_TOKEN_FIELD[kind]] = token

    def _find_entry(self, document: dict[str, Any], registry: str) -> Optional[dict[str, Any]]:
        registries = document.get("npmRegistries")
        if not isinstance(registries, dict):
            return None
        for key in _candidate_keys(registry):
            entry = registries.get(key)
            if isinstance(entry, dict):
                return entry
        return None

"""Tests for AuthPersister."""

from __future__ import annotations

from pathlib import Path

import yaml

from feedauth.backends import ConfigBackend, NpmrcFormat, YarnrcFormat
from feedauth.models import ConfigScope, TokenSet
from feedauth.persister import AuthPersister

FEED = "https://pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/"
FEED_KEY = "//pkgs.dev.azure.com/contoso/_packaging/feed/npm/registry/"


def test_persist_writes_both_tokens(tmp_path: Path) -> None:
    backend = ConfigBackend(ConfigScope.USER, tmp_path / ".npmrc", NpmrcFormat())
    AuthPersister(backend).persist(FEED, TokenSet(access_token="a", refresh_token="r"))

    assert (tmp_path / ".npmrc").read_text() == (
        f"{FEED_KEY}:_authToken=a\n{FEED_KEY}:_refreshToken=r\n"
    )


def test_persist_without_refresh_token_keeps_old_one(tmp_path: Path) -> None:
    path = tmp_path / ".npmrc"
    path.write_text(f"{FEED_KEY}:_refreshToken=old\n")
    backend = ConfigBackend(ConfigScope.USER, path, NpmrcFormat())

    AuthPersister(backend).persist(FEED, TokenSet(access_token="a"))

    assert backend.get_registry_refresh_token(FEED) == "old"
    assert f"{FEED_KEY}:_authToken=a" in path.read_text().splitlines()


def test_persist_overwrites_previous_tokens(tmp_path: Path) -> None:
    backend = ConfigBackend(ConfigScope.USER, tmp_path / ".npmrc", NpmrcFormat())
    persister = AuthPersister(backend)

    persister.persist(FEED, TokenSet(access_token="a1", refresh_token="r1"))
    persister.persist(FEED, TokenSet(access_token="a2", refresh_token="r2"))

    lines = (tmp_path / ".npmrc").read_text().splitlines()
    assert lines == [f"{FEED_KEY}:_authToken=a2", f"{FEED_KEY}:_refreshToken=r2"]


def test_persist_to_yarnrc(tmp_path: Path) -> None:
    path = tmp_path / ".yarnrc.yml"
    path.write_text("nodeLinker: node-modules\n")
    backend = ConfigBackend(ConfigScope.USER, path, YarnrcFormat())

    AuthPersister(backend).persist(FEED, TokenSet(access_token="a", refresh_token="r"))

    data = yaml.safe_load(path.read_text())
    assert data["nodeLinker"] == "node-modules"
    entry = data["npmRegistries"][FEED_KEY.rstrip("/")]
    assert entry["npmAuthToken"] == "a"
    assert entry["npmRefreshToken"] == "r"


def test_backend_property(tmp_path: Path) -> None:
    backend = ConfigBackend(ConfigScope.USER, tmp_path / ".npmrc", NpmrcFormat())
    assert AuthPersister(backend).backend is backend

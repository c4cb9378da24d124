"""Canonical Pydantic models and enums shared across feedauth modules.

**Configuration selection** -- :class:`ConfigScope` and :class:`BackendKind`
are the two orthogonal axes used by :func:`feedauth.backends.open_backend`.

**Identity provider data** -- :class:`Issuer` (the discovered OpenID
configuration), :class:`TokenSet` (the result of any successful grant), and
:class:`RefreshOutcome` (the tagged result of a refresh attempt).

**Orchestration** -- :class:`AuthState` names the states of
:class:`~feedauth.lifecycle.TokenLifecycleManager` and :class:`RunOptions`
carries the already-parsed CLI arguments into :func:`feedauth.runner.run`.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from feedauth.config import DEFAULT_CLIENT_ID, DEFAULT_TENANT_ID
from feedauth.exceptions import RefreshError


# --- Configuration selection ---


class ConfigScope(str, enum.Enum):
    """Which physical configuration file a backend reads and writes."""

    USER = "user"
    PROJECT = "project"


class BackendKind(str, enum.Enum):
    """On-disk configuration format in use for the whole run.

    ``NPMRC`` is the flat ``key=value`` file read by npm and Yarn 1.
    ``YARNRC`` is the nested YAML file read by Yarn 2+ (``.yarnrc.yml``).
    """

    NPMRC = "npmrc"
    YARNRC = "yarnrc"


# --- Identity provider data ---


class Issuer(BaseModel):
    """Endpoints taken from an OpenID configuration document.

    Unknown keys from the discovery document are preserved in
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    issuer: str
    token_endpoint: str
    device_authorization_endpoint: str
    authorization_endpoint: Optional[str] = None


class TokenSet(BaseModel):
    """Tokens returned by a successful refresh or device code grant.

    Only :attr:`access_token` and :attr:`refresh_token` are ever written to
    disk; the remaining fields are informational.
    """

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> TokenSet:
        """Build a token set from a token endpoint JSON response.

        ``expires_in`` (seconds) is converted into an absolute UTC
        :attr:`expires_at`.
        """
        expires_at = None
        expires_in = data.get("expires_in")
        if expires_in is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            token_type=data.get("token_type"),
            scope=data.get("scope"),
        )


class RefreshResult(str, enum.Enum):
    """Tag of a :class:`RefreshOutcome`."""

    SUCCESS = "success"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


class RefreshOutcome(BaseModel):
    """Tagged result of :meth:`feedauth.identity.OidcClient.refresh`.

    Exactly one of :attr:`token_set` (``SUCCESS``) or :attr:`error`
    (``RECOVERABLE`` / ``FATAL``) is set.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: RefreshResult
    token_set: Optional[TokenSet] = None
    error: Optional[RefreshError] = None

    @classmethod
    def success(cls, token_set: TokenSet) -> RefreshOutcome:
        return cls(kind=RefreshResult.SUCCESS, token_set=token_set)

    @classmethod
    def recoverable(cls, error: RefreshError) -> RefreshOutcome:
        return cls(kind=RefreshResult.RECOVERABLE, error=error)

    @classmethod
    def fatal(cls, error: RefreshError) -> RefreshOutcome:
        return cls(kind=RefreshResult.FATAL, error=error)


# --- Orchestration ---


class AuthState(str, enum.Enum):
    """States of the per-registry token lifecycle."""

    START = "start"
    ATTEMPTING_REFRESH = "attempting_refresh"
    DEVICE_FLOW = "device_flow"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class RunOptions(BaseModel):
    """Arguments of one authentication run, as parsed by the CLI.

    Example::

        RunOptions(tenant_id="contoso.onmicrosoft.com", ci="MY_BUILD_FLAG")
    """

    client_id: str = Field(
        default=DEFAULT_CLIENT_ID,
        description="Application (client) id registered with the identity provider",
    )
    tenant_id: str = Field(
        default=DEFAULT_TENANT_ID, description="Tenant used for OpenID discovery"
    )
    ci: Union[bool, str] = Field(
        default=False,
        description="Skip when running in CI: True checks TF_BUILD, a string names the variable",
    )
    project_base_path: Optional[Path] = Field(
        default=None, description="Project directory (defaults to the working directory)"
    )

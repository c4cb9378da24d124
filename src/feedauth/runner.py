"""Orchestration of one authentication run.

:func:`run` ties the pieces together in a single sequential pass:

1. Skip everything when the CI marker variable is set.
2. Pick the configuration format from the project directory and open the
   user and project backends.
3. Resolve the registries (fails before any network call when there are
   none).
4. Discover the issuer, then for each registry in order acquire a token set
   and persist it to the user backend.

Registries are processed one at a time so that only one device code is ever
on screen. A failure for one registry stops the run; registries already
written stay written.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Callable, Optional

from feedauth import output
from feedauth.backends import detect_backend_kind, open_backend
from feedauth.config import in_ci, resolve_project_base_path
from feedauth.desktop import DesktopActions
from feedauth.exceptions import InvalidUsageError
from feedauth.identity import OidcClient, discover
from feedauth.lifecycle import TokenLifecycleManager
from feedauth.models import ConfigScope, Issuer, RunOptions
from feedauth.persister import AuthPersister
from feedauth.resolver import get_registries


def run(
    options: RunOptions,
    environ: Optional[Mapping[str, str]] = None,
    actions: Optional[DesktopActions] = None,
    discover_issuer: Callable[[str], Issuer] = discover,
) -> list[str]:
    """Authenticate every resolved registry and persist the tokens.

    Args:
        options: Parsed command-line options.
        environ: Environment used for CI detection and user file lookup.
            Defaults to ``os.environ``.
        actions: Device code side actions (clipboard, browser, Enter key).
        discover_issuer: OpenID discovery function, replaceable in tests.

    Returns:
        The registries that were authenticated, in order. Empty when the
        run was skipped in CI.

    Raises:
        InvalidUsageError: If the project base path is not a directory.
        NoRegistriesConfiguredError: If no registry is configured.
        DiscoveryError: If the OpenID configuration cannot be fetched.
        RefreshError: If a refresh fails with an unrecognised error.
        DeviceFlowError: If the device code flow fails.
    """
    env = os.environ if environ is None else environ
    if in_ci(options.ci, env):
        output.info("Skipped auth due to running in CI environment")
        return []

    project_base_path = resolve_project_base_path(options.project_base_path)
    if not project_base_path.is_dir():
        raise InvalidUsageError(f"Project base path is not a directory: {project_base_path}")

    kind = detect_backend_kind(project_base_path)
    output.debug(f"Using {kind.value} configuration for {project_base_path}")
    user_backend = open_backend(ConfigScope.USER, kind, project_base_path, env)
    project_backend = open_backend(ConfigScope.PROJECT, kind, project_base_path, env)

    registries = get_registries(user_backend, project_backend)

    output.debug(f"Discovering OpenID configuration for tenant '{options.tenant_id}'")
    issuer = discover_issuer(options.tenant_id)
    client = OidcClient(issuer, options.client_id)
    manager = TokenLifecycleManager(client, actions=actions)
    persister = AuthPersister(user_backend)

    authenticated: list[str] = []
    for registry in registries:
        output.info(f"[cyan]●[/cyan] Found registry [cyan]{registry}[/cyan]")
        token_set = manager.acquire(registry, user_backend)
        persister.persist(registry, token_set)
        output.debug(f"Wrote tokens for {registry} to {user_backend.path}")
        output.success(f"  ✓ Done! You can now install packages from {registry}")
        authenticated.append(registry)

    return authenticated

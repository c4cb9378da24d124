"""Write an acquired token set back into a registry configuration backend."""

from __future__ import annotations

from feedauth.backends import ConfigBackend
from feedauth.models import TokenSet


class AuthPersister:
    """Persist tokens for registries into one backend.

    The runner hands it the user-scope backend: registry credentials are
    installed per user regardless of which file declared the registry.

    Args:
        backend: Destination backend.
    """

    def __init__(self, backend: ConfigBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> ConfigBackend:
        return self._backend

    def persist(self, registry: str, token_set: TokenSet) -> None:
        """Write the access token, then the refresh token if one was issued.

        The two writes are not transactional. If the process dies between
        them, the next run finds a stale refresh token, falls back to the
        device code flow, and rewrites both.
        """
        self._backend.set_registry_auth_token(registry, token_set.access_token)
        if token_set.refresh_token:
            self._backend.set_registry_refresh_token(registry, token_set.refresh_token)

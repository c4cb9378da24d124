"""Refresh-then-device-code state machine for one registry.

States (see :class:`~feedauth.models.AuthState`)::

    START --(stored refresh token)--> ATTEMPTING_REFRESH
    START --(none stored)-----------> DEVICE_FLOW
    ATTEMPTING_REFRESH --SUCCESS-----> AUTHENTICATED
    ATTEMPTING_REFRESH --RECOVERABLE-> DEVICE_FLOW
    ATTEMPTING_REFRESH --FATAL-------> FAILED (RefreshError re-raised as is)
    DEVICE_FLOW --token set----------> AUTHENTICATED
    DEVICE_FLOW --DeviceFlowError----> FAILED

``AUTHENTICATED`` and ``FAILED`` are terminal. The clipboard and browser
side actions never influence a transition.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from feedauth import output
from feedauth.backends import ConfigBackend
from feedauth.config import DEVICE_CODE_SCOPE
from feedauth.desktop import DesktopActions
from feedauth.identity import OidcClient
from feedauth.models import AuthState, RefreshResult, TokenSet

logger = logging.getLogger(__name__)

_RECOVERABLE_MESSAGES = {
    "invalid_grant": "Refresh token is invalid or expired.",
    "interaction_required": "Interaction required.",
}


class TokenLifecycleManager:
    """Obtain a token set for one registry at a time.

    Args:
        client: OIDC client for the configured tenant and application.
        actions: Clipboard / browser / Enter-key helpers. Defaults to
            :class:`~feedauth.desktop.DesktopActions`.
        scope: Scope requested by the device code flow.

    Attributes:
        transitions: States visited by the most recent :meth:`acquire`
            call, starting with ``START``.
    """

    def __init__(
        self,
        client: OidcClient,
        actions: Optional[DesktopActions] = None,
        scope: str = DEVICE_CODE_SCOPE,
    ) -> None:
        self._client = client
        self._actions = actions if actions is not None else DesktopActions()
        self._scope = scope
        self.transitions: list[AuthState] = []

    @property
    def state(self) -> Optional[AuthState]:
        """Current (or final) state of the most recent :meth:`acquire`."""
        return self.transitions[-1] if self.transitions else None

    def acquire(self, registry: str, backend: ConfigBackend) -> TokenSet:
        """Return a fresh token set for *registry*.

        Tries the refresh token stored in *backend* first and falls back to
        the interactive device code flow when there is none or the provider
        reports it stale.

        Args:
            registry: Registry whose stored refresh token is looked up.
            backend: Backend holding previously stored tokens.

        Raises:
            RefreshError: If the refresh fails with an unrecognised error.
            DeviceFlowError: If the device code flow fails.
        """
        self.transitions = [AuthState.START]
        try:
            refresh_token = backend.get_registry_refresh_token(registry)
            if refresh_token:
                self._enter(AuthState.ATTEMPTING_REFRESH)
                token_set = self._attempt_refresh(refresh_token)
                if token_set is not None:
                    self._enter(AuthState.AUTHENTICATED)
                    return token_set

            self._enter(AuthState.DEVICE_FLOW)
            token_set = self._run_device_flow()
        except Exception:
            self._enter(AuthState.FAILED)
            raise

        self._enter(AuthState.AUTHENTICATED)
        return token_set

    def _enter(self, state: AuthState) -> None:
        logger.debug("Token lifecycle: %s -> %s", self.transitions[-1].value, state.value)
        self.transitions.append(state)

    def _attempt_refresh(self, refresh_token: str) -> Optional[TokenSet]:
        """Return the refreshed token set, or ``None`` to fall back to the device flow."""
        output.progress("  Trying to use refresh token...")
        outcome = self._client.refresh(refresh_token)

        if outcome.kind is RefreshResult.SUCCESS:
            assert outcome.token_set is not None
            return outcome.token_set
        assert outcome.error is not None
        if outcome.kind is RefreshResult.RECOVERABLE:
            output.warning(_RECOVERABLE_MESSAGES.get(outcome.error.code or "", str(outcome.error)))
            return None
        raise outcome.error

    def _run_device_flow(self) -> TokenSet:
        output.progress("  Launching device code authentication...")
        handle = self._client.device_authorization(self._scope)
        if handle.message:
            output.debug(handle.message)

        output.notice(
            f"  To sign in, use a web browser to open the page [cyan]{handle.verification_uri}[/cyan] "
            f"and enter the code [yellow]{handle.user_code}[/yellow] to authenticate."
        )

        if self._best_effort(self._actions.copy_to_clipboard, handle.user_code):
            output.notice(
                f"  Code [yellow]{handle.user_code}[/yellow] copied to clipboard! "
                "[bold underline]Press Enter to open the browser...[/bold underline]"
            )
        else:
            output.notice("  Press Enter to open the browser...")

        self._actions.wait_for_enter()

        if self._best_effort(self._actions.open_browser, handle.verification_uri):
            output.success("  Browser opened")
        else:
            output.warning("Could not open browser automatically")

        return handle.poll()

    @staticmethod
    def _best_effort(action: Callable[..., Any], *args: Any) -> bool:
        """Run a side action, logging and swallowing any failure."""
        try:
            return bool(action(*args))
        except Exception:
            logger.warning("Side action %s failed", getattr(action, "__name__", action), exc_info=True)
            return False

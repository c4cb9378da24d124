"""Exception hierarchy for feedauth.

All exceptions inherit from :class:`FeedauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`feedauth.exit_codes`.
The CLI command in :mod:`feedauth.app` catches ``FeedauthError`` and exits
with the appropriate code, while unexpected exceptions produce a crash log
and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    FeedauthError (exit 1)
    +-- InvalidUsageError               (exit 2)
    +-- ConfigurationError              (exit 1)
    |   +-- NoRegistriesConfiguredError (exit 1)
    +-- DiscoveryError                  (exit 6)
    +-- AuthError                       (exit 3)
        +-- RefreshError                (exit 3)
        +-- DeviceFlowError             (exit 3)

Failures of the clipboard and browser side actions are logged by
:mod:`feedauth.desktop` and never raised.
"""

from __future__ import annotations

from feedauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class FeedauthError(Exception):
    """Base exception for all feedauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`feedauth.exit_codes`. The entry point catches
    this exception type and exits with ``exc.exit_code``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FeedauthError):
    """Raised for invalid CLI arguments (e.g. a project base path that is not a directory)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(FeedauthError):
    """Raised for unreadable or malformed ``.npmrc`` / ``.yarnrc.yml`` files."""

    exit_code = EXIT_GENERIC_FAILURE


class NoRegistriesConfiguredError(ConfigurationError):
    """Raised when neither the project nor the user configuration declares a registry."""


class DiscoveryError(FeedauthError):
    """Raised when the OpenID configuration document is unreachable or malformed."""

    exit_code = EXIT_CONNECTION_ERROR


class AuthError(FeedauthError):
    """Raised when the identity provider rejects or fails an authentication attempt."""

    exit_code = EXIT_AUTH_FAILURE


class RefreshError(AuthError):
    """A refresh-token grant failed.

    Args:
        message: Human-readable error description.
        code: The OAuth2 ``error`` code returned by the provider, or ``None``
            when the request never produced an error response (network
            failure, non-JSON body).
        description: The provider's ``error_description``, if any.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        description: str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.description = description


class DeviceFlowError(AuthError):
    """Raised when the device authorization request or its polling fails (denied, expired, provider error)."""

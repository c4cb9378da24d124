"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~feedauth.exceptions.FeedauthError` subclass.
Build scripts wrapping ``feedauth`` can inspect the exit code to tell a
missing registry configuration apart from a rejected sign-in without parsing
stderr.

Example::

    $ feedauth
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the device code expired
"""

EXIT_SUCCESS = 0
"""All registries were authenticated (or the run was skipped in CI)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including registry configuration problems."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Token refresh or the device code flow failed."""

EXIT_CONNECTION_ERROR = 6
"""The identity provider could not be reached or returned unusable metadata."""

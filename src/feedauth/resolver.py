"""Registry precedence resolution.

Registries declared in the project configuration express intent for the
current codebase and win outright; user-level registries are used only when
the project declares none.
"""

from __future__ import annotations

from feedauth.backends import ConfigBackend
from feedauth.exceptions import NoRegistriesConfiguredError


def get_registries(user_backend: ConfigBackend, project_backend: ConfigBackend) -> list[str]:
    """Return the registries to authenticate, in order and without duplicates.

    Args:
        user_backend: The user-scope backend.
        project_backend: The project-scope backend (same format as
            *user_backend*).

    Returns:
        The project registries if there are any, otherwise the user
        registries, deduplicated by first occurrence.

    Raises:
        NoRegistriesConfiguredError: If both files declare no registry.
    """
    project_registries = project_backend.get_registries()
    candidates = project_registries if project_registries else user_backend.get_registries()
    registries = list(dict.fromkeys(candidates))

    if not registries:
        raise NoRegistriesConfiguredError(
            f"No registry defined in project {project_backend.path} "
            f"or user {user_backend.path}."
        )
    return registries

"""feedauth -- authenticate npm and Yarn against Azure DevOps package feeds.

The tool signs the developer in to the Microsoft identity platform using the
OAuth2 device authorization grant and writes the resulting access and refresh
tokens into whichever package-manager configuration is active for the current
project (``.npmrc`` or Yarn Berry's ``.yarnrc.yml``).

Typical usage::

    feedauth                       # authenticate every registry of the project
    feedauth --ci                  # no-op when TF_BUILD is set
    feedauth --pbp ./packages/web  # use another project directory

Modules:
    app: Typer application and console-script entry point.
    runner: Orchestration of one authentication run.
    resolver: Registry precedence resolution.
    identity: OIDC discovery, refresh, and device authorization.
    lifecycle: Refresh / device-code fallback state machine.
    persister: Writes token sets back into the registry configuration.
    backends: npmrc and yarnrc configuration backends.
    desktop: Clipboard, browser, and Enter-key helpers for the device code flow.
    config: Constants, file locations, CI detection, atomic writes.
    models: Pydantic models and enums shared across the package.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"

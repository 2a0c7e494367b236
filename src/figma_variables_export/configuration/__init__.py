"""Configuration module for the Figma variables exporter.

Configuration is a single pydantic model, ``ExportConfig``. The four
repository settings (owner, repo, destination path, token) are opaque
values supplied by the caller; they are validated for presence and never
persisted.

Usage examples:
    >>> from figma_variables_export.configuration import ExportConfig
    >>>
    >>> # Load from environment variables
    >>> config = ExportConfig.from_env()
    >>>
    >>> # Load from a dictionary
    >>> config = validate_config({"owner": "acme", "repo": "web",
    ...                           "path": "src/styles/tokens", "token": "ghp_..."})

Environment variable binding:
    ```bash
    export FIGMA_EXPORT_OWNER=acme
    export FIGMA_EXPORT_REPO=web
    export FIGMA_EXPORT_PATH=src/styles/tokens
    export GITHUB_TOKEN=ghp_xxxxxxxxxxxx
    ```

Missing values raise ``ConfigError`` before any network call is made.
"""

from .export_config import (
    ExportConfig,
    OutputLayout,
    looks_like_github_token,
    validate_config,
)

__all__ = [
    "ExportConfig",
    "OutputLayout",
    "looks_like_github_token",
    "validate_config",
]

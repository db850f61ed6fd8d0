"""Connection settings with environment-variable fallback and credential sources.

* **Precedence** -- :func:`load_options` merges explicit values (CLI flags or
  keyword arguments) over ``ULTRADNS_*`` environment variables over the
  defaults declared on :class:`~ultradns.models.APIOptions`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets from
  env vars, files, or interactive prompts so passwords do not have to be
  typed on the command line.

Recognised environment variables::

    ULTRADNS_USERNAME
    ULTRADNS_PASSWORD
    ULTRADNS_REFRESH_TOKEN
    ULTRADNS_BASE_URL
    ULTRADNS_TIMEOUT
"""

from __future__ import annotations

import getpass
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ultradns.exceptions import ConfigError
from ultradns.models import APIOptions

ENV_PREFIX = "ULTRADNS_"


def _env_values() -> dict[str, str]:
    """Collect non-empty ``ULTRADNS_*`` variables keyed by option name."""
    values: dict[str, str] = {}
    for name in APIOptions.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}", "")
        if value:
            values[name] = value
    return values


def load_options(**overrides: Any) -> APIOptions:
    """Build :class:`~ultradns.models.APIOptions` from overrides and the environment.

    Args:
        **overrides: Option values that take precedence over the
            environment. ``None`` values are ignored so CLI flags that were
            not given fall through.

    Returns:
        The validated options.

    Raises:
        ConfigError: If a value fails validation (e.g. a non-numeric
            ``ULTRADNS_TIMEOUT``).
    """
    values: dict[str, Any] = _env_values()
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return APIOptions(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid connection options: {exc}") from exc


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Password: ")

    raise ConfigError(
        f"Unknown credential source '{source}'. Use env:VAR, file:/path, or prompt"
    )

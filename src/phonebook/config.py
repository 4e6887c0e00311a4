"""Configuration for the command line: transport settings and XDG paths.

Books themselves carry no configuration beyond their own defaults. The
``phonebook`` command line, however, needs to know where to send requests;
:func:`resolve_transport_config` assembles a
:class:`~phonebook.models.TransportConfig` from, high to low:

1. CLI flags (``--base-url``, ``--timeout``)
2. Environment variables (``PHONEBOOK_BASE_URL``, ``PHONEBOOK_TIMEOUT``,
   ``PHONEBOOK_VERIFY_SSL``)
3. Project config (``./phonebook.json``, key ``transport``)
4. Defaults

Crash logs are written under the XDG data directory
(:func:`get_data_dir`).
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from phonebook.exceptions import ConfigError
from phonebook.models import ProjectConfig, TransportConfig

_APP_NAME = "phonebook"
_PROJECT_CONFIG_FILENAME = "phonebook.json"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/phonebook/`` (default
    ``~/.local/share/phonebook/``). Elsewhere: ``~/.phonebook/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[ProjectConfig]:
    """Load ``phonebook.json`` from *directory* (default: the working directory).

    Returns:
        The validated config, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid JSON or fails
            validation.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ProjectConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


# --- Precedence resolution ---


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (got {raw!r})")


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number (got {raw!r})") from exc


def resolve_transport_config(
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_headers: Optional[dict[str, str]] = None,
) -> TransportConfig:
    """Resolve transport settings with the full precedence chain.

    Headers are merged rather than replaced: project headers first, then
    ``cli_headers`` on top.

    Raises:
        ConfigError: On an invalid project file or malformed env values.
    """
    project = load_project_config()
    config = project.transport.model_copy(deep=True) if project else TransportConfig()

    updates: dict[str, Any] = {}

    env_base_url = os.environ.get("PHONEBOOK_BASE_URL")
    if env_base_url:
        updates["base_url"] = env_base_url
    env_timeout = _env_float("PHONEBOOK_TIMEOUT")
    if env_timeout is not None:
        updates["timeout"] = env_timeout
    env_verify = _env_bool("PHONEBOOK_VERIFY_SSL")
    if env_verify is not None:
        updates["verify_ssl"] = env_verify

    if cli_base_url is not None:
        updates["base_url"] = cli_base_url
    if cli_timeout is not None:
        updates["timeout"] = cli_timeout
    if cli_headers:
        updates["headers"] = {**config.headers, **cli_headers}

    return config.model_copy(update=updates)

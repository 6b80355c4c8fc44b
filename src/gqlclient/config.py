"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.gqlclient/`` on macOS and Windows. See :func:`get_config_dir`.
* **Config file** -- a single :class:`~gqlclient.models.ClientConfig` JSON
  file, read by :func:`load_config` and written by :func:`save_config`.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  arguments, environment variables, the config file and defaults.

File writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a truncated config behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gqlclient.exceptions import ConfigError
from gqlclient.models import ClientConfig

_APP_NAME = "gqlclient"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "GQLCLIENT_BASE_URL"
ENV_CACHE_ENABLED = "GQLCLIENT_CACHE_ENABLED"
ENV_CONFIG_PATH = "GQLCLIENT_CONFIG"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that follow XDG Base Directory conventions (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/gqlclient/`` (default ``~/.config/gqlclient/``).
    On macOS/Windows: ``~/.gqlclient/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Path of the config file, honouring ``$GQLCLIENT_CONFIG``."""
    override = os.environ.get(ENV_CONFIG_PATH)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load the client configuration file.

    Args:
        path: Explicit file path. Defaults to :func:`default_config_path`.

    Returns:
        The deserialised :class:`~gqlclient.models.ClientConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = path or default_config_path()
    if not path.is_file():
        return ClientConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig, path: Optional[Path] = None) -> Path:
    """Persist *config* atomically and return the path written."""
    path = path or default_config_path()
    data = config.model_dump(mode="json")
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {raw!r}")


def resolve_config(
    base_url: Optional[str] = None,
    cache_enabled: Optional[bool] = None,
    path: Optional[Path] = None,
) -> ClientConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Explicit arguments (``base_url``, ``cache_enabled``)
        2. Environment variables (``GQLCLIENT_BASE_URL``, ``GQLCLIENT_CACHE_ENABLED``)
        3. Config file (``GQLCLIENT_CONFIG`` or ``~/.config/gqlclient/config.json``)
        4. Defaults

    ``cache_enabled`` only toggles the response cache; the schema cache
    keeps its file or default setting.
    """
    config = load_config(path)

    env_base_url = os.environ.get(ENV_BASE_URL)
    if base_url is not None:
        config.base_url = base_url
    elif env_base_url:
        config.base_url = env_base_url

    env_cache = os.environ.get(ENV_CACHE_ENABLED)
    if cache_enabled is not None:
        config.response_cache.enabled = cache_enabled
    elif env_cache:
        config.response_cache.enabled = _parse_bool(ENV_CACHE_ENABLED, env_cache)

    return config

"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for spectui:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.spectui/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~spectui.models.GlobalConfig`
  JSON file storing defaults (base URL override, request timeout, pane
  height).
* **Project config** -- An optional ``./spectui.json`` overlaying the
  global file for one working directory.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
* **Dotted keys** -- :func:`set_config_value` updates one setting by its
  ``section.field`` path, as used by ``spectui config set``.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from spectui.exceptions import ConfigError
from spectui.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "spectui"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "spectui.json"

ENV_BASE_URL = "SPECTUI_BASE_URL"
ENV_TIMEOUT = "SPECTUI_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/spectui/`` (default ``~/.config/spectui/``).
    On macOS/Windows: ``~/.spectui/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (session log, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/spectui/`` (default ``~/.local/share/spectui/``).
    On macOS/Windows: ``~/.spectui/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure the
    temp file is removed.
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
        fd = None  # prevent double-close below
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


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~spectui.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./spectui.json``.

    The file holds any subset of the global config's keys, e.g.
    ``{"base_url": "http://localhost:8080"}``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_timeout``)
        2. Environment variables (``SPECTUI_BASE_URL``, ``SPECTUI_TIMEOUT``)
        3. Project config (``./spectui.json``)
        4. User config (``~/.config/spectui/config.json``)
        5. Defaults

    Returns:
        The effective configuration.

    Raises:
        ConfigError: If a config file or ``SPECTUI_TIMEOUT`` is invalid.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    global_cfg = load_global_config()

    # 3. Project-local overlay
    project = load_project_config()
    if project is not None:
        try:
            global_cfg = GlobalConfig.model_validate(
                _deep_merge(global_cfg.model_dump(mode="json"), project)
            )
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment variables
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        global_cfg.base_url = env_base_url
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            global_cfg.request.timeout = float(env_timeout)
        except ValueError:
            raise ConfigError(
                f"{ENV_TIMEOUT} must be a number of seconds, got: {env_timeout}"
            ) from None

    # 1. CLI flags (highest precedence)
    if cli_base_url is not None:
        global_cfg.base_url = cli_base_url
    if cli_timeout is not None:
        global_cfg.request.timeout = cli_timeout

    logger.debug("Resolved config: %s", global_cfg.model_dump(mode="json"))
    return global_cfg


# --- Dotted keys ---


def set_config_value(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    The value is coerced to the type of the current setting (bool, int,
    float or str).  ``none`` clears an optional setting.

    Raises:
        ConfigError: If the key does not exist, or the value cannot be
            coerced or fails validation.
    """
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise ConfigError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        raise ConfigError(f"Unknown config key: {key}")

    current = target[final_key]
    coerced: Any
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            raise ConfigError(f"Expected integer for {key}, got: {value}") from None
    elif isinstance(current, float):
        try:
            coerced = float(value)
        except ValueError:
            raise ConfigError(f"Expected number for {key}, got: {value}") from None
    elif value.lower() == "none":
        coerced = None
    else:
        coerced = value

    target[final_key] = coerced
    try:
        return GlobalConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Validation error for {key}: {exc}") from exc

"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for snipgen:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.snipgen/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~snipgen.models.GlobalConfig`
  JSON file storing the index source per API version, the default
  language, and cache settings.
* **Project-local config** -- ``./snipgen.json`` may pin a language, an
  override index, or extra index sources for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

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

from pydantic import ValidationError

from snipgen.exceptions import ConfigError
from snipgen.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "snipgen"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "snipgen.json"

ENV_LANGUAGE = "SNIPGEN_LANGUAGE"
ENV_INDEX = "SNIPGEN_INDEX"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/snipgen/`` (default ``~/.config/snipgen/``).
    On macOS/Windows: ``~/.snipgen/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds downloaded API description documents. Cached data can be safely
    deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/snipgen/`` (default ``~/.cache/snipgen/``).
    On macOS/Windows: ``~/.snipgen/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/snipgen/`` (default ``~/.local/share/snipgen/``).
    On macOS/Windows: ``~/.snipgen/logs/``.
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
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the error re-raised.
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
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~snipgen.models.GlobalConfig`. If the
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
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


def set_index_source(version: str, source: str) -> GlobalConfig:
    """Point API *version* at a new index *source* and save the global config.

    Args:
        version: Version segment (``v1.0``, ``beta``). Stored lower-cased.
        source: URL or file path of the OpenAPI document.

    Returns:
        The updated configuration.
    """
    config = load_global_config()
    config.index_sources[version.lower()] = source
    save_global_config(config)
    logger.info("Index source for %s set to %s", version.lower(), source)
    return config


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./snipgen.json``.

    Recognised keys: ``default_language``, ``override_index`` and
    ``index_sources`` (merged over the global sources).

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_language: Optional[str] = None,
    cli_index: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, str]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_language``, ``cli_index``, ``cli_format``)
        2. Environment variables (``SNIPGEN_LANGUAGE``, ``SNIPGEN_INDEX``)
        3. Project config (``./snipgen.json``)
        4. User config (``~/.config/snipgen/config.json``)
        5. Defaults

    Returns:
        A tuple of ``(global_config, language_id)``.
    """
    # 5 + 4. Base global config (defaults fill in automatically)
    config = load_global_config()
    language = config.default_language

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        if project.get("default_language"):
            language = str(project["default_language"])
        if project.get("override_index"):
            config.override_index = str(project["override_index"])
        sources = project.get("index_sources")
        if isinstance(sources, dict):
            config.index_sources.update({str(k).lower(): str(v) for k, v in sources.items()})

    # 2. Environment
    env_language = os.environ.get(ENV_LANGUAGE)
    if env_language:
        language = env_language
    env_index = os.environ.get(ENV_INDEX)
    if env_index:
        config.override_index = env_index

    # 1. CLI flags
    if cli_language is not None:
        language = cli_language
    if cli_index is not None:
        config.override_index = cli_index
    if cli_format is not None:
        config.output.format = cli_format

    return config, language

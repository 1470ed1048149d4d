"""CLI configuration with XDG paths and atomic writes.

The library itself never reads the environment: adapters and clients take
explicit :class:`~respcache.models.StorageConfig` and
:class:`~respcache.models.DefaultCacheOptions` values.  This module is the
CLI's side of that contract:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.respcache/`` on macOS and Windows.  See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **App config** -- a single :class:`~respcache.models.AppConfig` JSON file,
  read by :func:`load_config` and written by :func:`save_config`.
* **Storage defaults** -- :func:`resolve_storage_config` fills in the XDG
  cache directory for the indexed backend when none is configured.

All file writes use a temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from respcache.exceptions import ConfigurationError
from respcache.models import AppConfig, StorageConfig, StorageType

_APP_NAME = "respcache"
_CONFIG_FILENAME = "config.json"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/respcache/`` (default ``~/.config/respcache/``).
    On macOS/Windows: ``~/.respcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the indexed backend's records; safe to delete at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/respcache/`` (default ``~/.cache/respcache/``).
    On macOS/Windows: ``~/.respcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Path of ``config.json`` inside :func:`get_config_dir`."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created next to *path* so that ``os.replace`` is
    an atomic rename on POSIX systems.  On any failure the temp file is
    removed and the error re-raised.
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


# --- App config ---


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load the CLI configuration.

    Args:
        path: Explicit config file.  Defaults to :func:`default_config_path`.

    Returns:
        The deserialised :class:`~respcache.models.AppConfig`, or the
        defaults when the file does not exist.

    Raises:
        ConfigurationError: If the file exists but contains invalid JSON or
            fails validation.
    """
    path = path or default_config_path()
    if not path.is_file():
        return AppConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AppConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: AppConfig, path: Optional[Path] = None) -> Path:
    """Persist *config* atomically and return the path written."""
    path = path or default_config_path()
    data = config.model_dump(mode="json", by_alias=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


def resolve_storage_config(config: AppConfig) -> StorageConfig:
    """Return the storage config with the indexed directory filled in.

    An ``indexed`` backend without an explicit ``directory`` uses
    :func:`get_cache_dir`.
    """
    storage = config.storage
    if storage.type == StorageType.INDEXED and storage.directory is None:
        return storage.model_copy(update={"directory": get_cache_dir()})
    return storage

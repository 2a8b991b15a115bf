"""User and project configuration for specmock.

Settings live in two JSON files:

* ``config.json`` in the user's config directory holds a
  :class:`~specmock.models.GlobalConfig`.  The directory follows the XDG
  Base Directory layout on Linux and BSD (``$XDG_CONFIG_HOME/specmock``)
  and is ``~/.specmock`` elsewhere.
* ``specmock.json`` in the working directory may carry a ``generator``
  object that overrides the user's generator settings for one repository.

:func:`resolve_config` layers CLI flags, ``SPECMOCK_*`` environment
variables, the project file and the user file on top of the defaults.

:func:`atomic_write` is shared with :mod:`specmock.serializer`, so config
files and generated stub files are never left half-written.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specmock.exceptions import ConfigError
from specmock.models import GeneratorSettings, GlobalConfig

_APP_NAME = "specmock"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specmock.json"


# --- Directories ---


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: tuple[str, ...]) -> Path:
    """Return (and create) a specmock directory.

    On XDG platforms this is ``$<xdg_var>/specmock``, with *xdg_default*
    under the home directory standing in for an unset variable.  Elsewhere
    it is ``~/.specmock``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get(xdg_var, "")
        base = Path(env_value) if env_value else Path.home().joinpath(*xdg_default)
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``."""
    return _app_dir("XDG_CONFIG_HOME", (".config",))


def get_data_dir() -> Path:
    """Directory holding the ``logs/`` crash log folder."""
    return _app_dir("XDG_DATA_HOME", (".local", "share"))


# --- Atomic file writes ---


def atomic_write(path: Path, data: str | bytes) -> None:
    """Replace *path* with *data* in one step.

    The data goes to a temporary file in the same directory, is flushed and
    fsynced, and is then moved over *path* with :func:`os.replace`.  Parent
    directories are created.  If anything fails the temporary file is
    removed and the exception propagates.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.encode("utf-8") if isinstance(data, str) else data

    tmp = tempfile.NamedTemporaryFile(
        mode="wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    try:
        with tmp:
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        try:
            os.unlink(tmp.name)
        except OSError:
            pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specmock.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
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
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specmock.json``.

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
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_seed: Optional[int] = None,
    cli_locale: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_seed``, ``cli_locale``, ``cli_format``)
        2. Environment variables (``SPECMOCK_SEED``, ``SPECMOCK_LOCALE``)
        3. Project config (``./specmock.json``)
        4. User config (``~/.config/specmock/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~specmock.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Global config fills in defaults automatically
    global_cfg = load_global_config()
    generator = global_cfg.generator.model_dump()

    # 3. Project-local generator overrides
    project = load_project_config()
    if project is not None:
        overrides = project.get("generator") or {}
        if not isinstance(overrides, dict):
            raise ConfigError("Project config 'generator' must be a JSON object")
        generator.update(overrides)

    # 2. Environment variables
    env_seed = os.environ.get("SPECMOCK_SEED")
    if env_seed:
        try:
            generator["seed"] = int(env_seed)
        except ValueError:
            raise ConfigError(f"SPECMOCK_SEED must be an integer, got '{env_seed}'") from None
    env_locale = os.environ.get("SPECMOCK_LOCALE")
    if env_locale:
        generator["locale"] = env_locale

    # 1. CLI flags (highest precedence)
    if cli_seed is not None:
        generator["seed"] = cli_seed
    if cli_locale is not None:
        generator["locale"] = cli_locale

    try:
        global_cfg.generator = GeneratorSettings.model_validate(generator)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generator settings: {exc}") from exc

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg

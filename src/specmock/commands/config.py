"""``specmock config`` -- view and edit the user configuration.

The configuration is a :class:`~specmock.models.GlobalConfig` stored as
``config.json`` in :func:`~specmock.config.get_config_dir`.  Keys are
addressed with dots, e.g. ``generator.header_placeholder`` or
``output.format``.  Project files (``./specmock.json``) are not touched by
these commands.
"""

from __future__ import annotations

from typing import Any

import typer

from specmock.exceptions import InvalidUsageError, SpecmockError
from specmock.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the user configuration.

    Example::

        specmock config show
        specmock --json config show
    """
    from specmock.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except SpecmockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Dotted key, e.g. 'generator.array_cardinality'."
    ),
    value: str = typer.Argument(help="New value; 'null' clears an optional key."),
) -> None:
    """Change one configuration value.

    The value is converted to the type of the current value and the whole
    configuration is validated before it is saved, so an out-of-range
    value leaves the file untouched.

    Example::

        specmock config set generator.seed 42
        specmock config set generator.header_placeholder mock-value
        specmock config set output.format json
    """
    from specmock.config import load_global_config, save_global_config
    from specmock.models import GlobalConfig

    try:
        data = load_global_config().model_dump(mode="json")
        parent, field = _locate(data, key)
        parent[field] = _coerce(key, value, parent[field])
        new_config = GlobalConfig.model_validate(data)
    except SpecmockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None

    save_global_config(new_config)
    success(f"Set {key} = {parent[field]}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmation."
    ),
) -> None:
    """Restore the default configuration.

    Example::

        specmock config reset --force
    """
    from specmock.config import save_global_config
    from specmock.models import GlobalConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


def _locate(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Return the dict holding the last segment of *key* and that segment."""
    *parents, field = key.split(".")
    target = data
    for part in parents:
        child = target.get(part)
        if not isinstance(child, dict):
            raise InvalidUsageError(f"Invalid config key: {key}")
        target = child
    if field not in target or isinstance(target[field], dict):
        raise InvalidUsageError(f"Unknown config key: {key}")
    return target, field


def _coerce(key: str, raw: str, current: Any) -> Any:
    """Convert *raw* to the type of *current*."""
    if raw.lower() == "null":
        return None
    if isinstance(current, bool):
        return raw.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise InvalidUsageError(f"Expected integer for {key}, got: {raw}") from None
    return raw

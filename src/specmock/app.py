"""The ``specmock`` command-line application.

Sub-commands:

* ``generate`` -- one OpenAPI document to a WireMock mapping file and its
  response bodies.
* ``batch`` -- every document in a directory, skipping the broken ones.
* ``inspect`` -- print the mappings a document would produce.
* ``config`` -- show, set or reset the user configuration.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.  A :class:`~specmock.exceptions.SpecmockError` escaping a
command ends the process with that error's exit code; any other exception is
written to a crash log under :func:`~specmock.config.get_data_dir`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specmock import __version__
from specmock.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="specmock",
    help="Generate WireMock stubs from OpenAPI 3.x specs.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


# ------------------------------------------------------------------ #
# Built-in commands
# ------------------------------------------------------------------ #

from specmock.commands.config import config_app  # noqa: E402
from specmock.commands.generate import batch_command, generate_command  # noqa: E402
from specmock.commands.inspect import inspect_command  # noqa: E402

app.command("generate")(generate_command)
app.command("batch")(batch_command)
app.command("inspect")(inspect_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specmock {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print data as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print data as tab-separated text."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print data, warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print debug messages and per-mapping logs."
    ),
) -> None:
    """Set up output and logging for the command that follows."""
    from specmock.config import resolve_config
    from specmock.exceptions import ConfigError
    from specmock.output import OutputFormat, OutputManager, configure_logging, set_output

    if json_output:
        cli_format: Optional[str] = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value
    else:
        cli_format = None

    config_problem: Optional[ConfigError] = None
    try:
        fmt = OutputFormat(resolve_config(cli_format=cli_format).output.format)
    except ConfigError as exc:
        # `config reset` has to run even when the config file is broken.
        config_problem = exc
        fmt = OutputFormat(cli_format or OutputFormat.AUTO.value)

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)
    if config_problem is not None:
        output.warning(str(config_problem))

    ctx.ensure_object(dict)
    ctx.obj["format"] = None if fmt == OutputFormat.AUTO else fmt.value
    ctx.obj["verbose"] = verbose


def _exit_on_sigint() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Save the traceback being handled and return the log file path."""
    from specmock.config import atomic_write, get_data_dir

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_data_dir() / "logs" / f"crash-{timestamp}.log"
    atomic_write(log_path, traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Run the CLI and turn uncaught exceptions into exit codes.

    Raises:
        SystemExit: Always; Typer raises it on normal completion too.
    """
    from specmock.exceptions import SpecmockError
    from specmock.output import error

    _exit_on_sigint()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except SpecmockError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

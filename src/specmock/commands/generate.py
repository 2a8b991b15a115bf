"""Generate commands -- compile specs into WireMock stub files.

Implements the ``specmock generate`` and ``specmock batch`` top-level
commands.  ``generate`` handles a single spec from a file, URL or stdin;
``batch`` handles every ``.json``/``.yaml``/``.yml`` file in a directory and
keeps going when one of them fails.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from specmock.exit_codes import EXIT_GENERIC_FAILURE
from specmock.output import debug, error, info, success, warning


def generate_command(
    spec: str = typer.Argument(
        help="OpenAPI spec file path or URL (use '-' for stdin)."
    ),
    output: Path = typer.Option(
        ..., "--output", "-o", help="Directory receiving the mapping file."
    ),
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Spec name used in output file names (defaults to the file stem).",
    ),
    files_dir: Optional[Path] = typer.Option(
        None, "--files-dir", help="Directory for response bodies (default: <output>/../__files)."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for reproducible random values."
    ),
    locale: Optional[str] = typer.Option(
        None, "--locale", help="Faker locale for random values."
    ),
) -> None:
    """Generate WireMock stubs from one OpenAPI spec.

    Writes ``WireMockStub-<name>.json`` into the output directory and one
    ``<name>-response-<status>.json`` body file per response with a body.

    Raises:
        typer.Exit: With the error's exit code if the spec cannot be loaded
            or compiled.

    Example::

        specmock generate petstore.yaml -o wiremock/mappings
        curl -s https://api.example.com/openapi.json | specmock generate - -o out --name api
    """
    from specmock.config import resolve_config
    from specmock.exceptions import SpecmockError
    from specmock.pipeline import generate_from_source
    from specmock.serializer import write_result

    spec_name = name or default_spec_name(spec)
    try:
        settings = resolve_config(cli_seed=seed, cli_locale=locale).generator
        info(f"Processing spec: {spec}")
        result = generate_from_source(spec, spec_name, settings)
        written = write_result(result, output, files_dir)
    except SpecmockError as exc:
        error(f"Failed to generate stubs from {spec}: {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    except OSError as exc:
        error(f"Failed to write stubs to {output}: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    for path in written:
        debug(f"Wrote {path}")
    if result.warnings:
        warning(f"{len(result.warnings)} path parameter(s) could not be resolved")
    success(
        f"Generated {len(result.mappings)} mapping(s) and "
        f"{len(result.files)} body file(s) for '{spec_name}'"
    )


def batch_command(
    input_dir: Path = typer.Argument(
        ..., exists=True, file_okay=False, dir_okay=True, help="Directory of OpenAPI specs."
    ),
    output: Path = typer.Option(
        ..., "--output", "-o", help="Directory receiving the mapping files."
    ),
    files_dir: Optional[Path] = typer.Option(
        None, "--files-dir", help="Directory for response bodies (default: <output>/../__files)."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for reproducible random values."
    ),
    locale: Optional[str] = typer.Option(
        None, "--locale", help="Faker locale for random values."
    ),
) -> None:
    """Generate WireMock stubs for every spec in a directory.

    A spec that fails is reported and skipped; the others are still
    generated. Exits with code 1 when at least one spec failed.

    Example::

        specmock batch target/specs -o wiremock/mappings
    """
    from specmock.config import resolve_config
    from specmock.exceptions import SpecmockError
    from specmock.pipeline import generate_from_directory

    try:
        settings = resolve_config(cli_seed=seed, cli_locale=locale).generator
    except SpecmockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    report = generate_from_directory(input_dir, output, settings, files_dir)

    # An empty directory is already logged as a warning by the pipeline.
    if not report.outcomes:
        return

    for outcome in report.succeeded:
        count = len(outcome.result.mappings) if outcome.result else 0
        info(f"{outcome.source.name}: {count} mapping(s)")
    for outcome in report.failed:
        error(f"{outcome.source.name}: {outcome.error}")

    if report.failed:
        error(f"{len(report.failed)} of {len(report.outcomes)} spec(s) failed")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    success(f"Generated stubs for {len(report.outcomes)} spec(s) in {output}")


def default_spec_name(source: str) -> str:
    """Derive a spec name from a file path, URL or ``-``."""
    if source == "-":
        return "stdin"
    if source.startswith(("http://", "https://")):
        last = urlparse(source).path.rstrip("/").rsplit("/", 1)[-1]
        return Path(last).stem or "spec"
    return Path(source).stem or "spec"

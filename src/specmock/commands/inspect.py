"""Inspect command -- preview the mappings a spec would produce.

``specmock inspect`` compiles a spec in memory and prints one row per
mapping (method, URL pattern, status, body file) without writing any file.
With ``--json`` it prints the ``{"mappings": [...]}`` document instead, which
is exactly what ``generate`` would write.
"""

from __future__ import annotations

from typing import Optional

import typer

from specmock.output import OutputFormat, error, get_output, print_data


def inspect_command(
    spec: str = typer.Argument(
        help="OpenAPI spec file path or URL (use '-' for stdin)."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for reproducible random values."
    ),
) -> None:
    """Show the mappings generated for a spec without writing them.

    Example::

        specmock inspect petstore.yaml
        specmock --json inspect petstore.yaml > stubs.json
    """
    from specmock.commands.generate import default_spec_name
    from specmock.config import resolve_config
    from specmock.exceptions import SpecmockError
    from specmock.pipeline import generate_from_source
    from specmock.serializer import dump_mappings

    try:
        settings = resolve_config(cli_seed=seed).generator
        result = generate_from_source(spec, default_spec_name(spec), settings)
    except SpecmockError as exc:
        error(f"Failed to inspect {spec}: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    if output.format == OutputFormat.JSON:
        print_data(dump_mappings(result.mappings).rstrip("\n"))
    else:
        headers = ["Method", "URL Pattern", "Status", "Body File", "Header Matchers"]
        rows: list[list[str]] = []
        for entry in result.mappings:
            rows.append([
                entry.request.method,
                entry.request.url_pattern,
                str(entry.response.status),
                entry.response.body_file_name or "-",
                ", ".join(entry.request.headers) or "-",
            ])
        output.print_table(
            headers, rows, title=f"{result.spec_name} -- Mappings ({len(rows)})"
        )

"""specmock -- Generate WireMock stub mappings from OpenAPI 3.x specs.

This package compiles an OpenAPI document into a set of WireMock request
matchers and canned responses. Every ``path x method x status`` triple in
the document becomes one mapping; response bodies come from the document's
examples or are synthesized from its schemas.

Typical workflow::

    specmock generate openapi.yaml -o wiremock/mappings
    specmock batch specs/ -o wiremock/mappings

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    serializer: Persist and reload WireMock mapping files.
    pipeline: Single-file and directory generation with error isolation.
"""

__version__ = "0.1.0"

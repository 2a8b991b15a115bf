"""Exception hierarchy for specmock.

All exceptions inherit from :class:`SpecmockError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specmock.exit_codes`.
The top-level error handler in :func:`specmock.app.main` catches
``SpecmockError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecmockError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigError              (exit 1)
    +-- SpecParseError           (exit 7)
    |   +-- UnsupportedFormat    (exit 7)
    +-- MockGenerationError      (exit 8)
        +-- ReferenceNotFound
        +-- ReferenceDepthExceeded
        +-- SchemaDepthExceeded

Unresolved path placeholders are not errors; they are reported as
:class:`~specmock.models.ParameterUnresolved` warning records.
"""

from __future__ import annotations

from typing import Optional

from specmock.exit_codes import (
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecmockError(Exception):
    """Base exception for all specmock errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specmock.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecmockError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecmockError):
    """Raised for configuration problems (invalid JSON, values failing validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpecmockError):
    """Raised when the OpenAPI spec cannot be loaded, parsed, or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedFormat(SpecParseError):
    """Raised when a spec file is neither JSON nor YAML."""


class MockGenerationError(SpecmockError):
    """Base class for errors that abort mapping generation for one document."""

    exit_code = EXIT_GENERATION_ERROR


class ReferenceNotFound(MockGenerationError):
    """Raised when a ``$ref`` pointer does not resolve within the document.

    Args:
        pointer: The full ``$ref`` string being resolved.
        segment: The path segment that could not be found, if any.
    """

    def __init__(self, pointer: str, segment: Optional[str] = None):
        self.pointer = pointer
        self.segment = segment
        if segment is None:
            message = f"Cannot resolve $ref '{pointer}'"
        else:
            message = f"Cannot resolve $ref '{pointer}': key '{segment}' not found"
        super().__init__(message)


class ReferenceDepthExceeded(MockGenerationError):
    """Raised when a chain of ``$ref`` hops is longer than the configured bound.

    Cycles and very long acyclic chains are reported identically.
    """

    def __init__(self, pointer: str, max_depth: int):
        self.pointer = pointer
        self.max_depth = max_depth
        super().__init__(
            f"Exceeded maximum reference depth of {max_depth} while resolving '{pointer}'"
        )


class SchemaDepthExceeded(MockGenerationError):
    """Raised when schema synthesis nests deeper than the configured bound.

    This is what a self-referencing schema (e.g. a tree node whose children
    are tree nodes) runs into.
    """

    def __init__(self, max_depth: int, location: Optional[str] = None):
        self.max_depth = max_depth
        self.location = location
        message = f"Exceeded maximum schema resolution depth of {max_depth}"
        if location:
            message += f" at {location}"
        super().__init__(message)

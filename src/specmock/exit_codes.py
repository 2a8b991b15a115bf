"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specmock.exceptions.SpecmockError` subclass.
CI scripts can inspect the exit code to tell a broken spec from a broken
invocation without parsing stderr.

Example::

    $ specmock generate broken.yaml -o out/
    $ echo $?
    8   # EXIT_GENERATION_ERROR -- a $ref could not be resolved
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or at least one document in a batch failed."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be loaded, parsed, or validated."""

EXIT_GENERATION_ERROR = 8
"""Mapping generation aborted (unresolvable or too deeply nested references)."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C (128 + SIGINT)."""

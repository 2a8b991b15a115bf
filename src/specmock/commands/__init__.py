"""Built-in CLI sub-commands for specmock.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~specmock.commands.generate` -- ``generate`` (one spec) and
  ``batch`` (a directory of specs).
* :mod:`~specmock.commands.inspect` -- preview the mappings of a spec
  without writing anything.
* :mod:`~specmock.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or a plain callback function
registered directly on the root app (for single commands like
``generate``).
"""

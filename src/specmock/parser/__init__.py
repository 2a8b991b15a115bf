"""OpenAPI spec parser -- load documents and resolve ``$ref`` pointers.

Typical usage::

    from specmock.parser import load_spec, validate_openapi_version, resolve

    raw = load_spec("openapi.yaml")
    version = validate_openapi_version(raw)
    pet = resolve("#/components/schemas/Pet", raw)

Sub-modules:

* :mod:`~specmock.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specmock.parser.resolver` -- Depth-bounded lazy ``$ref`` resolution.
"""

from specmock.parser.loader import load_spec, validate_openapi_version
from specmock.parser.resolver import resolve, resolve_node

__all__ = ["load_spec", "validate_openapi_version", "resolve", "resolve_node"]

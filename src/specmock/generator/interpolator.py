"""Fill path-template placeholders with example values.

``/pets/{petId}`` becomes ``/pets/42`` when the ``petId`` parameter declares
an example, ``/pets/example-petId`` when it is required but has none, and
stays ``/pets/{petId}`` otherwise.  Keeping optional placeholders lets
WireMock consumers match templated URLs.  An explicit ``null`` example counts
as no example.
"""

from __future__ import annotations

import datetime
import json
import logging
import re
from typing import Any, Optional

from specmock.generator.synthesizer import MISSING
from specmock.models import GeneratorSettings, ParameterUnresolved
from specmock.parser.resolver import resolve_node

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}/]+)\}")


def interpolate(
    path_pattern: str,
    parameters: list[Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
    warnings: Optional[list[ParameterUnresolved]] = None,
) -> str:
    """Replace every ``{name}`` placeholder in *path_pattern*.

    Args:
        path_pattern: An OpenAPI path key such as ``/pets/{petId}``.
        parameters: The operation's parameters, inline or ``$ref``.
        document: The root spec, used to resolve references.
        settings: Generator settings; defaults are used when omitted.
        warnings: If given, a :class:`~specmock.models.ParameterUnresolved`
            record is appended for every placeholder with no parameter.

    Returns:
        The path with placeholders substituted where a value is known.
    """
    settings = settings or GeneratorSettings()
    resolved = [
        resolve_node(p, document, max_depth=settings.max_reference_depth)
        for p in parameters
    ]

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        param = _find_parameter(resolved, name)
        if param is None:
            logger.warning(
                "Parameter '%s' not found in parameters of '%s'", name, path_pattern
            )
            if warnings is not None:
                warnings.append(ParameterUnresolved(path=path_pattern, name=name))
            return match.group(0)

        example = parameter_example(param, document, settings)
        if example is not MISSING and example is not None:
            return example_text(example)
        if param.get("required"):
            return f"{settings.parameter_placeholder_prefix}{name}"
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, path_pattern)


def parameter_example(
    param: dict[str, Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
) -> Any:
    """Return the example declared for a resolved parameter or header object.

    Looks at ``example``, then the first entry of ``examples``, then
    ``schema.example``.  Returns :data:`~specmock.generator.synthesizer.MISSING`
    when none is declared.
    """
    settings = settings or GeneratorSettings()
    if "example" in param:
        return param["example"]

    examples = param.get("examples")
    if isinstance(examples, dict) and examples:
        first = resolve_node(
            next(iter(examples.values())), document, max_depth=settings.max_reference_depth
        )
        if isinstance(first, dict) and "value" in first:
            return first["value"]

    schema = resolve_node(param.get("schema"), document, max_depth=settings.max_reference_depth)
    if isinstance(schema, dict) and "example" in schema:
        return schema["example"]
    return MISSING


def example_text(value: Any) -> str:
    """Render an example for a URL or header: strings and dates as text, anything else as JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, datetime.date):
        return value.isoformat()
    return json.dumps(value, separators=(",", ":"), default=str)


def _find_parameter(parameters: list[Any], name: str) -> Optional[dict[str, Any]]:
    """Find the parameter called *name*, preferring one declared ``in: path``."""
    matches = [p for p in parameters if isinstance(p, dict) and p.get("name") == name]
    for param in matches:
        if param.get("in") == "path":
            return param
    return matches[0] if matches else None

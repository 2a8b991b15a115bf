"""Synthesize concrete JSON values from OpenAPI schema nodes.

Given a schema and an optional literal example, :func:`synthesize` produces a
JSON-compatible value for a mock response body.  Precedence, in order:

1. A literal example, returned verbatim.  ``None``, ``0``, ``False`` and
   empty containers are real examples; only :data:`MISSING` means "absent".
2. A ``$ref`` schema, resolved and synthesized in turn.
3. An object schema, producing every declared property and nothing else.
4. An array schema, producing ``array_cardinality`` elements (one by
   default).  The fixed count is a deliberate simplification.
5. A primitive, producing a random but type-plausible value.

Recursion depth is shared by object nesting, array nesting and ``$ref`` hops
and is bounded by ``GeneratorSettings.max_schema_depth``.  Nothing is cached
between calls.
"""

from __future__ import annotations

from typing import Any, Optional

from faker import Faker

from specmock.exceptions import SchemaDepthExceeded, SpecParseError
from specmock.models import GeneratorSettings
from specmock.parser.resolver import extend_pointer, is_reference, resolve


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""Sentinel for "no example supplied"."""


def make_faker(settings: Optional[GeneratorSettings] = None) -> Faker:
    """Create a Faker instance for *settings*, seeded when a seed is configured."""
    settings = settings or GeneratorSettings()
    fake = Faker(settings.locale)
    if settings.seed is not None:
        fake.seed_instance(settings.seed)
    return fake


def synthesize(
    example: Any,
    schema: Any,
    document: dict[str, Any],
    depth: int = 0,
    settings: Optional[GeneratorSettings] = None,
    fake: Optional[Faker] = None,
    location: str = "#",
) -> Any:
    """Produce a value for *schema*, preferring *example* when it is present.

    Args:
        example: A literal example, or :data:`MISSING`.
        schema: The schema node (inline or ``$ref``). ``None`` yields ``None``.
        document: The root spec, used to resolve references.
        depth: Current nesting depth.
        settings: Generator settings; defaults are used when omitted.
        fake: Faker instance to draw random values from.
        location: JSON pointer of *schema*, used in error messages.  It
            follows ``$ref`` targets and grows by ``/properties/<name>``
            and ``/items``.

    Returns:
        A JSON-compatible value.

    Raises:
        SchemaDepthExceeded: If nesting goes deeper than
            ``settings.max_schema_depth``.
        SpecParseError: If ``properties`` is not a mapping.
        ReferenceNotFound: If a ``$ref`` does not resolve.
        ReferenceDepthExceeded: If a single ``$ref`` chain is too long.
    """
    settings = settings or GeneratorSettings()
    if depth > settings.max_schema_depth:
        raise SchemaDepthExceeded(settings.max_schema_depth, location=location)

    if example is not MISSING:
        return example

    if not isinstance(schema, dict):
        return None

    if fake is None:
        fake = make_faker(settings)

    if is_reference(schema):
        pointer = schema["$ref"]
        target = resolve(pointer, document, max_depth=settings.max_reference_depth)
        return synthesize(MISSING, target, document, depth + 1, settings, fake, str(pointer))

    schema_type = _schema_type(schema)

    if schema_type == "object" or (schema_type is None and "properties" in schema):
        properties = schema.get("properties") or {}
        if not isinstance(properties, dict):
            raise SpecParseError(
                f"Expected an object at {extend_pointer(location, 'properties')}, "
                f"got {type(properties).__name__}"
            )
        result: dict[str, Any] = {}
        for name, prop in properties.items():
            prop_example = prop.get("example", MISSING) if isinstance(prop, dict) else MISSING
            result[name] = synthesize(
                prop_example, prop, document, depth + 1, settings, fake,
                extend_pointer(location, "properties", name),
            )
        return result

    if schema_type == "array":
        items = schema.get("items") or {}
        return [
            synthesize(
                MISSING, items, document, depth + 1, settings, fake,
                extend_pointer(location, "items"),
            )
            for _ in range(settings.array_cardinality)
        ]

    return random_value(schema, settings, fake)


def random_value(
    schema: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
    fake: Optional[Faker] = None,
) -> Any:
    """Return a random value plausible for a primitive *schema*.

    ``enum`` wins over ``type``; the ``uuid``, ``date`` and ``date-time``
    formats win over a plain ``string`` type.  Unknown types yield ``None``.
    """
    settings = settings or GeneratorSettings()
    if fake is None:
        fake = make_faker(settings)

    enum_values = schema.get("enum")
    if enum_values:
        return fake.random_element(elements=list(enum_values))

    schema_type = _schema_type(schema)
    schema_format = schema.get("format")

    if schema_format == "uuid":
        return fake.uuid4()
    if "date" in (schema_type, schema_format):
        return fake.date(pattern=settings.date_format)
    if schema_type in ("datetime", "date-time") or schema_format in ("datetime", "date-time"):
        return fake.date_time().strftime(settings.datetime_format)

    if schema_type == "string":
        return fake.sentence()
    if schema_type in ("integer", "number"):
        return fake.random_int(min=0, max=10000)
    if schema_type == "boolean":
        return fake.pybool()
    return None


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema's type, picking the first non-null entry of a 3.1 type list."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        return non_null[0] if non_null else None
    return schema_type

"""Compile an OpenAPI document into WireMock mapping entries.

:func:`build` walks every ``path x method x status code`` triple in the
document and produces one :class:`~specmock.models.MappingEntry` per triple,
plus a :class:`~specmock.models.BodyFile` for every response that has a
body.  Per triple it:

* interpolates the path template (:mod:`~specmock.generator.interpolator`),
* resolves the response and its headers, falling back to
  ``GeneratorSettings.header_placeholder``,
* picks the body: the first of ``examples``, then a ``$ref`` ``example``,
  then ``example``/``schema`` via :func:`~specmock.generator.synthesizer.synthesize`,
* adds an ``equalTo`` matcher for every required header parameter,
* replaces those matchers with the error identifier header for error
  statuses, so error stubs are only hit on request.

Inline and ``$ref`` responses go through exactly the same code path.  Any
error aborts the whole document; no partial result is ever returned.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional
from urllib.parse import urlparse

from faker import Faker

from specmock.exceptions import SpecParseError
from specmock.generator.interpolator import example_text, interpolate, parameter_example
from specmock.generator.synthesizer import MISSING, make_faker, synthesize
from specmock.models import (
    BodyFile,
    GenerationResult,
    GeneratorSettings,
    HeaderMatcher,
    HTTPMethod,
    MappingEntry,
    ParameterUnresolved,
    RequestMatcher,
    ResponseDefinition,
)
from specmock.parser.resolver import extend_pointer, is_reference, resolve, resolve_node

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def build(
    document: dict[str, Any],
    spec_name: str = "spec",
    settings: Optional[GeneratorSettings] = None,
) -> GenerationResult:
    """Generate every mapping and body file for *document*.

    Args:
        document: The parsed OpenAPI document. It is never modified.
        spec_name: Name used for body file names
            (``<spec_name>-response-<status>.json``).
        settings: Generator settings; defaults are used when omitted.

    Returns:
        A :class:`~specmock.models.GenerationResult` holding mappings, body
        files and unresolved-parameter warnings.

    Raises:
        ReferenceNotFound: If any ``$ref`` does not resolve.
        ReferenceDepthExceeded: If a ``$ref`` chain is too long.
        SchemaDepthExceeded: If a schema nests too deeply to synthesize.
        SpecParseError: If a status key is not a status code or a node has
            the wrong shape, e.g. ``responses`` given as a list.

    Example::

        result = build(load_spec("petstore.yaml"), spec_name="petstore")
        for entry in result.mappings:
            print(entry.request.method, entry.request.url_pattern)
    """
    settings = settings or GeneratorSettings()
    fake = make_faker(settings)
    prefix = base_path(document)

    mappings: list[MappingEntry] = []
    files: list[BodyFile] = []
    warnings: list[ParameterUnresolved] = []
    used_names: dict[str, int] = {}

    paths = _mapping(document.get("paths"), "#/paths")
    for path_pattern, raw_item in paths.items():
        item_location = extend_pointer("#/paths", path_pattern)
        if not isinstance(path_pattern, str):
            raise SpecParseError(f"Path key at {item_location} must be a string")
        path_item = _mapping(
            resolve_node(raw_item, document, max_depth=settings.max_reference_depth),
            _target(raw_item, item_location),
        )
        shared_params = _sequence(
            path_item.get("parameters"), extend_pointer(item_location, "parameters")
        )

        for method, operation in path_item.items():
            if str(method).lower() not in _HTTP_METHODS:
                continue
            op_location = extend_pointer(item_location, method)
            operation = _mapping(operation, op_location)

            parameters = merge_parameters(
                shared_params,
                _sequence(operation.get("parameters"), extend_pointer(op_location, "parameters")),
                document,
                settings,
            )
            url = prefix + interpolate(path_pattern, parameters, document, settings, warnings)
            header_matchers = required_header_matchers(parameters, document, settings)

            responses_location = extend_pointer(op_location, "responses")
            responses = _mapping(operation.get("responses"), responses_location)
            for status_key, raw_response in responses.items():
                status_text = str(status_key)
                status = status_code(status_text, settings)
                response_location = _target(
                    raw_response, extend_pointer(responses_location, status_text)
                )
                response = _mapping(
                    resolve_node(raw_response, document, max_depth=settings.max_reference_depth),
                    response_location,
                )

                headers = response_headers(response, document, settings, response_location)
                body = response_body(response, document, settings, fake, response_location)

                if status >= settings.error_status_threshold:
                    request_headers = {
                        settings.error_identifier_header: HeaderMatcher(equal_to=status_text)
                    }
                else:
                    request_headers = dict(header_matchers)

                if body is not None:
                    file_name = _body_file_name(spec_name, status_text, used_names)
                    files.append(BodyFile.from_value(file_name, body))
                    definition = ResponseDefinition(
                        status=status,
                        headers={"Content-Type": settings.media_type, **headers},
                        body_file_name=file_name,
                    )
                else:
                    definition = ResponseDefinition(status=status, headers=headers or None)

                entry = MappingEntry(
                    id=str(uuid.uuid4()),
                    request=RequestMatcher(
                        method=method.upper(),
                        url_pattern=url,
                        headers=request_headers,
                    ),
                    response=definition,
                )
                logger.debug("Mapped %s %s -> %s", entry.request.method, url, status)
                mappings.append(entry)

    return GenerationResult(
        spec_name=spec_name, mappings=mappings, files=files, warnings=warnings
    )


def build_mappings(
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
) -> list[MappingEntry]:
    """Return only the mapping entries for *document*."""
    return build(document, settings=settings).mappings


def base_path(document: dict[str, Any]) -> str:
    """Return the path of the first server URL without a trailing slash.

    ``https://api.example.com/v1/`` yields ``/v1``; a document without
    servers yields ``""``.

    Raises:
        SpecParseError: If ``servers`` is not a list or the URL is not a string.
    """
    servers = _sequence(document.get("servers"), "#/servers")
    if not servers:
        return ""
    first = _mapping(servers[0], "#/servers/0")
    url = first.get("url") or ""
    if not isinstance(url, str):
        raise SpecParseError(f"Expected a string at #/servers/0/url, got {type(url).__name__}")
    return urlparse(url).path.rstrip("/")


def status_code(key: str, settings: Optional[GeneratorSettings] = None) -> int:
    """Convert a response key (``"200"``, ``"4XX"``, ``"default"``) to a status.

    Raises:
        SpecParseError: If *key* is none of these forms.
    """
    settings = settings or GeneratorSettings()
    text = str(key).strip()
    if text.lower() == "default":
        return settings.default_status
    if len(text) == 3 and text[0] in "12345" and text[1:].upper() == "XX":
        return int(text[0]) * 100
    try:
        return int(text)
    except ValueError:
        raise SpecParseError(f"Invalid response status code '{key}'") from None


def merge_parameters(
    path_params: list[Any],
    operation_params: list[Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
) -> list[dict[str, Any]]:
    """Resolve and merge path-item and operation parameters.

    Operation parameters override path-item parameters with the same
    ``name`` and ``in``.
    """
    settings = settings or GeneratorSettings()
    merged: dict[tuple[Any, Any], dict[str, Any]] = {}
    for raw in [*path_params, *operation_params]:
        param = resolve_node(raw, document, max_depth=settings.max_reference_depth)
        if isinstance(param, dict):
            merged[(param.get("name"), param.get("in"))] = param
    return list(merged.values())


def required_header_matchers(
    parameters: list[Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
) -> dict[str, HeaderMatcher]:
    """Build ``equalTo`` matchers for every required header parameter.

    Raises:
        SpecParseError: If a required header parameter has no string ``name``.
    """
    settings = settings or GeneratorSettings()
    matchers: dict[str, HeaderMatcher] = {}
    for raw in parameters:
        param = resolve_node(raw, document, max_depth=settings.max_reference_depth)
        if not isinstance(param, dict):
            continue
        if param.get("in") == "header" and param.get("required"):
            name = param.get("name")
            if not isinstance(name, str) or not name:
                raise SpecParseError(f"Required header parameter without a name: {param}")
            value = _text_or_placeholder(parameter_example(param, document, settings), settings)
            matchers[name] = HeaderMatcher(equal_to=value)
    return matchers


def response_headers(
    response: dict[str, Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
    location: str = "#",
) -> dict[str, str]:
    """Resolve the response's headers to concrete values.

    *location* is the response's JSON pointer, used in error messages.
    """
    settings = settings or GeneratorSettings()
    headers: dict[str, str] = {}
    declared = _mapping(response.get("headers"), extend_pointer(location, "headers"))
    for name, header in declared.items():
        header = resolve_node(header, document, max_depth=settings.max_reference_depth)
        example = parameter_example(header, document, settings) if isinstance(header, dict) else MISSING
        headers[str(name)] = _text_or_placeholder(example, settings)
    return headers


def response_body(
    response: dict[str, Any],
    document: dict[str, Any],
    settings: Optional[GeneratorSettings] = None,
    fake: Optional[Faker] = None,
    location: str = "#",
) -> Any:
    """Pick or synthesize the body of a resolved response.

    Returns ``None`` when the response declares no JSON content.  *location*
    is the response's JSON pointer; errors name the schema path below it.
    """
    settings = settings or GeneratorSettings()
    content_location = extend_pointer(location, "content")
    media_location = extend_pointer(content_location, settings.media_type)
    content = _mapping(response.get("content"), content_location).get(settings.media_type)
    if content is None:
        return None
    content = _mapping(content, media_location)

    examples = content.get("examples")
    if isinstance(examples, dict) and examples:
        first = resolve_node(
            next(iter(examples.values())), document, max_depth=settings.max_reference_depth
        )
        return first.get("value") if isinstance(first, dict) else None

    example = content.get("example", MISSING)
    if is_reference(example):
        pointer = example["$ref"]
        target = resolve(pointer, document, max_depth=settings.max_reference_depth)
        if isinstance(target, dict) and "value" in target:
            return target["value"]
        return synthesize(
            MISSING, target, document, settings=settings, fake=fake, location=str(pointer)
        )

    return synthesize(
        example,
        content.get("schema"),
        document,
        settings=settings,
        fake=fake,
        location=extend_pointer(media_location, "schema"),
    )


def _mapping(node: Any, location: str) -> dict[str, Any]:
    """Return *node* if it is a mapping, ``{}`` if it is absent."""
    if node is None:
        return {}
    if not isinstance(node, dict):
        raise SpecParseError(f"Expected an object at {location}, got {type(node).__name__}")
    return node


def _sequence(node: Any, location: str) -> list[Any]:
    """Return *node* if it is a list, ``[]`` if it is absent."""
    if node is None:
        return []
    if not isinstance(node, list):
        raise SpecParseError(f"Expected a list at {location}, got {type(node).__name__}")
    return node


def _target(node: Any, location: str) -> str:
    """Return the pointer a ``$ref`` node points at, else *location*."""
    return str(node["$ref"]) if is_reference(node) else location


def _text_or_placeholder(value: Any, settings: GeneratorSettings) -> str:
    if value is MISSING or value is None:
        return settings.header_placeholder
    return example_text(value)


def _body_file_name(spec_name: str, status_text: str, used: dict[str, int]) -> str:
    """Return ``<spec>-response-<status>.json``, suffixed ``-2``, ``-3`` on reuse."""
    stem = f"{spec_name}-response-{status_text}"
    count = used.get(stem, 0) + 1
    used[stem] = count
    if count == 1:
        return f"{stem}.json"
    return f"{stem}-{count}.json"

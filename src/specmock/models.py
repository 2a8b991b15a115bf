"""Canonical Pydantic models shared across all specmock modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`GeneratorSettings`, :class:`OutputConfig`, and
    :class:`GlobalConfig`.

**Generator output models** -- produced by the mapping builder and consumed by
the serializer and the CLI:
    :class:`HeaderMatcher`, :class:`RequestMatcher`,
    :class:`ResponseDefinition`, :class:`MappingEntry`, :class:`BodyFile`,
    :class:`ParameterUnresolved`, and :class:`GenerationResult`.

Output models use WireMock's camelCase field names as aliases so that
``model_dump(by_alias=True)`` yields JSON a WireMock server can load directly.
Mapping entries are frozen once built.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class GeneratorSettings(BaseModel):
    """Constants and bounds used while compiling a spec into mappings.

    Every fallback value the generator emits lives here rather than as a
    literal in the generator modules, so a deployment can override them in
    ``config.json`` or the project-local ``specmock.json``.

    Example::

        GeneratorSettings(seed=42, array_cardinality=3)
    """

    header_placeholder: str = Field(
        default="example-header-value",
        description="Value used for headers that declare no example",
    )
    parameter_placeholder_prefix: str = Field(
        default="example-",
        description="Prefix for required path parameters without an example",
    )
    error_identifier_header: str = Field(
        default="X-Error-Identifier",
        description="Request header that selects error responses",
    )
    error_status_threshold: int = Field(
        default=400, description="Status codes at or above this are error responses"
    )
    default_status: int = Field(
        default=500, description="Status used for the 'default' response key"
    )
    max_reference_depth: int = Field(
        default=10, ge=1, description="Maximum $ref hops in a single chain"
    )
    max_schema_depth: int = Field(
        default=100, ge=1, description="Maximum nesting while synthesizing a value"
    )
    array_cardinality: int = Field(
        default=1, ge=0, description="Number of elements synthesized for arrays"
    )
    media_type: str = Field(
        default="application/json", description="Response media type to read"
    )
    locale: str = Field(default="en_US", description="Faker locale for random values")
    seed: Optional[int] = Field(
        default=None, description="Seed for reproducible random values"
    )
    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%dT%H:%M:%SZ"


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`.

    Used by the root command when neither ``--json`` nor ``--plain`` is given.
    """

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specmock/config.json``.

    Loaded and saved by :func:`~specmock.config.load_global_config` and
    :func:`~specmock.config.save_global_config`. See
    :func:`~specmock.config.resolve_config` for the full precedence chain.
    """

    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Generator Output ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class HeaderMatcher(BaseModel):
    """WireMock equality constraint on a single request header."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    equal_to: str = Field(alias="equalTo")


class RequestMatcher(BaseModel):
    """The request side of a mapping: method, URL pattern and header constraints."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str
    url_pattern: str = Field(alias="urlPattern")
    headers: dict[str, HeaderMatcher] = Field(default_factory=dict)


class ResponseDefinition(BaseModel):
    """The canned response of a mapping.

    ``body_file_name`` points at a file in WireMock's ``__files`` directory;
    it is ``None`` when the response has no body.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: int
    headers: Optional[dict[str, str]] = None
    body_file_name: Optional[str] = Field(default=None, alias="bodyFileName")


class MappingEntry(BaseModel):
    """One WireMock stub: a request matcher paired with a response definition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    request: RequestMatcher
    response: ResponseDefinition

    def to_wiremock(self) -> dict[str, Any]:
        """Return the mapping as a WireMock JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BodyFile(BaseModel):
    """A response body destined for WireMock's ``__files`` directory."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content: bytes

    @classmethod
    def from_value(cls, file_name: str, value: Any) -> "BodyFile":
        """Serialise *value* as indented UTF-8 JSON."""
        text = json.dumps(value, indent=2, ensure_ascii=False)
        return cls(file_name=file_name, content=text.encode("utf-8"))


class ParameterUnresolved(BaseModel):
    """Warning record: a path placeholder had no matching parameter.

    Generation continues and the placeholder is kept verbatim in the URL.
    """

    path: str
    name: str

    def __str__(self) -> str:
        return f"Parameter '{self.name}' not found for path '{self.path}'"


class GenerationResult(BaseModel):
    """Everything produced for one spec document."""

    spec_name: str
    mappings: list[MappingEntry] = Field(default_factory=list)
    files: list[BodyFile] = Field(default_factory=list)
    warnings: list[ParameterUnresolved] = Field(default_factory=list)

    def to_wiremock(self) -> dict[str, Any]:
        """Return the ``{"mappings": [...]}`` document WireMock loads."""
        return {"mappings": [m.to_wiremock() for m in self.mappings]}

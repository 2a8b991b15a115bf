"""Tests for specmock.generator.builder.

Most tests compile the petstore fixture, which covers inline and ``$ref``
responses, header parameters, path-level parameters and every body source.
"""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from specmock.exceptions import (
    ReferenceDepthExceeded,
    ReferenceNotFound,
    SchemaDepthExceeded,
    SpecParseError,
)
from specmock.generator.builder import (
    base_path,
    build,
    build_mappings,
    merge_parameters,
    status_code,
)
from specmock.models import GenerationResult, GeneratorSettings, MappingEntry


def _find(result: GenerationResult, method: str, url: str, status: int) -> MappingEntry:
    for entry in result.mappings:
        if (
            entry.request.method == method
            and entry.request.url_pattern == url
            and entry.response.status == status
        ):
            return entry
    raise AssertionError(f"No mapping for {method} {url} {status}")


def _body(result: GenerationResult, file_name: str) -> Any:
    for body in result.files:
        if body.file_name == file_name:
            return json.loads(body.content)
    raise AssertionError(f"No body file {file_name}")


def _minimal(responses: dict[str, Any], **extra: Any) -> dict[str, Any]:
    doc = {
        "openapi": "3.0.3",
        "info": {"title": "t", "version": "1"},
        "paths": {"/things": {"get": {"responses": responses}}},
    }
    doc.update(extra)
    return doc


@pytest.fixture
def petstore_result(petstore_raw: dict[str, Any]) -> GenerationResult:
    return build(petstore_raw, spec_name="petstore", settings=GeneratorSettings(seed=7))


# ---------------------------------------------------------------------------
# Whole-document output
# ---------------------------------------------------------------------------


class TestBuildPetstore:
    """Test the mapping set produced for the petstore fixture."""

    def test_one_mapping_per_path_method_status(self, petstore_result: GenerationResult) -> None:
        assert len(petstore_result.mappings) == 8

    def test_body_file_names_are_unique(self, petstore_result: GenerationResult) -> None:
        names = [f.file_name for f in petstore_result.files]
        assert names == [
            "petstore-response-200.json",
            "petstore-response-400.json",
            "petstore-response-201.json",
            "petstore-response-200-2.json",
            "petstore-response-404.json",
            "petstore-response-200-3.json",
        ]

    def test_every_body_file_is_referenced(self, petstore_result: GenerationResult) -> None:
        referenced = {
            m.response.body_file_name
            for m in petstore_result.mappings
            if m.response.body_file_name
        }
        assert referenced == {f.file_name for f in petstore_result.files}

    def test_ids_are_unique(self, petstore_result: GenerationResult) -> None:
        ids = [m.id for m in petstore_result.mappings]
        assert len(set(ids)) == len(ids)

    def test_methods_are_upper_case(self, petstore_result: GenerationResult) -> None:
        assert {m.request.method for m in petstore_result.mappings} == {"GET", "POST", "DELETE"}

    def test_url_patterns(self, petstore_result: GenerationResult) -> None:
        urls = {m.request.url_pattern for m in petstore_result.mappings}
        assert urls == {
            "/v1/pets",
            "/v1/pets/example-petId",
            "/v1/owners/7/pets/{petId}",
        }

    def test_no_warnings(self, petstore_result: GenerationResult) -> None:
        assert petstore_result.warnings == []

    def test_document_is_not_mutated(self, petstore_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(petstore_raw)
        build(petstore_raw, spec_name="petstore")
        assert petstore_raw == before

    def test_to_wiremock(self, petstore_result: GenerationResult) -> None:
        data = petstore_result.to_wiremock()
        assert list(data) == ["mappings"]
        first = data["mappings"][0]
        assert first["request"]["urlPattern"] == "/v1/pets"
        assert first["response"]["bodyFileName"] == "petstore-response-200.json"

    def test_build_mappings_returns_entries_only(self, petstore_raw: dict[str, Any]) -> None:
        mappings = build_mappings(petstore_raw)
        assert len(mappings) == 8
        assert all(isinstance(m, MappingEntry) for m in mappings)


# ---------------------------------------------------------------------------
# Request matching
# ---------------------------------------------------------------------------


class TestRequestHeaders:
    """Test request header matchers."""

    def test_required_header_parameter_gets_placeholder(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "GET", "/v1/pets", 200)
        headers = entry.to_wiremock()["request"]["headers"]
        assert headers == {"X-Request-Id": {"equalTo": "example-header-value"}}

    def test_required_header_parameter_uses_example(self, inventory_raw: dict[str, Any]) -> None:
        result = build(inventory_raw, spec_name="inventory")
        entry = result.mappings[0]
        assert entry.to_wiremock()["request"]["headers"] == {"X-Tenant": {"equalTo": "acme"}}

    def test_error_status_replaces_header_matchers(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "GET", "/v1/pets", 400)
        assert entry.to_wiremock()["request"]["headers"] == {
            "X-Error-Identifier": {"equalTo": "400"}
        }

    def test_not_found_is_selected_by_identifier(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "GET", "/v1/pets/example-petId", 404)
        assert entry.request.headers["X-Error-Identifier"].equal_to == "404"

    def test_success_without_header_params_has_no_matchers(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "DELETE", "/v1/pets/example-petId", 204)
        assert entry.request.headers == {}

    def test_custom_error_header(self, petstore_raw: dict[str, Any]) -> None:
        settings = GeneratorSettings(error_identifier_header="X-Mock-Error")
        result = build(petstore_raw, spec_name="petstore", settings=settings)
        entry = _find(result, "POST", "/v1/pets", 500)
        assert entry.to_wiremock()["request"]["headers"] == {"X-Mock-Error": {"equalTo": "500"}}


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestResponses:
    """Test response headers and bodies."""

    def test_response_headers(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "GET", "/v1/pets", 200)
        assert entry.response.headers == {
            "Content-Type": "application/json",
            "X-Rate-Limit": "100",
            "X-Trace": "example-header-value",
        }

    def test_no_body_means_no_file_and_no_headers(self, petstore_result: GenerationResult) -> None:
        entry = _find(petstore_result, "POST", "/v1/pets", 500)
        assert entry.response.body_file_name is None
        assert "headers" not in entry.to_wiremock()["response"]
        assert "bodyFileName" not in entry.to_wiremock()["response"]

    def test_schema_body_is_synthesized(self, petstore_result: GenerationResult) -> None:
        body = _body(petstore_result, "petstore-response-200.json")
        assert isinstance(body, list)
        assert len(body) == 1
        pet = body[0]
        assert set(pet) == {"id", "name", "tag", "born", "chip", "vaccinated"}
        assert pet["id"] == 10
        assert pet["tag"] in ("dog", "cat")
        assert isinstance(pet["vaccinated"], bool)

    def test_referenced_response_schema(self, petstore_result: GenerationResult) -> None:
        body = _body(petstore_result, "petstore-response-400.json")
        assert set(body) == {"code", "message"}

    def test_literal_example(self, petstore_result: GenerationResult) -> None:
        assert _body(petstore_result, "petstore-response-201.json") == {"id": 1, "name": "Rex"}

    def test_first_of_examples(self, petstore_result: GenerationResult) -> None:
        assert _body(petstore_result, "petstore-response-200-2.json") == {"id": 1, "name": "Fido"}

    def test_referenced_example(self, petstore_result: GenerationResult) -> None:
        assert _body(petstore_result, "petstore-response-404.json") == {
            "code": 404,
            "message": "Pet not found",
        }

    def test_example_ref_to_schema_is_synthesized(self) -> None:
        doc = _minimal(
            {"200": {"content": {"application/json": {"example": {"$ref": "#/components/schemas/Flag"}}}}},
            components={"schemas": {"Flag": {"type": "object", "properties": {"on": {"type": "boolean"}}}}},
        )
        result = build(doc, spec_name="t")
        assert set(_body(result, "t-response-200.json")) == {"on"}

    def test_falsy_example_is_still_written(self) -> None:
        doc = _minimal({"200": {"content": {"application/json": {"example": 0}}}})
        result = build(doc, spec_name="t")
        assert _body(result, "t-response-200.json") == 0

    def test_body_file_is_indented_utf8_json(self) -> None:
        doc = _minimal({"200": {"content": {"application/json": {"example": {"name": "Zoë"}}}}})
        result = build(doc, spec_name="t")
        assert result.files[0].content == '{\n  "name": "Zoë"\n}'.encode("utf-8")

    def test_other_media_types_have_no_body(self) -> None:
        doc = _minimal({"200": {"content": {"text/plain": {"example": "hi"}}}})
        result = build(doc, spec_name="t")
        assert result.files == []
        assert result.mappings[0].response.body_file_name is None


# ---------------------------------------------------------------------------
# Paths, parameters and status keys
# ---------------------------------------------------------------------------


class TestPathsAndParameters:
    def test_base_path(self) -> None:
        assert base_path({"servers": [{"url": "https://api.example.com/v1/"}]}) == "/v1"
        assert base_path({"servers": [{"url": "https://api.example.com"}]}) == ""
        assert base_path({"servers": [{"url": "/api/"}]}) == "/api"
        assert base_path({}) == ""

    def test_only_first_server_counts(self) -> None:
        doc = {"servers": [{"url": "https://a.example.com/one"}, {"url": "https://b.example.com/two"}]}
        assert base_path(doc) == "/one"

    def test_non_method_keys_are_skipped(self) -> None:
        doc = _minimal({"200": {"description": "ok"}})
        doc["paths"]["/things"]["summary"] = "Things"
        doc["paths"]["/things"]["x-internal"] = {"responses": {"200": {}}}
        result = build(doc)
        assert len(result.mappings) == 1

    def test_operation_parameter_overrides_path_level(self) -> None:
        merged = merge_parameters(
            [{"name": "id", "in": "path", "required": True}],
            [{"name": "id", "in": "path", "required": True, "example": 3}],
            {},
        )
        assert merged == [{"name": "id", "in": "path", "required": True, "example": 3}]

    def test_unresolved_placeholder_is_reported(self) -> None:
        doc = {"openapi": "3.0.3", "paths": {"/things/{thingId}": {"get": {"responses": {"200": {}}}}}}
        result = build(doc)
        assert result.mappings[0].request.url_pattern == "/things/{thingId}"
        assert [w.name for w in result.warnings] == ["thingId"]

    def test_empty_paths(self) -> None:
        result = build({"openapi": "3.0.3", "paths": {}})
        assert result.mappings == []
        assert result.files == []


class TestStatusCodes:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [("200", 200), ("404", 404), ("default", 500), ("4XX", 400), ("5xx", 500)],
    )
    def test_status_code(self, key: str, expected: int) -> None:
        assert status_code(key) == expected

    def test_custom_default_status(self) -> None:
        assert status_code("default", GeneratorSettings(default_status=418)) == 418

    def test_invalid_status_raises(self) -> None:
        with pytest.raises(SpecParseError, match="teapot"):
            status_code("teapot")

    def test_default_response_is_an_error_stub(self) -> None:
        doc = _minimal({"default": {"content": {"application/json": {"example": {"error": True}}}}})
        result = build(doc, spec_name="t")
        entry = result.mappings[0]
        assert entry.response.status == 500
        assert entry.request.headers["X-Error-Identifier"].equal_to == "default"
        assert entry.response.body_file_name == "t-response-default.json"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestBuildFailures:
    """Any error aborts the document."""

    def test_chain_of_ten_refs_succeeds(self, ref_chain) -> None:
        result = build(ref_chain(10), spec_name="chain")
        assert isinstance(_body(result, "chain-response-200.json"), str)

    def test_chain_of_eleven_refs_raises(self, ref_chain) -> None:
        with pytest.raises(ReferenceDepthExceeded):
            build(ref_chain(11), spec_name="chain")

    def test_missing_response_ref_raises(self) -> None:
        doc = _minimal({"200": {"$ref": "#/components/responses/Ghost"}})
        with pytest.raises(ReferenceNotFound, match="Ghost"):
            build(doc)

    def test_missing_parameter_ref_raises(self) -> None:
        doc = _minimal({"200": {"description": "ok"}})
        doc["paths"]["/things"]["get"]["parameters"] = [{"$ref": "#/components/parameters/Nope"}]
        with pytest.raises(ReferenceNotFound):
            build(doc)

    def test_self_referencing_schema_names_its_location(self) -> None:
        doc = _minimal(
            {"200": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Node"}}}}},
            components={
                "schemas": {
                    "Node": {"type": "object", "properties": {"child": {"$ref": "#/components/schemas/Node"}}}
                }
            },
        )
        with pytest.raises(SchemaDepthExceeded) as exc_info:
            build(doc, settings=GeneratorSettings(max_schema_depth=5))
        assert exc_info.value.location.startswith("#/components/schemas/Node")


class TestMalformedDocuments:
    """Wrongly shaped nodes are parse errors that name where they are."""

    def test_responses_as_list(self) -> None:
        doc = _minimal(["200"])  # type: ignore[arg-type]
        with pytest.raises(SpecParseError, match=r"#/paths/~1things/get/responses"):
            build(doc)

    def test_paths_as_list(self) -> None:
        with pytest.raises(SpecParseError, match="#/paths"):
            build({"openapi": "3.0.3", "paths": ["/things"]})

    def test_operation_as_string(self) -> None:
        doc = {"openapi": "3.0.3", "paths": {"/things": {"get": "nope"}}}
        with pytest.raises(SpecParseError, match=r"#/paths/~1things/get"):
            build(doc)

    def test_parameters_as_mapping(self) -> None:
        doc = _minimal({"200": {"description": "ok"}})
        doc["paths"]["/things"]["get"]["parameters"] = {"name": "id"}
        with pytest.raises(SpecParseError, match="parameters"):
            build(doc)

    def test_response_as_string(self) -> None:
        doc = _minimal({"200": "ok"})
        with pytest.raises(SpecParseError, match=r"responses/200"):
            build(doc)

    def test_properties_as_string(self) -> None:
        schema = {"type": "object", "properties": "name"}
        doc = _minimal({"200": {"content": {"application/json": {"schema": schema}}}})
        with pytest.raises(SpecParseError, match=r"application~1json/schema/properties"):
            build(doc)

    def test_servers_as_mapping(self) -> None:
        with pytest.raises(SpecParseError, match="#/servers"):
            base_path({"servers": {"url": "https://api.example.com"}})

    def test_null_nodes_are_treated_as_empty(self) -> None:
        doc = _minimal({"200": {"description": "ok", "headers": None, "content": None}})
        doc["paths"]["/things"]["get"]["parameters"] = None
        result = build(doc)
        assert len(result.mappings) == 1
        assert result.files == []


class TestExampleText:
    def test_boolean_header_example_is_json_text(self) -> None:
        doc = _minimal(
            {"200": {"description": "ok", "headers": {"X-Cached": {"schema": {"type": "boolean", "example": True}}}}}
        )
        result = build(doc)
        assert result.mappings[0].response.headers == {"X-Cached": "true"}

    def test_null_header_parameter_example_uses_placeholder(self) -> None:
        doc = _minimal({"200": {"description": "ok"}})
        doc["paths"]["/things"]["get"]["parameters"] = [
            {"name": "X-Tenant", "in": "header", "required": True, "example": None}
        ]
        result = build(doc)
        assert result.mappings[0].request.headers["X-Tenant"].equal_to == "example-header-value"

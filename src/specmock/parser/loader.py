"""Read OpenAPI documents from disk, a URL or stdin.

:func:`load_spec` returns the document as a plain ``dict``; nothing is
resolved or normalised here, so the mapping builder sees exactly what the
author wrote.  Only JSON and YAML are accepted.  A local file must carry a
``.json``, ``.yaml`` or ``.yml`` extension; content from a URL or stdin is
tried as JSON first and YAML second.

:func:`validate_openapi_version` is the only structural check.  It rejects
Swagger 2.0 and anything that is not OpenAPI 3.x, because responses and
schemas live in different places in those documents.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specmock.exceptions import SpecParseError, UnsupportedFormat

SPEC_SUFFIXES = (".json", ".yaml", ".yml")

_URL_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        source: A file path, an ``http://``/``https://`` URL, or ``-`` for
            stdin.

    Returns:
        The parsed document.

    Raises:
        UnsupportedFormat: If a local file has an extension other than
            ``.json``, ``.yaml`` or ``.yml``.
        SpecParseError: If the source cannot be read, is empty, or does not
            parse to a JSON/YAML object.

    Example::

        spec = load_spec("specs/petstore.yaml")
        spec = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    """
    if source == "-":
        content, fmt = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        content, fmt = _fetch(source)
    else:
        content, fmt = _read_file(Path(source))

    if not content.strip():
        raise SpecParseError(f"Spec source is empty: {source}")
    return _parse_content(content, hint=fmt)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except (OSError, ValueError) as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _fetch(url: str) -> tuple[str, str]:
    """GET *url* and return its body plus a format hint from Content-Type."""
    try:
        response = httpx.get(url, timeout=_URL_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        fmt = "json"
    elif "yaml" in content_type or "yml" in content_type:
        fmt = "yaml"
    else:
        fmt = ""
    return response.text, fmt


def _read_file(path: Path) -> tuple[str, str]:
    """Read a local spec file and return its text plus a format hint."""
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SPEC_SUFFIXES:
        raise UnsupportedFormat(
            f"Unsupported file format '{suffix or path.name}': "
            "only JSON and YAML are supported"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    return text, "json" if suffix == ".json" else "yaml"


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON and then YAML.

    A ``json`` hint makes a JSON syntax error final; a ``yaml`` hint skips
    the JSON attempt.

    Raises:
        SpecParseError: If neither parser produces a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError(
        "Failed to parse spec as JSON or YAML" + "".join(f"\n  {e}" for e in errors)
    )


def _require_mapping(document: Any) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    kind = "empty document" if document is None else type(document).__name__
    raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version if it is 3.x.

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or any
            other major version.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version = str(version)
    if not version.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version}. "
            "Only OpenAPI 3.x documents are supported."
        )
    return version

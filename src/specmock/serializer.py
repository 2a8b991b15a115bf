"""Persist and reload WireMock mapping files.

WireMock reads stub definitions from a ``mappings`` directory and response
bodies from a sibling ``__files`` directory.  :func:`write_result` lays a
:class:`~specmock.models.GenerationResult` out that way::

    <mappings_dir>/WireMockStub-<spec>.json   {"mappings": [...]}
    <mappings_dir>/../__files/<spec>-response-<status>.json

Every file goes through :func:`~specmock.config.atomic_write`, so a failure
part-way through never leaves a truncated file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specmock.config import atomic_write
from specmock.exceptions import SpecParseError
from specmock.models import GenerationResult, MappingEntry

logger = logging.getLogger(__name__)

FILES_DIRNAME = "__files"


def mapping_file_name(spec_name: str) -> str:
    """Return the mapping file name used for *spec_name*."""
    return f"WireMockStub-{spec_name}.json"


def dump_mappings(mappings: list[MappingEntry]) -> str:
    """Serialise *mappings* as the ``{"mappings": [...]}`` document."""
    document = {"mappings": [m.to_wiremock() for m in mappings]}
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def parse_mappings(text: str) -> list[MappingEntry]:
    """Parse a ``{"mappings": [...]}`` document back into entries.

    Raises:
        SpecParseError: If the text is not a valid mapping document.
    """
    try:
        data: Any = json.loads(text)
        return [MappingEntry.model_validate(m) for m in data["mappings"]]
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
        raise SpecParseError(f"Invalid mapping document: {exc}") from exc


def load_mappings(path: Path) -> list[MappingEntry]:
    """Read a mapping file written by :func:`write_result`."""
    return parse_mappings(Path(path).read_text(encoding="utf-8"))


def write_result(
    result: GenerationResult,
    mappings_dir: Path,
    files_dir: Optional[Path] = None,
) -> list[Path]:
    """Write the mapping file and every body file of *result*.

    Args:
        result: The generated mappings and body files.
        mappings_dir: Directory receiving ``WireMockStub-<spec>.json``.
        files_dir: Directory receiving body files. Defaults to
            ``<mappings_dir>/../__files``.

    Returns:
        The paths written, body files first and the mapping file last.
    """
    mappings_dir = Path(mappings_dir)
    if files_dir is None:
        files_dir = mappings_dir.parent / FILES_DIRNAME

    written: list[Path] = []
    for body in result.files:
        body_path = Path(files_dir) / body.file_name
        atomic_write(body_path, body.content)
        logger.debug("Mock response written to %s", body_path)
        written.append(body_path)

    mapping_path = mappings_dir / mapping_file_name(result.spec_name)
    atomic_write(mapping_path, dump_mappings(result.mappings))
    logger.debug("WireMock stubs written to %s", mapping_path)
    written.append(mapping_path)
    return written

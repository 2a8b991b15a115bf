"""Generate stubs for one spec file or a whole directory of them.

A broken document must never take a batch down with it:
:func:`generate_from_directory` catches :class:`~specmock.exceptions.SpecmockError`
and :class:`OSError` per file, logs which file failed and why, records it in the
:class:`BatchReport`, and moves on.  Within one document any error aborts
that document before anything is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from specmock.exceptions import SpecmockError
from specmock.generator.builder import build
from specmock.models import GenerationResult, GeneratorSettings
from specmock.parser.loader import SPEC_SUFFIXES, load_spec, validate_openapi_version
from specmock.serializer import FILES_DIRNAME, write_result

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """What happened to one spec file in a batch."""

    source: Path
    result: Optional[GenerationResult] = None
    written: list[Path] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Per-file outcomes of :func:`generate_from_directory`."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]


def find_spec_files(input_dir: Path) -> list[Path]:
    """Return the ``.json``/``.yaml``/``.yml`` files directly inside *input_dir*, sorted."""
    return sorted(
        p for p in Path(input_dir).iterdir()
        if p.is_file() and p.suffix.lower() in SPEC_SUFFIXES
    )


def generate_from_source(
    source: str,
    spec_name: str,
    settings: Optional[GeneratorSettings] = None,
) -> GenerationResult:
    """Load, validate and compile one spec without writing anything."""
    document = load_spec(source)
    validate_openapi_version(document)
    return build(document, spec_name=spec_name, settings=settings)


def generate_from_file(
    path: Path,
    mappings_dir: Path,
    files_dir: Optional[Path] = None,
    settings: Optional[GeneratorSettings] = None,
    spec_name: Optional[str] = None,
) -> FileOutcome:
    """Compile *path* and write its stubs.

    The spec name defaults to the file stem.  Errors propagate to the
    caller; nothing is written when generation fails.
    """
    path = Path(path)
    name = spec_name or path.stem
    logger.info("Processing file: %s", path)
    result = generate_from_source(str(path), name, settings)
    written = write_result(result, mappings_dir, files_dir)
    return FileOutcome(source=path, result=result, written=written)


def generate_from_directory(
    input_dir: Path,
    output_dir: Path,
    settings: Optional[GeneratorSettings] = None,
    files_dir: Optional[Path] = None,
) -> BatchReport:
    """Compile every spec file in *input_dir* into *output_dir*.

    Body files go to *files_dir*, defaulting to ``<output_dir>/../__files``.
    A failing document is logged and reported; the remaining documents are
    still processed.
    """
    output_dir = Path(output_dir)
    if files_dir is None:
        files_dir = output_dir.parent / FILES_DIRNAME

    report = BatchReport()
    spec_files = find_spec_files(input_dir)
    if not spec_files:
        logger.warning("No OpenAPI spec files found in %s", input_dir)
        return report

    for path in spec_files:
        try:
            outcome = generate_from_file(path, output_dir, files_dir, settings)
        except (SpecmockError, OSError) as exc:
            logger.error("Error processing file %s: %s", path, exc)
            outcome = FileOutcome(source=path, error=exc)
        report.outcomes.append(outcome)

    return report

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from codefence.config import SURROGATE_ENCODING, SURROGATE_ERRORS, ContentType, FileRecord
from codefence.document import parse_document
from codefence.exceptions import (
    DirectoryCreationError,
    UnreadableInputError,
    WriteError,
)
from codefence.export import ensure_directory
from codefence.logging import logger
from codefence.paths import is_excluded

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from codefence.paths import ExclusionRule


class FailedBlock(NamedTuple):
    """A block that could not be written, with the error that stopped it."""

    path: str
    error: DirectoryCreationError | WriteError


@dataclass
class ExtractionResult:
    """Outcome of an import run.

    Attributes:
        found: Number of well-formed blocks in the document.
        written: Relative paths written, in document order.
        skipped: Relative paths left out by exclusion rules.
        failed: Blocks whose directory or file could not be written.
    """

    found: int = 0
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[FailedBlock] = field(default_factory=list)

    @property
    def nothing_to_do(self) -> bool:
        return self.found == 0


def read_document(path: Path) -> str:
    """Read a document as text, keeping line endings and undecodable bytes intact.

    Args:
        path (Path): the document to read

    Raises:
        UnreadableInputError: if the path is missing, not a file or cannot be read

    Returns:
        str: the document text
    """
    if not path.is_file():
        raise UnreadableInputError(path=path, reason="not found")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise UnreadableInputError(path=path, reason=e.strerror or str(e)) from e
    return data.decode(SURROGATE_ENCODING, errors=SURROGATE_ERRORS)


def target_path(base: Path, rel: str) -> Path:
    """Map a block path onto the filesystem under `base`.

    Raises:
        WriteError: if the path escapes `base` (`..` segments, symlinks)

    Returns:
        Path: the resolved target
    """
    root = base.resolve()
    full = (root / rel).resolve()
    if not full.is_relative_to(root):
        raise WriteError(path=root / rel, reason="outside the target directory")
    return full


def write_record(base: Path, rec: FileRecord) -> Path:
    """Write one record under `base`, creating parent directories as needed.

    Existing files are replaced without any check.

    Args:
        base (Path): the extraction root
        rec (FileRecord): the file to write

    Raises:
        DirectoryCreationError: if the parent directory cannot be created
        WriteError: if the file lies outside `base` or cannot be written

    Returns:
        Path: the written file
    """
    full = target_path(base, rec.rel)
    try:
        full.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(directory=full.parent, reason=e.strerror or str(e)) from e
    try:
        full.write_bytes(rec.content)
    except OSError as e:
        raise WriteError(path=full, reason=e.strerror or str(e)) from e
    return full


def extract_records(
    recs: Sequence[FileRecord],
    base: Path,
    *,
    rules: Sequence[ExclusionRule] = (),
) -> ExtractionResult:
    """Write parsed records under `base`, isolating per-file failures.

    Args:
        recs (Sequence[FileRecord]): the records, in document order
        base (Path): the extraction root (must exist)
        rules (Sequence[ExclusionRule]): paths to leave untouched

    Returns:
        ExtractionResult: what was written, skipped and failed
    """
    result = ExtractionResult(found=len(recs))
    for rec in recs:
        if is_excluded(rec.rel, rules):
            logger.info("skipped excluded file", path=rec.wire_path)
            result.skipped.append(rec.rel)
            continue
        try:
            write_record(base, rec)
        except (DirectoryCreationError, WriteError) as e:
            logger.error("extraction failed", path=rec.wire_path, error=e.message)  # noqa: TRY400
            result.failed.append(FailedBlock(path=rec.rel, error=e))
            continue
        logger.info("extracted", path=rec.wire_path)
        result.written.append(rec.rel)
    return result


def extract_document(
    text: str,
    base: Path,
    *,
    content_type: ContentType,
    rules: Sequence[ExclusionRule] = (),
) -> ExtractionResult:
    """Extract every block of a document into files under `base`.

    A document without any block is not an error: the result reports
    `nothing_to_do`.

    Args:
        text (str): the document
        base (Path): the extraction root
        content_type (ContentType): the fence language blocks must carry
        rules (Sequence[ExclusionRule]): paths to leave untouched

    Raises:
        InvalidPathError: if `base` is missing or not a directory

    Returns:
        ExtractionResult: what was written, skipped and failed
    """
    root = ensure_directory(base)
    recs = parse_document(text, content_type.language)
    if not recs:
        logger.warning("no code blocks found", language=content_type.language)
        return ExtractionResult()
    result = extract_records(recs, root, rules=rules)
    logger.info(
        "extraction complete",
        written=len(result.written),
        skipped=len(result.skipped),
        failed=len(result.failed),
    )
    return result

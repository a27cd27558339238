from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from codefence.config import (
    DEFAULT_EXCLUDED_TOP_DIRS,
    INCLUDABLE_TOP_DIRS,
    SURROGATE_ENCODING,
    SURROGATE_ERRORS,
    ContentType,
    FileRecord,
)
from codefence.document import render_document
from codefence.exceptions import DirectoryCreationError, InvalidPathError, UnreadableSourceError, WriteError
from codefence.logging import logger
from codefence.paths import top_level_dir

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator


class ExportResult(BaseModel):
    """Outcome of an export run."""

    model_config = ConfigDict(frozen=True)

    output: Path
    records: tuple[FileRecord, ...]

    @property
    def count(self) -> int:
        return len(self.records)


def resolve_excluded_top_dirs(
    include: Collection[str] = (),
    *,
    include_all: bool = False,
) -> frozenset[str]:
    """Compute the top-level directories to leave out of an export.

    Args:
        include (Collection[str]): default-excluded directories to put back
            (any of `INCLUDABLE_TOP_DIRS`)
        include_all (bool): put every default-excluded directory back

    Returns:
        frozenset[str]: the final exclusion set
    """
    if include_all:
        return frozenset()
    return DEFAULT_EXCLUDED_TOP_DIRS - (set(include) & set(INCLUDABLE_TOP_DIRS))


def ensure_directory(path: Path) -> Path:
    """Resolve `path` and check it is an existing directory.

    Raises:
        InvalidPathError: if `path` is missing or not a directory

    Returns:
        Path: the resolved directory
    """
    resolved = path.expanduser().resolve()
    if not resolved.is_dir():
        raise InvalidPathError(path=path)
    return resolved


def walk_sources(
    base: Path,
    content_type: ContentType,
    excluded_top_dirs: Collection[str],
) -> Iterator[FileRecord]:
    """Walk `base` and yield one record per file of the given content type.

    A file is left out when the first segment of its path relative to `base`
    is in `excluded_top_dirs`. Excluded top-level directories are pruned
    instead of walked. The traversal order is whatever `os.walk` produces.

    Args:
        base (Path): the directory to walk (must exist)
        content_type (ContentType): selects files by suffix
        excluded_top_dirs (Collection[str]): top-level names to leave out

    Raises:
        UnreadableSourceError: if a matching file cannot be read

    Yields:
        FileRecord: each matching file, with its content read as bytes
    """
    for root, dirs, files in os.walk(base):
        if Path(root) == base:
            dirs[:] = [d for d in dirs if d not in excluded_top_dirs]
        for f in files:
            p = Path(root) / f
            if p.suffix != content_type.extension or not p.is_file():
                continue
            rel = os.path.relpath(p, base)
            if top_level_dir(rel) in excluded_top_dirs:
                continue
            try:
                content = p.read_bytes()
            except OSError as e:
                raise UnreadableSourceError(path=p, reason=e.strerror or str(e)) from e
            yield FileRecord(rel=rel, content=content)


def export_tree(
    base: Path,
    output: Path,
    *,
    content_type: ContentType,
    excluded_top_dirs: Collection[str],
) -> ExportResult:
    """Serialize every matching file under `base` into one document at `output`.

    The output file is overwritten without confirmation.

    Args:
        base (Path): the directory to export
        output (Path): where to write the document
        content_type (ContentType): which files to embed and how to tag fences
        excluded_top_dirs (Collection[str]): top-level directories to leave out

    Raises:
        InvalidPathError: if `base` is missing or not a directory
        UnreadableSourceError: if a source file cannot be read
        DirectoryCreationError: if the output directory cannot be created
        WriteError: if the document cannot be written

    Returns:
        ExportResult: the written records and the output path
    """
    root = ensure_directory(base)
    recs: list[FileRecord] = []
    for rec in walk_sources(root, content_type, frozenset(excluded_top_dirs)):
        logger.info("exported", path=rec.wire_path, size=len(rec.content))
        recs.append(rec)

    document = render_document(recs, content_type.language)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(directory=output.parent, reason=e.strerror or str(e)) from e
    try:
        output.write_bytes(document.encode(SURROGATE_ENCODING, errors=SURROGATE_ERRORS))
    except OSError as e:
        raise WriteError(path=output, reason=e.strerror or str(e)) from e
    logger.info("export complete", output=str(output), files=len(recs))
    return ExportResult(output=output, records=tuple(recs))

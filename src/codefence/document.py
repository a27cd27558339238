"""Markdown document grammar shared by export and import.

A document is a sequence of blocks::

    ### `relative/path/to/file.php`

    ```php
    <raw file content>
    ```

The parser is a small line scanner rather than one regular expression so the
edge cases of the grammar stay visible:

- a header is ``###``, spaces or tabs, then a path between the first and the
  last backtick of the line;
- any number of whitespace-only lines may separate the header from the
  opening fence; any other line makes the header malformed and it is skipped;
- content runs from the line after the opening fence to the next three
  backticks, wherever they appear. Backticks inside content are not escaped,
  so an embedded fence ends the block early;
- one trailing newline of the captured content belongs to the document and is
  dropped.
"""

from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING, NamedTuple

from codefence.config import SURROGATE_ENCODING, SURROGATE_ERRORS, FileRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

FENCE = "```"

_HEADER = re.compile(r"^###[ \t]+`(?P<path>.+)`\s*$")


class Block(NamedTuple):
    """A raw block as found in the document, before newline trimming."""

    path: str
    raw: str
    start: int
    end: int


def render_block(rec: FileRecord, language: str) -> str:
    """Render one file record as a labeled, fenced block.

    Args:
        rec (FileRecord): the file to embed
        language (str): the fence language tag

    Returns:
        str: the block text, followed by one blank line
    """
    return f"### `{rec.wire_path}`\n\n{FENCE}{language}\n{rec.text()}\n{FENCE}\n\n"


def render_document(recs: Iterable[FileRecord], language: str) -> str:
    """Concatenate the blocks of all records, in the given order.

    Args:
        recs (Iterable[FileRecord]): the files to embed
        language (str): the fence language tag

    Returns:
        str: the whole document
    """
    out = io.StringIO()
    for rec in recs:
        out.write(render_block(rec, language))
    return out.getvalue()


def _lines_from(text: str, pos: int) -> Iterator[tuple[int, int, str]]:
    """Yield `(start, next_start, line)` for each line from `pos`, without its line break."""
    while pos < len(text):
        nxt = _next_line(text, pos)
        yield pos, nxt, text[pos:nxt].rstrip("\r\n")
        pos = nxt


def match_header(line: str) -> str | None:
    """Return the path named by a header line, or None when the line is not a header."""
    m = _HEADER.match(line)
    if m is None:
        return None
    path = m.group("path")
    return path if path.strip().strip("/\\") else None


def _open_fence(text: str, pos: int, language: str) -> int | None:
    """Find the content start of the fence that follows a header.

    Args:
        text (str): the document
        pos (int): offset of the line following the header
        language (str): expected fence language tag

    Returns:
        int | None: offset of the first content character, or None when the
            header is not followed by a matching opening fence
    """
    for _start, nxt, line in _lines_from(text, pos):
        if not line.strip():
            continue
        if line.startswith(FENCE) and line[len(FENCE) :].rstrip() == language:
            return nxt
        return None
    return None


def iter_blocks(text: str, language: str) -> Iterator[Block]:
    """Scan a document for blocks in order of appearance.

    Malformed or unclosed headers are skipped silently and scanning resumes on
    the next line.

    Args:
        text (str): the document
        language (str): the fence language tag blocks must carry

    Yields:
        Block: each well-formed block
    """
    pos = 0
    while pos < len(text):
        nxt = _next_line(text, pos)
        path = match_header(text[pos:nxt].rstrip("\r\n"))
        content_start = None if path is None else _open_fence(text, nxt, language)
        content_end = -1 if content_start is None else text.find(FENCE, content_start)
        if path is None or content_start is None or content_end == -1:
            pos = nxt
            continue
        end = content_end + len(FENCE)
        yield Block(path=path, raw=text[content_start:content_end], start=pos, end=end)
        # Headers only start at the beginning of a line.
        pos = _next_line(text, end)


def _next_line(text: str, pos: int) -> int:
    nl = text.find("\n", pos)
    return len(text) if nl == -1 else nl + 1


def trim_trailing_newline(raw: str) -> str:
    """Drop exactly one trailing newline; content without one is returned unchanged."""
    return raw[:-1] if raw.endswith("\n") else raw


def parse_document(text: str, language: str) -> list[FileRecord]:
    """Parse a document into file records.

    Args:
        text (str): the document
        language (str): the fence language tag blocks must carry

    Returns:
        list[FileRecord]: one record per well-formed block, in order of appearance
    """
    return [
        FileRecord(
            rel=block.path,
            content=trim_trailing_newline(block.raw).encode(SURROGATE_ENCODING, errors=SURROGATE_ERRORS),
        )
        for block in iter_blocks(text, language)
    ]

"""
codefence: pack a source tree into one Markdown document, and unpack it again.

Overview
--------
``codefence export`` walks a project and writes every file of one content type
(PHP by default) into a single Markdown document, one block per file::

    ### `app/Models/User.php`

    ```php
    <?php ...
    ```

Top-level ``vendor``, ``config``, ``bootstrap``, ``routes`` and ``public``
directories are left out unless included explicitly.

``codefence import`` reads such a document back and writes each block to its
path under a target directory, replacing existing files. When the target sits
inside a git working tree with unstaged changes, it asks before writing
(``--force`` skips the question).

Usage
-----
    - Export a project:
        codefence export path/to/project --output php_files.md

    - Export everything, vendor included:
        codefence export path/to/project --include-all

    - Import into the current directory, leaving tests alone:
        codefence import --input php_files.md --exclude tests

    - Log to a file:
        codefence import . --log-file import.log

    - Python files instead of PHP:
        codefence export path/to/project --type python --output py_files.md
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from codefence import __version__
from codefence.config import CONTENT_TYPES, DEFAULT_DOCUMENT, INCLUDABLE_TOP_DIRS
from codefence.exceptions import CodefenceError
from codefence.export import ensure_directory, export_tree, resolve_excluded_top_dirs
from codefence.extract import extract_document, read_document
from codefence.guard import ensure_safe_to_write, run_git_status
from codefence.logging import logger, setup_logging
from codefence.paths import build_exclusion_rules
from codefence.settings import ExportSettings, ImportSettings

if TYPE_CHECKING:
    from collections.abc import Sequence


def confirm(prompt: str) -> bool:
    """Ask a yes/no question on stdin; anything but yes (or end of input) is no."""
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--type",
        choices=sorted(CONTENT_TYPES),
        default=None,
        help="Content type to embed (default: php, or CODEFENCE_TYPE).",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="codefence",
        description="Pack source files into one Markdown document and unpack them again.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="Concatenate source files into a Markdown document.")
    exp.add_argument("path", type=str, help="Base directory of the project.")
    exp.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help=f"Output Markdown file (default: {DEFAULT_DOCUMENT}).",
    )
    for name in INCLUDABLE_TOP_DIRS:
        exp.add_argument(
            f"--include-{name}",
            dest="include",
            action="append_const",
            const=name,
            help=f"Include the top-level {name} directory.",
        )
    exp.add_argument(
        "--include-all",
        action="store_true",
        help="Include all top-level vendor, config, bootstrap, routes and public directories.",
    )
    _add_common(exp)

    imp = sub.add_parser("import", help="Extract source files from a Markdown document.")
    imp.add_argument("path", type=str, nargs="?", default=".", help="Directory to extract into.")
    imp.add_argument(
        "--input",
        "-i",
        type=str,
        default=None,
        help=f"Input Markdown file (default: {DEFAULT_DOCUMENT}).",
    )
    imp.add_argument(
        "--exclude",
        "-x",
        action="append",
        default=[],
        help="File or directory to leave untouched (repeatable).",
    )
    imp.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Do not ask for confirmation when the git working tree has unstaged changes.",
    )
    _add_common(imp)
    return p


def parse_args(argv: Sequence[str] | None = None) -> ExportSettings | ImportSettings:
    parser = build_parser()
    args = vars(parser.parse_args(argv))
    command = args.pop("command")
    # Unset options fall back to the settings defaults (environment, .env).
    values = {k: v for k, v in args.items() if v is not None}
    try:
        if command == "export":
            return ExportSettings(**values)
        return ImportSettings(**values)
    except ValidationError as e:
        parser.error("; ".join(err["msg"] for err in e.errors()))


def run_export(settings: ExportSettings) -> int:
    excluded = resolve_excluded_top_dirs(settings.include, include_all=settings.include_all)
    logger.info("exporting", path=str(settings.path), excluded=sorted(excluded))
    result = export_tree(
        settings.path,
        settings.output,
        content_type=settings.content_type,
        excluded_top_dirs=excluded,
    )
    print(f"{settings.content_type.name} files exported to: {result.output} files={result.count}")
    return 0


def run_import(settings: ImportSettings) -> int:
    base = ensure_directory(settings.path)
    text = read_document(settings.input)
    ensure_safe_to_write(base, force=settings.force, confirm=confirm, status_runner=run_git_status)

    result = extract_document(
        text,
        base,
        content_type=settings.content_type,
        rules=build_exclusion_rules(settings.exclude),
    )
    if result.nothing_to_do:
        print(f"No {settings.content_type.name} code blocks found in Markdown file.")
        return 0
    for failed in result.failed:
        print(failed.error.message, file=sys.stderr)
    print(
        f"Extraction complete. {len(result.written)} file(s) written, "
        f"{len(result.skipped)} skipped, {len(result.failed)} failed.",
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file or settings.quiet:
        setup_logging(settings.log_file or None, level=logging.WARNING if settings.quiet else logging.INFO)

    try:
        if isinstance(settings, ExportSettings):
            return run_export(settings)
        return run_import(settings)
    except CodefenceError as e:
        logger.error("aborted", error=e.message)  # noqa: TRY400
        print(e.message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

"""Refuse to overwrite a working tree with uncommitted changes unless told to."""

from __future__ import annotations

import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from codefence.exceptions import UserDeclinedError, VersionControlQueryError
from codefence.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    StatusRunner = Callable[[Path], list[str]]
    ConfirmFn = Callable[[str], bool]

VCS_MARKER = ".git"
CONFIRM_PROMPT = "You have unstaged changes in your git repository. Continue anyway?"


class RepositoryState(BaseModel):
    """Version-control state of an extraction target, computed on every call."""

    model_config = ConfigDict(frozen=True)

    is_version_controlled: bool = False
    has_uncommitted_changes: bool = False
    root: Path | None = None
    changes: tuple[str, ...] = Field(default=(), description="Offending `git status --porcelain` lines")


def find_repository_root(path: Path) -> Path | None:
    """Walk upward from `path` looking for a `.git` directory.

    Args:
        path (Path): starting directory

    Returns:
        Path | None: the first directory holding `.git`, or None once the
            filesystem root is passed without finding one
    """
    current = path.resolve()
    while True:
        if (current / VCS_MARKER).is_dir():
            return current
        if current.parent == current:
            return None
        current = current.parent


def run_git_status(root: Path) -> list[str]:
    """Run `git status --porcelain` in `root` and return its output lines.

    Args:
        root (Path): the working-tree root

    Raises:
        VersionControlQueryError: if git is missing or exits non-zero

    Returns:
        list[str]: raw status lines, leading status columns untouched
    """
    cmd = ["git", "-C", str(root), "status", "--porcelain"]
    try:
        out = subprocess.run(  # noqa: S603
            cmd,
            text=True,
            errors="replace",
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise VersionControlQueryError(
            command=" ".join(cmd),
            returncode=-1,
            stdout="",
            stderr=str(e),
        ) from e
    if out.returncode != 0:
        raise VersionControlQueryError(
            command=" ".join(cmd),
            returncode=out.returncode,
            stdout=out.stdout,
            stderr=out.stderr,
        )
    return [line for line in out.stdout.splitlines() if line]


def unstaged_changes(lines: Iterable[str]) -> list[str]:
    """Keep the status lines whose working-tree column (second character) is not blank.

    Lines shorter than `XY path` are ignored.
    """
    return [line for line in lines if len(line) >= 3 and line[1] != " "]  # noqa: PLR2004


def inspect_repository(path: Path, *, status_runner: StatusRunner = run_git_status) -> RepositoryState:
    """Compute the version-control state of `path`.

    A failing status query is logged and reported as "no uncommitted
    changes" so a missing git binary never blocks an import.

    Args:
        path (Path): the extraction target
        status_runner (StatusRunner): returns porcelain status lines for a root

    Returns:
        RepositoryState: the current state
    """
    root = find_repository_root(path)
    if root is None:
        return RepositoryState()
    try:
        lines = status_runner(root)
    except VersionControlQueryError as e:
        logger.warning("git status failed, assuming a clean tree", root=str(root), error=e.message)
        return RepositoryState(is_version_controlled=True, root=root)
    changes = unstaged_changes(lines)
    return RepositoryState(
        is_version_controlled=True,
        has_uncommitted_changes=bool(changes),
        root=root,
        changes=tuple(changes),
    )


def ensure_safe_to_write(
    path: Path,
    *,
    force: bool,
    confirm: ConfirmFn,
    status_runner: StatusRunner = run_git_status,
) -> RepositoryState:
    """Gate an import into `path` on the state of its working tree.

    Args:
        path (Path): the extraction target
        force (bool): skip the check entirely
        confirm (ConfirmFn): asks the operator a yes/no question
        status_runner (StatusRunner): returns porcelain status lines for a root

    Raises:
        UserDeclinedError: if the tree has uncommitted changes and the operator
            does not confirm

    Returns:
        RepositoryState: the inspected state (empty when forced)
    """
    if force:
        return RepositoryState()
    state = inspect_repository(path, status_runner=status_runner)
    if not (state.is_version_controlled and state.has_uncommitted_changes):
        return state
    logger.warning("unstaged changes", root=str(state.root), changes=list(state.changes))
    if not confirm(CONFIRM_PROMPT):
        raise UserDeclinedError(folder=path)
    return state

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CodefenceError(Exception):
    """Base exception for errors in the codefence module."""

    @property
    def message(self) -> str:
        return self.__class__.__doc__ or self.__class__.__name__

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class InvalidPathError(CodefenceError):
    """Raised when a base directory is missing or is not a directory."""

    path: Path

    @property
    def message(self) -> str:
        return f"Invalid path: {self.path}"


@dataclass(frozen=True)
class UnreadableInputError(CodefenceError):
    """Raised when the input document cannot be read."""

    path: Path
    reason: str = ""

    @property
    def message(self) -> str:
        msg = f"Cannot read input Markdown file: {self.path}"
        return f"{msg} ({self.reason})" if self.reason else msg


@dataclass(frozen=True)
class UnreadableSourceError(CodefenceError):
    """Raised when a source file cannot be read during an export."""

    path: Path
    reason: str = ""

    @property
    def message(self) -> str:
        return f"Cannot read source file: {self.path} ({self.reason})"


@dataclass(frozen=True)
class DirectoryCreationError(CodefenceError):
    """Raised when the parent directory of an extracted file cannot be created."""

    directory: Path
    reason: str = ""

    @property
    def message(self) -> str:
        return f"Failed to create directory: {self.directory} ({self.reason})"


@dataclass(frozen=True)
class WriteError(CodefenceError):
    """Raised when an extracted file cannot be written."""

    path: Path
    reason: str = ""

    @property
    def message(self) -> str:
        return f"Failed to write file: {self.path} ({self.reason})"


@dataclass(frozen=True)
class VersionControlQueryError(CodefenceError):
    """Raised when a git command fails."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def message(self) -> str:
        return f"`{self.command}` exited with {self.returncode}: {self.stderr.strip()}"


@dataclass(frozen=True)
class UserDeclinedError(CodefenceError):
    """Raised when the operator declines to write over uncommitted changes."""

    folder: Path

    @property
    def message(self) -> str:
        return "Aborted by user."


@dataclass(frozen=True)
class UnknownContentTypeError(CodefenceError):
    """Raised when a content type name is not registered."""

    name: str

    @property
    def message(self) -> str:
        return f"Unknown content type: {self.name}"

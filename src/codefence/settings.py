from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from codefence.config import (
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DOCUMENT,
    INCLUDABLE_TOP_DIRS,
    ContentType,
    get_content_type,
)

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "CODEFENCE_"


def env_default(name: str, default: str) -> str:
    """Read a `CODEFENCE_*` default from the environment, then from `.env`.

    Args:
        name (str): variable name without the prefix (e.g. "DOCUMENT")
        default (str): value used when neither source defines it

    Returns:
        str: the resolved default
    """
    key = ENV_PREFIX + name
    if key in os.environ:
        return os.environ[key]
    values = dotenv_values(ENV_FILE) if ENV_FILE else {}
    return values.get(key) or default


class CommonSettings(BaseModel):
    """Options shared by both commands."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(
        default_factory=lambda: env_default("TYPE", DEFAULT_CONTENT_TYPE),
        validate_default=True,
        description=f"Content type, one of: {', '.join(CONTENT_TYPES)}.",
    )
    log_file: str = Field(default="", description="Log file path.")
    quiet: bool = Field(default=False, description="Only log warnings and errors.")

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value.strip().lower() not in CONTENT_TYPES:
            msg = f"unknown content type {value!r}"
            raise ValueError(msg)
        return value.strip().lower()

    @property
    def content_type(self) -> ContentType:
        return get_content_type(self.type)


class ExportSettings(CommonSettings):
    """Configuration for `codefence export`."""

    path: Path = Field(..., description="Base directory of the project.")
    output: Path = Field(
        default_factory=lambda: Path(env_default("DOCUMENT", DEFAULT_DOCUMENT)),
        description="Output Markdown file.",
    )
    include: list[str] = Field(
        default_factory=list,
        description=f"Default-excluded top-level directories to include ({', '.join(INCLUDABLE_TOP_DIRS)}).",
    )
    include_all: bool = Field(default=False, description="Include every default-excluded directory.")


class ImportSettings(CommonSettings):
    """Configuration for `codefence import`."""

    path: Path = Field(default_factory=Path, description="Directory to extract into.")
    input: Path = Field(
        default_factory=lambda: Path(env_default("DOCUMENT", DEFAULT_DOCUMENT)),
        description="Input Markdown file.",
    )
    exclude: list[str] = Field(default_factory=list, description="Files or directories to leave untouched.")
    force: bool = Field(default=False, description="Skip the unstaged changes confirmation.")

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from codefence.exceptions import UnknownContentTypeError
from codefence.paths import normalize_separators

DEFAULT_DOCUMENT = "php_files.md"
DEFAULT_CONTENT_TYPE = "php"

DEFAULT_EXCLUDED_TOP_DIRS: frozenset[str] = frozenset({
    "vendor",
    "config",
    "bootstrap",
    "routes",
    "public",
})

# Top-level directories that can be put back into an export one by one.
# `public` only comes back through --include-all.
INCLUDABLE_TOP_DIRS: tuple[str, ...] = ("vendor", "config", "bootstrap", "routes")

SURROGATE_ENCODING = "utf-8"
SURROGATE_ERRORS = "surrogateescape"


class ContentType(BaseModel):
    """The single kind of file embedded in a document.

    Attributes:
        name: Registry key (e.g. "php").
        extension: File suffix matched by the walker, dot included (e.g. ".php").
        language: Tag written after the opening fence (e.g. "php").
    """

    model_config = ConfigDict(frozen=True)

    name: str
    extension: str
    language: str


CONTENT_TYPES: dict[str, ContentType] = {
    ct.name: ct
    for ct in (
        ContentType(name="php", extension=".php", language="php"),
        ContentType(name="python", extension=".py", language="python"),
        ContentType(name="javascript", extension=".js", language="javascript"),
        ContentType(name="typescript", extension=".ts", language="typescript"),
        ContentType(name="go", extension=".go", language="go"),
        ContentType(name="rust", extension=".rs", language="rust"),
        ContentType(name="ruby", extension=".rb", language="ruby"),
        ContentType(name="java", extension=".java", language="java"),
    )
}


def get_content_type(name: str) -> ContentType:
    """Look up a registered content type by name.

    Args:
        name (str): the registry key, case-insensitive

    Raises:
        UnknownContentTypeError: if no content type is registered under `name`

    Returns:
        ContentType: the matching content type
    """
    try:
        return CONTENT_TYPES[name.strip().lower()]
    except KeyError:
        raise UnknownContentTypeError(name=name) from None


class FileRecord(BaseModel):
    """One embedded file: where it lives relative to the base directory and its bytes.

    Attributes:
        rel: Relative path using the platform separator, without leading
            separators.
        content: Raw file content.
    """

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., min_length=1, description="Path relative to the base directory")
    content: bytes = Field(default=b"", description="Raw file content")

    @field_validator("rel", mode="before")
    @classmethod
    def _relative_platform_path(cls, value: str) -> str:
        # Exclusion matching and writing both see this form.
        return normalize_separators(str(value)).lstrip(os.sep)

    @computed_field
    @property
    def wire_path(self) -> str:
        """Forward-slash form of `rel`, as written in block headers."""
        return self.rel.replace(os.sep, "/")

    def text(self) -> str:
        """Decode the content for embedding in a document, keeping undecodable bytes."""
        return self.content.decode(SURROGATE_ENCODING, errors=SURROGATE_ERRORS)

"""Path normalization and exclusion matching shared by export and import."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


def normalize_separators(path: str) -> str:
    """Rewrite both `/` and `\\` to the platform separator.

    Args:
        path (str): the path as written in a header or on the command line

    Returns:
        str: the same path using `os.sep` only
    """
    return path.replace("/", os.sep).replace("\\", os.sep)


def top_level_dir(rel: str) -> str:
    """Return the first segment of a relative path.

    Args:
        rel (str): a path relative to the base directory

    Returns:
        str: the top-level directory (or the file name for top-level files)
    """
    return normalize_separators(rel).split(os.sep, 1)[0]


class ExclusionRule(BaseModel):
    """A path prefix that suppresses the path itself and everything nested under it."""

    model_config = ConfigDict(frozen=True)

    prefix: str

    @field_validator("prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return normalize_separators(str(value).strip()).rstrip(os.sep)

    def matches(self, path: str) -> bool:
        normalized = normalize_separators(path)
        return normalized == self.prefix or normalized.startswith(self.prefix + os.sep)


def build_exclusion_rules(values: Iterable[str]) -> list[ExclusionRule]:
    """Build exclusion rules from raw `--exclude` values.

    Values that normalize to an empty prefix (blank strings, a lone separator)
    would match nothing and are dropped.

    Args:
        values (Iterable[str]): raw exclusion values, with either separator style

    Returns:
        list[ExclusionRule]: the normalized rules, in input order
    """
    rules = [ExclusionRule(prefix=v) for v in values if v]
    return [r for r in rules if r.prefix]


def is_excluded(path: str, rules: Sequence[ExclusionRule]) -> bool:
    return any(rule.matches(path) for rule in rules)

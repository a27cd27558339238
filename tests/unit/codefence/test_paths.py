import os

import pytest

from codefence.paths import (
    ExclusionRule,
    build_exclusion_rules,
    is_excluded,
    normalize_separators,
    top_level_dir,
)


@pytest.mark.unit
def test_normalize_separators_accepts_both_styles() -> None:
    assert normalize_separators("a/b\\c") == os.sep.join(["a", "b", "c"])


@pytest.mark.unit
def test_top_level_dir_returns_first_segment() -> None:
    assert top_level_dir("vendor/laravel/framework/src/Foo.php") == "vendor"
    assert top_level_dir("index.php") == "index.php"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        ("a/b", True),
        ("a", True),
        ("a/b/c.php", True),
        ("a/bx", False),
        ("a/d", False),
        ("b", False),
    ],
)
def test_exclusion_rule_matches_path_or_nested_paths(rule: str, expected: bool) -> None:
    assert ExclusionRule(prefix=rule).matches("a/b/c.php") is expected


@pytest.mark.unit
def test_exclusion_rule_tolerates_opposite_separator_and_trailing_separator() -> None:
    rules = build_exclusion_rules(["a\\b\\", "x/"])

    assert is_excluded("a/b/c.php", rules)
    assert is_excluded("a\\b\\c.php", rules)
    assert is_excluded("x/y.php", rules)
    assert not is_excluded("a/bc.php", rules)


@pytest.mark.unit
def test_build_exclusion_rules_drops_empty_prefixes() -> None:
    rules = build_exclusion_rules(["", "/", "\\", "app"])

    assert [r.prefix for r in rules] == ["app"]
    assert not is_excluded("routes/web.php", rules)


@pytest.mark.unit
def test_is_excluded_without_rules_keeps_everything() -> None:
    assert not is_excluded("app/Models/User.php", [])

from __future__ import annotations

from pathlib import Path

import pytest

from codefence import __version__, cli
from codefence.settings import ExportSettings, ImportSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CODEFENCE_DOCUMENT", raising=False)
    monkeypatch.delenv("CODEFENCE_TYPE", raising=False)


@pytest.mark.unit
def test_parse_args_export_with_include_flags() -> None:
    settings = cli.parse_args(["export", "project", "--include-vendor", "--include-routes", "--output", "out.md"])

    assert isinstance(settings, ExportSettings)
    assert settings.path == Path("project")
    assert settings.output == Path("out.md")
    assert settings.include == ["vendor", "routes"]
    assert settings.include_all is False


@pytest.mark.unit
def test_parse_args_import_defaults() -> None:
    settings = cli.parse_args(["import"])

    assert isinstance(settings, ImportSettings)
    assert settings.path == Path()
    assert settings.input == Path("php_files.md")
    assert settings.force is False


@pytest.mark.unit
def test_parse_args_import_repeatable_excludes_and_short_flags() -> None:
    settings = cli.parse_args(["import", "target", "-i", "in.md", "-x", "app/Http", "-x", "routes", "-f"])

    assert isinstance(settings, ImportSettings)
    assert settings.input == Path("in.md")
    assert settings.exclude == ["app/Http", "routes"]
    assert settings.force is True


@pytest.mark.unit
def test_parse_args_requires_a_command() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args([])

    assert exc_info.value.code == 2


@pytest.mark.unit
def test_parse_args_rejects_unknown_type_from_environment(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("CODEFENCE_TYPE", "cobol")

    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["import"])

    assert exc_info.value.code == 2
    assert "unknown content type 'cobol'" in capsys.readouterr().err


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
@pytest.mark.parametrize(("answer", "expected"), [("y", True), ("YES", True), ("n", False), ("", False)])
def test_confirm_reads_answer(monkeypatch: pytest.MonkeyPatch, answer: str, expected: bool) -> None:
    monkeypatch.setattr("builtins.input", lambda _prompt: answer)

    assert cli.confirm("Continue?") is expected


@pytest.mark.unit
def test_confirm_treats_end_of_input_as_no(monkeypatch: pytest.MonkeyPatch) -> None:
    def _eof(_prompt: str) -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)

    assert cli.confirm("Continue?") is False


@pytest.mark.unit
def test_main_export_invalid_path_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["export", str(tmp_path / "missing"), "--output", str(tmp_path / "out.md")])

    assert exit_code == 1
    assert "Invalid path" in capsys.readouterr().err


@pytest.mark.unit
def test_main_export_unwritable_output_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    base = tmp_path / "project"
    base.mkdir()
    (base / "a.php").write_text("<?php\n", encoding="utf-8")
    output = tmp_path / "out.md"
    output.mkdir()

    exit_code = cli.main(["export", str(base), "--output", str(output)])

    assert exit_code == 1
    assert "Failed to write file" in capsys.readouterr().err


@pytest.mark.unit
def test_main_import_unreadable_input_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["import", str(tmp_path), "--input", str(tmp_path / "missing.md"), "--force"])

    assert exit_code == 1
    assert "Cannot read input Markdown file" in capsys.readouterr().err


@pytest.mark.unit
def test_main_import_without_blocks_succeeds(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc = tmp_path / "php_files.md"
    doc.write_text("# nothing here\n", encoding="utf-8")
    target = tmp_path / "target"
    target.mkdir()

    exit_code = cli.main(["import", str(target), "--input", str(doc), "--force"])

    assert exit_code == 0
    assert "No php code blocks found" in capsys.readouterr().out
    assert list(target.iterdir()) == []


@pytest.mark.unit
def test_main_log_file_is_created(tmp_path: Path) -> None:
    base = tmp_path / "project"
    base.mkdir()
    log_file = tmp_path / "export.log"

    exit_code = cli.main(["export", str(base), "--output", str(tmp_path / "out.md"), "--log-file", str(log_file)])

    assert exit_code == 0
    assert log_file.exists()

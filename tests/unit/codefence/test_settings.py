from pathlib import Path

import pytest
from pydantic import ValidationError

from codefence.settings import ExportSettings, ImportSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CODEFENCE_DOCUMENT", raising=False)
    monkeypatch.delenv("CODEFENCE_TYPE", raising=False)


@pytest.mark.unit
def test_import_settings_defaults() -> None:
    settings = ImportSettings()

    assert settings.path == Path()
    assert settings.input == Path("php_files.md")
    assert settings.exclude == []
    assert settings.force is False
    assert settings.content_type.extension == ".php"


@pytest.mark.unit
def test_export_settings_defaults() -> None:
    settings = ExportSettings(path=Path("project"))

    assert settings.output == Path("php_files.md")
    assert settings.include == []
    assert settings.include_all is False


@pytest.mark.unit
def test_settings_read_defaults_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODEFENCE_DOCUMENT", "bundle.md")
    monkeypatch.setenv("CODEFENCE_TYPE", "Python")

    settings = ImportSettings()

    assert settings.input == Path("bundle.md")
    assert settings.content_type.language == "python"


@pytest.mark.unit
def test_settings_reject_unknown_content_type() -> None:
    with pytest.raises(ValidationError):
        ImportSettings(type="cobol")

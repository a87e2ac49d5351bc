from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from labreport.config import LabReportSettings, get_settings


def test_defaults() -> None:
    settings = LabReportSettings()

    assert settings.home_branch == "wip"
    assert settings.exporter == "conda"
    assert settings.commit_template is None
    assert settings.edit_message is True
    assert settings.exporter_paths == (Path(".labreport/exporters"),)
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LABREPORT_HOME_BRANCH", " scratch ")
    monkeypatch.setenv("LABREPORT_EXPORTER_PATHS", os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")]))
    monkeypatch.setenv("LABREPORT_COMMIT_TEMPLATE", str(tmp_path / "template.txt"))
    monkeypatch.setenv("LABREPORT_EDIT_MESSAGE", "false")
    monkeypatch.setenv("LABREPORT_LOG_LEVEL", "debug")

    settings = LabReportSettings()

    assert settings.home_branch == "scratch"
    assert settings.exporter_paths == (tmp_path / "a", tmp_path / "b")
    assert settings.commit_template == tmp_path / "template.txt"
    assert settings.edit_message is False
    assert settings.log_level == "DEBUG"


def test_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LABREPORT_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        LabReportSettings()


def test_empty_home_branch_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LABREPORT_HOME_BRANCH", "  ")

    with pytest.raises(ValidationError):
        LabReportSettings()


def test_get_settings_is_cached_and_expands_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LABREPORT_COMMIT_TEMPLATE", "~/.gitmessage")

    settings = get_settings()

    assert settings is get_settings()
    assert settings.commit_template == Path("~/.gitmessage").expanduser()

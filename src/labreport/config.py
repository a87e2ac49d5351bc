"""Configuration management for labreport."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_EXPORTER_PATHS = (Path(".labreport/exporters"),)


class LabReportSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    git_path: str | None = Field(default=None, validation_alias="LABREPORT_GIT_PATH")
    home_branch: str = Field(default="wip", validation_alias="LABREPORT_HOME_BRANCH")
    commit_template: Path | None = Field(default=None, validation_alias="LABREPORT_COMMIT_TEMPLATE")
    exporter: str = Field(default="conda", validation_alias="LABREPORT_EXPORTER")
    exporter_paths: Annotated[tuple[Path, ...], NoDecode] = Field(
        default=_DEFAULT_EXPORTER_PATHS, validation_alias="LABREPORT_EXPORTER_PATHS"
    )
    edit_message: bool = Field(default=True, validation_alias="LABREPORT_EDIT_MESSAGE")
    log_level: str = Field(default="INFO", validation_alias="LABREPORT_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "LABREPORT_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("home_branch", "exporter")
    @classmethod
    def _require_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Branch and exporter names must not be empty")
        return normalized

    @field_validator("commit_template", mode="before")
    @classmethod
    def _parse_commit_template(cls, value):
        if value is None or value == "":
            return None
        return value

    @field_validator("exporter_paths", mode="before")
    @classmethod
    def _parse_exporter_paths(cls, value):
        if value is None or value == "":
            return _DEFAULT_EXPORTER_PATHS
        if isinstance(value, (list, tuple)):
            return tuple(Path(str(item)) for item in value)
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(os.pathsep) if part.strip()]
            return tuple(Path(part) for part in parts) or _DEFAULT_EXPORTER_PATHS
        raise TypeError(
            "LABREPORT_EXPORTER_PATHS must be a list of paths or a path-separated string"
        )


@lru_cache(maxsize=1)
def get_settings() -> LabReportSettings:
    """Return cached settings instance."""

    settings = LabReportSettings()
    if settings.commit_template is not None:
        settings.commit_template = settings.commit_template.expanduser()
    settings.exporter_paths = tuple(path.expanduser() for path in settings.exporter_paths)
    return settings


__all__ = ["LabReportSettings", "get_settings"]

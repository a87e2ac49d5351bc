"""Exporter profile models."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ManifestSpec(BaseModel):
    """One manifest file and the arguments that produce it."""

    filename: str = Field(..., description="File written in the working directory.")
    args: list[str] = Field(
        default_factory=list,
        description="Arguments passed to the exporter executable; stdout becomes the file.",
    )

    @field_validator("filename")
    @classmethod
    def _validate_filename(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Manifest filename must not be empty")
        path = PurePosixPath(normalized.replace("\\", "/"))
        if path.is_absolute() or ".." in path.parts:
            raise ValueError("Manifest filename must be relative to the working directory")
        return normalized

    @field_validator("args", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any):  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise TypeError("Manifest args must be a sequence of strings")


class ExporterProfile(BaseModel):
    """Describes how an environment manager exports its manifests."""

    id: str = Field(..., description="Unique identifier for the profile.")
    title: str = Field(default="", description="Display title for the profile.")
    executable: str = Field(..., description="Executable name looked up on PATH, or a path.")
    manifests: list[ManifestSpec] = Field(..., min_length=1)

    @field_validator("id", "executable")
    @classmethod
    def _normalize_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Exporter id and executable must not be empty")
        return normalized

    @property
    def filenames(self) -> list[str]:
        return [manifest.filename for manifest in self.manifests]


BUILTIN_PROFILES: dict[str, dict[str, Any]] = {
    "conda": {
        "id": "conda",
        "title": "Conda environment",
        "executable": "conda",
        "manifests": [
            {"filename": "environment.yml", "args": ["env", "export"]},
            {"filename": "requirements.txt", "args": ["list", "--export"]},
        ],
    },
    "mamba": {
        "id": "mamba",
        "title": "Mamba environment",
        "executable": "mamba",
        "manifests": [
            {"filename": "environment.yml", "args": ["env", "export"]},
            {"filename": "requirements.txt", "args": ["list", "--export"]},
        ],
    },
    "pip": {
        "id": "pip",
        "title": "pip packages",
        "executable": "pip",
        "manifests": [
            {"filename": "requirements.txt", "args": ["freeze"]},
        ],
    },
}


__all__ = ["BUILTIN_PROFILES", "ExporterProfile", "ManifestSpec"]

"""Exporter profile loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import yaml
from pydantic import ValidationError

from ..errors import LabReportError
from .models import BUILTIN_PROFILES, ExporterProfile


class ExporterLoadError(LabReportError):
    """Raised when exporter profiles cannot be parsed or found."""


class ExporterLoader:
    """Loads exporter profiles: built-ins first, then YAML files on disk."""

    def __init__(self, search_paths: Iterable[Path] | None = None) -> None:
        paths = [Path(path) for path in (search_paths or [])]
        self._search_paths: list[Path] = [path for path in paths if path.is_dir()]

    @property
    def search_paths(self) -> list[Path]:
        """Return the search paths that exist."""

        return list(self._search_paths)

    def load_all(self) -> dict[str, ExporterProfile]:
        """Load every profile.

        Later search paths override earlier ones, and files override
        built-ins, when profile ids collide.
        """

        profiles: dict[str, ExporterProfile] = {
            key: ExporterProfile.model_validate(document)
            for key, document in BUILTIN_PROFILES.items()
        }
        errors: list[str] = []

        for base in self._search_paths:
            for path in sorted(base.glob("*.yml")) + sorted(base.glob("*.yaml")):
                try:
                    document = yaml.safe_load(path.read_text(encoding="utf-8"))
                except yaml.YAMLError as exc:
                    errors.append(f"Failed to parse YAML in {path}: {exc}")
                    continue

                if document is None:
                    continue

                try:
                    profile = ExporterProfile.model_validate(document)
                except ValidationError as exc:
                    errors.append(f"Exporter validation error in {path}: {exc}")
                    continue

                profiles[profile.id] = profile

        if errors:
            raise ExporterLoadError("; ".join(errors))

        return profiles

    def get(self, profile_id: str) -> ExporterProfile:
        """Return a single profile by id."""

        profiles = self.load_all()
        try:
            return profiles[profile_id]
        except KeyError as exc:
            known = ", ".join(sorted(profiles))
            raise ExporterLoadError(
                f"Exporter '{profile_id}' not found (known exporters: {known})"
            ) from exc


__all__ = ["ExporterLoadError", "ExporterLoader"]

"""Regenerate dependency manifests in the working directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import UnderlyingToolError
from ..process import resolve_executable, run_process
from .models import ExporterProfile, ManifestSpec

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ManifestWrite:
    """A manifest file that was overwritten, with its previous content."""

    path: Path
    previous: bytes | None

    def restore(self) -> None:
        """Put the file back the way it was before the write."""

        if self.previous is None:
            self.path.unlink(missing_ok=True)
        else:
            self.path.write_bytes(self.previous)


class ManifestExporter:
    """Run an exporter profile's commands and write their output to disk."""

    def __init__(self, profile: ExporterProfile, *, cwd: Path | None = None) -> None:
        self._profile = profile
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._executable: Path | None = None

    @property
    def profile(self) -> ExporterProfile:
        return self._profile

    @property
    def manifests(self) -> list[ManifestSpec]:
        return list(self._profile.manifests)

    def _resolve(self) -> Path:
        if self._executable is None:
            configured = Path(self._profile.executable)
            explicit = configured if len(configured.parts) > 1 else None
            self._executable = resolve_executable(self._profile.executable, explicit)
        return self._executable

    async def export(self, manifest: ManifestSpec) -> ManifestWrite:
        """Regenerate one manifest, overwriting any existing file.

        The file is only touched once the command has succeeded.
        """

        executable = self._resolve()
        result = await run_process([str(executable), *manifest.args], cwd=self._cwd)
        if not result.ok:
            raise UnderlyingToolError(f"export {manifest.filename}", result)

        path = self._cwd / manifest.filename
        previous = path.read_bytes() if path.exists() else None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(result.raw_stdout)
        except OSError as exc:
            raise UnderlyingToolError(f"write {manifest.filename}", message=str(exc)) from exc

        logger.debug(
            "Exported manifest",
            extra={"exporter": self._profile.id, "manifest": str(path), "bytes": len(result.raw_stdout)},
        )
        return ManifestWrite(path=path, previous=previous)


__all__ = ["ManifestExporter", "ManifestWrite"]

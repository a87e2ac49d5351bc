"""Exporter profiles and manifest generation."""

from .exporter import ManifestExporter, ManifestWrite
from .loader import ExporterLoadError, ExporterLoader
from .models import BUILTIN_PROFILES, ExporterProfile, ManifestSpec

__all__ = [
    "BUILTIN_PROFILES",
    "ExporterLoadError",
    "ExporterLoader",
    "ExporterProfile",
    "ManifestExporter",
    "ManifestSpec",
    "ManifestWrite",
]

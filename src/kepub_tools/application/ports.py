"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from kepub_tools.application.options import ConversionOptions
from kepub_tools.application.results import PackageMetadata


class BookConverter(Protocol):
    """Rewrite one EPUB into its device-specific variant."""

    def convert(
        self,
        input_path: Path,
        output_path: Path,
        options: ConversionOptions,
    ) -> None:
        """Write the converted book to ``output_path``; raise on failure."""


class MetadataReader(Protocol):
    """Read series metadata from an EPUB package."""

    def read(self, package_path: Path) -> PackageMetadata:
        """Return the package metadata; raise ``PackageError`` on failure."""


class CatalogStore(Protocol):
    """Device catalog holding per-book series columns."""

    def update_series(
        self,
        image_id: str,
        series_name: str | None,
        series_index: str | None,
    ) -> int:
        """Update the book keyed by ``image_id`` and return rows affected."""


class ProgressSink(Protocol):
    """User-facing progress channel."""

    def info(self, message: str) -> None:
        """Report normal progress."""

    def warning(self, message: str) -> None:
        """Report a non-fatal anomaly."""

    def error(self, message: str) -> None:
        """Report a failure."""

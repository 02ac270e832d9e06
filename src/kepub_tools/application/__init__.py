"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from kepub_tools.application.options import BatchOptions, ConversionOptions
from kepub_tools.application.ports import (
    BookConverter,
    CatalogStore,
    MetadataReader,
    ProgressSink,
)
from kepub_tools.application.results import (
    BatchReport,
    BookSyncResult,
    ConversionJob,
    JobOutcome,
    JobStatus,
    PackageMetadata,
    SyncReport,
    SyncStatus,
)
from kepub_tools.types import PathArg, Replacement


def build_conversion_options(
    *,
    css: str = "",
    hyphenate: bool = False,
    no_hyphenate: bool = False,
    inline_styles: bool = False,
    fullscreen_fixes: bool = False,
    replacements: Iterable[str | Replacement] = (),
) -> ConversionOptions:
    """Build typed conversion options via lazy use-case import."""
    from kepub_tools.application.use_cases import build_conversion_options as _impl

    return _impl(
        css=css,
        hyphenate=hyphenate,
        no_hyphenate=no_hyphenate,
        inline_styles=inline_styles,
        fullscreen_fixes=fullscreen_fixes,
        replacements=replacements,
    )


def execute_batch(
    plan: Mapping[Path, Path],
    *,
    options: BatchOptions = BatchOptions(),
    converter: BookConverter | None = None,
    conversion_options: ConversionOptions = ConversionOptions(),
    progress: ProgressSink | None = None,
) -> BatchReport:
    """Execute a conversion plan via lazy use-case import."""
    from kepub_tools.application.use_cases import execute_batch as _impl

    return _impl(
        plan,
        options=options,
        converter=converter,
        conversion_options=conversion_options,
        progress=progress,
    )


def convert_paths(
    *,
    paths: Iterable[PathArg],
    output_dir: PathArg = ".",
    update_only: bool = False,
    conversion_options: ConversionOptions = ConversionOptions(),
    converter: BookConverter | None = None,
    progress: ProgressSink | None = None,
) -> BatchReport:
    """Plan and convert path arguments via lazy use-case import."""
    from kepub_tools.application.use_cases import convert_paths as _impl

    return _impl(
        paths=paths,
        output_dir=output_dir,
        update_only=update_only,
        conversion_options=conversion_options,
        converter=converter,
        progress=progress,
    )


def sync_series_metadata(
    device_root: Path,
    *,
    reader: MetadataReader | None = None,
    catalog: CatalogStore | None = None,
    progress: ProgressSink | None = None,
    db_path: Path | None = None,
) -> SyncReport:
    """Sync device series metadata via lazy use-case import."""
    from kepub_tools.application.use_cases import sync_series_metadata as _impl

    return _impl(
        device_root,
        reader=reader,
        catalog=catalog,
        progress=progress,
        db_path=db_path,
    )


__all__ = [
    "BatchOptions",
    "ConversionOptions",
    "BatchReport",
    "BookSyncResult",
    "ConversionJob",
    "JobOutcome",
    "JobStatus",
    "PackageMetadata",
    "SyncReport",
    "SyncStatus",
    "build_conversion_options",
    "execute_batch",
    "convert_paths",
    "sync_series_metadata",
]

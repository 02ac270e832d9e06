"""Public file-based API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from typing import Optional

from kepub_tools.application.results import BatchReport
from kepub_tools.application.results import SyncReport
from kepub_tools.application.use_cases import build_conversion_options
from kepub_tools.application.use_cases import convert_paths
from kepub_tools.application.use_cases import sync_series_metadata
from kepub_tools.infrastructure.devices import resolve_device_root


def kepubify_paths(
    paths: Iterable[str | Path],
    output_dir: str | Path = ".",
    update_only: bool = False,
    css: str = "",
    hyphenate: bool = False,
    no_hyphenate: bool = False,
    inline_styles: bool = False,
    fullscreen_fixes: bool = False,
    replacements: Optional[Iterable[str]] = None,
) -> BatchReport:
    """Convert EPUB files and directories of EPUBs into ``.kepub.epub`` files."""
    options = build_conversion_options(
        css=css,
        hyphenate=hyphenate,
        no_hyphenate=no_hyphenate,
        inline_styles=inline_styles,
        fullscreen_fixes=fullscreen_fixes,
        replacements=replacements or (),
    )
    return convert_paths(
        paths=paths,
        output_dir=output_dir,
        update_only=update_only,
        conversion_options=options,
    )


def kepubify_file(
    input_path: Path,
    output_dir: Path,
    update_only: bool = False,
) -> Path:
    """Convert a single EPUB and return the output path.

    Raises
    ------
    PathNotFoundError
        If ``input_path`` does not exist.
    InvalidPathKindError
        If ``input_path`` is not a regular file.
    ConversionFailure
        If the conversion fails.
    """
    from kepub_tools.errors import ConversionFailure, InvalidPathKindError
    from kepub_tools.planning import classify_path
    from kepub_tools.types import PathKind

    if classify_path(input_path) is not PathKind.FILE:
        raise InvalidPathKindError(f"Path '{input_path}' is not a file")

    report = kepubify_paths([input_path], output_dir=output_dir, update_only=update_only)
    if not report.outcomes:
        raise ConversionFailure(f"nothing to convert for '{input_path}'")
    outcome = report.outcomes[0]
    if report.failed:
        raise ConversionFailure(outcome.reason or "conversion failed")
    return outcome.job.output_path



def sync_device_series(device_path: Optional[str | Path] = None) -> SyncReport:
    """Write EPUB series metadata into a device catalog.

    The device is auto-detected when ``device_path`` is omitted.
    """
    root = resolve_device_root(device_path)
    return sync_series_metadata(root)

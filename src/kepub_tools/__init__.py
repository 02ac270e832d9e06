"""Top-level API for kepub conversion and device series metadata sync."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from kepub_tools.application.results import BatchReport, SyncReport

__version__ = "0.1.0"


def kepubify(
    paths: Iterable[str | Path],
    output_dir: str | Path = ".",
    *,
    update_only: bool = False,
    css: str = "",
    hyphenate: bool = False,
    no_hyphenate: bool = False,
    inline_styles: bool = False,
    fullscreen_fixes: bool = False,
    replacements: Iterable[str] | None = None,
) -> BatchReport:
    """Convert EPUB files and directories into ``.kepub.epub`` files.

    Parameters
    ----------
    paths : Iterable[str | Path]
        EPUB files and/or directories searched recursively for EPUBs.
    output_dir : str | Path, default="."
        Where converted files are written. Files found below a directory
        argument ``Lib`` go to ``output_dir / "Lib_converted"``.
    update_only : bool, default=False
        Skip books whose converted output already exists.
    css : str, default=""
        Extra stylesheet text added to every content document.
    hyphenate, no_hyphenate : bool, default=False
        Force hyphenation on or off; mutually exclusive.
    inline_styles : bool, default=False
        Inline linked stylesheets into content documents.
    fullscreen_fixes : bool, default=False
        Add fullscreen reading layout fixes.
    replacements : Iterable[str] | None, default=None
        ``FIND|REPLACE`` entries applied in order to content documents.

    Returns
    -------
    BatchReport
        Per-job outcomes and tallies.
    """
    from .api import kepubify_paths as _impl

    return _impl(
        paths=paths,
        output_dir=output_dir,
        update_only=update_only,
        css=css,
        hyphenate=hyphenate,
        no_hyphenate=no_hyphenate,
        inline_styles=inline_styles,
        fullscreen_fixes=fullscreen_fixes,
        replacements=replacements,
    )


def sync_series(device_path: str | Path | None = None) -> SyncReport:
    """Copy EPUB series metadata into the device catalog.

    Parameters
    ----------
    device_path : str | Path | None, default=None
        Device root; auto-detected when omitted.

    Returns
    -------
    SyncReport
        Per-book sync results and tallies.
    """
    from .api import sync_device_series as _impl

    return _impl(device_path)


__all__ = [
    "kepubify",
    "sync_series",
]

"""Typed option objects shared across use-cases."""

from __future__ import annotations

from dataclasses import dataclass

from kepub_tools.types import Replacement


@dataclass(frozen=True)
class ConversionOptions:
    """Options handed to the conversion collaborator for every job.

    ``hyphenate`` is ``True`` to force hyphenation on, ``False`` to force it
    off and ``None`` to leave the book's own styling alone.
    """

    extra_css: str = ""
    hyphenate: bool | None = None
    inline_styles: bool = False
    fullscreen_fixes: bool = False
    replacements: tuple[Replacement, ...] = ()


@dataclass(frozen=True)
class BatchOptions:
    """Batch execution policy."""

    update_only: bool = False

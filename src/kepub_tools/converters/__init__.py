"""Built-in book converters."""

from __future__ import annotations

from kepub_tools.converters.kepub import build_extra_css, convert_epub_to_kepub

__all__ = ["build_extra_css", "convert_epub_to_kepub"]

"""Book converters implementing application ports."""

from __future__ import annotations

from pathlib import Path

from kepub_tools.application.options import ConversionOptions


class KepubConverter:
    """Convert an EPUB into a ``.kepub.epub`` with the built-in repackager."""

    def convert(
        self,
        input_path: Path,
        output_path: Path,
        options: ConversionOptions,
    ) -> None:
        """Convert one book.

        Parameters
        ----------
        input_path : Path
            Source ``.epub``.
        output_path : Path
            Destination ``.kepub.epub``; its parent must exist.
        options : ConversionOptions
            Styling and text replacement options.
        """
        from kepub_tools.converters.kepub import convert_epub_to_kepub

        convert_epub_to_kepub(input_path, output_path, options)

"""Unit tests for the built-in EPUB repackaging converter."""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from kepub_tools.adapters.converters import KepubConverter
from kepub_tools.application.options import ConversionOptions
from kepub_tools.converters.kepub import (
    HYPHENATE_CSS,
    NO_HYPHENATE_CSS,
    build_extra_css,
    inject_style,
    inline_stylesheets,
)
from kepub_tools.errors import ConversionFailure


def _chapter(path: Path) -> str:
    with zipfile.ZipFile(path) as zf:
        return zf.read("OEBPS/chapter1.xhtml").decode("utf-8")


def test_build_extra_css_combines_sections() -> None:
    """Collect hyphenation, fullscreen and user CSS in a fixed order."""
    assert build_extra_css(ConversionOptions()) == ""
    assert build_extra_css(ConversionOptions(hyphenate=True)) == HYPHENATE_CSS
    assert build_extra_css(ConversionOptions(hyphenate=False)) == NO_HYPHENATE_CSS
    css = build_extra_css(
        ConversionOptions(extra_css=" p { color: red; } ", fullscreen_fixes=True)
    )
    assert css.endswith("p { color: red; }")
    assert "margin: 0" in css


def test_inject_style_without_head_is_noop() -> None:
    """Leave documents without a head element unchanged."""
    soup = BeautifulSoup("<html><body></body></html>", "html.parser")
    assert inject_style(soup, "p {}") is False
    assert soup.find("style") is None

    soup = BeautifulSoup("<html><head></head></html>", "html.parser")
    assert inject_style(soup, "") is False


def test_inject_style_ignores_head_markup_in_comments() -> None:
    """Only the real head element receives the style."""
    soup = BeautifulSoup(
        "<html><head><!-- </head> --><title>T</title></head><body></body></html>",
        "html.parser",
    )

    assert inject_style(soup, "p { margin: 0; }")

    style = soup.head.find("style")
    assert style is not None
    assert style.get_text().strip() == "p { margin: 0; }"
    assert "kepub-tools" in style["class"]


def test_inline_stylesheets_skips_alternate_and_handles_unquoted(
    tmp_path: Path,
) -> None:
    """Inline primary stylesheets only, whatever the attribute quoting."""
    book = tmp_path / "styles.epub"
    with zipfile.ZipFile(book, "w") as zf:
        zf.writestr("OEBPS/day.css", "body { color: black; }")
        zf.writestr("OEBPS/night.css", "body { color: white; }")
    soup = BeautifulSoup(
        "<html><head>"
        "<link rel=stylesheet href=day.css>"
        '<link rel="alternate stylesheet" href="night.css"/>'
        "</head><body></body></html>",
        "html.parser",
    )

    with zipfile.ZipFile(book) as archive:
        replaced = inline_stylesheets(soup, "OEBPS/chapter.xhtml", archive)

    assert replaced == 1
    html = str(soup)
    assert "color: black" in html
    assert "color: white" not in html
    assert soup.find("link")["href"] == "night.css"


def test_converter_keeps_mimetype_first_and_stored(
    tmp_path: Path, make_epub: Callable[..., Path]
) -> None:
    """Write the mimetype entry first, uncompressed, and copy other entries."""
    source = make_epub(tmp_path / "in.epub")
    target = tmp_path / "out.kepub.epub"

    KepubConverter().convert(source, target, ConversionOptions())

    with zipfile.ZipFile(target) as zf:
        infos = zf.infolist()
        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert zf.read("mimetype") == b"application/epub+zip"
        assert "OEBPS/content.opf" in zf.namelist()
        assert zf.read("OEBPS/style.css") == b"p { text-indent: 1em; }"


def test_converter_applies_replacements_and_css(
    tmp_path: Path, make_epub: Callable[..., Path]
) -> None:
    """Apply replacements in order and inject styles before </head>."""
    source = make_epub(tmp_path / "in.epub", body="Colour and colour.")
    target = tmp_path / "out.kepub.epub"
    options = ConversionOptions(
        extra_css="p { margin: 0; }",
        hyphenate=True,
        replacements=(("Colour", "Color"), ("Color and", "Color &amp;")),
    )

    KepubConverter().convert(source, target, options)

    chapter = _chapter(target)
    assert "Color &amp; colour." in chapter
    assert chapter.index("p { margin: 0; }") < chapter.index("</head>")
    assert "hyphens: auto" in chapter


def test_converter_inlines_stylesheets(
    tmp_path: Path, make_epub: Callable[..., Path]
) -> None:
    """Replace stylesheet links with the linked CSS when requested."""
    source = make_epub(tmp_path / "in.epub")
    target = tmp_path / "out.kepub.epub"

    KepubConverter().convert(source, target, ConversionOptions(inline_styles=True))

    chapter = _chapter(target)
    assert "<link" not in chapter
    assert "text-indent: 1em" in chapter


def test_converter_failure_removes_partial_output(tmp_path: Path) -> None:
    """Raise ConversionFailure and leave no output behind."""
    source = tmp_path / "broken.epub"
    source.write_text("not a zip")
    target = tmp_path / "out.kepub.epub"

    with pytest.raises(ConversionFailure, match="broken.epub"):
        KepubConverter().convert(source, target, ConversionOptions())

    assert not target.exists()


def test_converter_removes_output_when_an_entry_is_corrupt(
    tmp_path: Path,
    make_epub: Callable[..., Path],
    corrupt: Callable[[Path, str], Path],
) -> None:
    """A damaged entry found mid-copy leaves no partial output behind."""
    source = corrupt(make_epub(tmp_path / "damaged.epub"), "OEBPS/chapter1.xhtml")
    target = tmp_path / "out.kepub.epub"

    with pytest.raises(ConversionFailure, match="damaged.epub"):
        KepubConverter().convert(source, target, ConversionOptions())

    assert not target.exists()

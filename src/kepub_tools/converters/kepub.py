"""EPUB repackaging with reader-specific styling tweaks."""

from __future__ import annotations

import logging
import posixpath
import zipfile
import zlib
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.element import Tag

from kepub_tools.application.options import ConversionOptions
from kepub_tools.errors import ConversionFailure

logger = logging.getLogger(__name__)

MIMETYPE_ENTRY = "mimetype"
EPUB_MIMETYPE = b"application/epub+zip"
CONTENT_SUFFIXES = (".html", ".xhtml", ".htm")

HYPHENATE_CSS = (
    "* { -webkit-hyphens: auto; -webkit-hyphenate-limit-after: 3; "
    "-webkit-hyphenate-limit-before: 3; -webkit-hyphenate-limit-lines: 2; "
    "hyphens: auto; }\n"
    "h1, h2, h3, h4, h5, h6, td { -webkit-hyphens: none !important; "
    "hyphens: none !important; }"
)
NO_HYPHENATE_CSS = "* { -webkit-hyphens: none !important; hyphens: none !important; }"
FULLSCREEN_CSS = (
    "html, body { margin: 0 !important; padding: 0 !important; }\n"
    "body > div { padding-left: 0.2em !important; padding-right: 0.2em !important; }"
)


def build_extra_css(options: ConversionOptions) -> str:
    """Combine the stylesheet text injected into every content document."""
    parts = []
    if options.hyphenate is True:
        parts.append(HYPHENATE_CSS)
    elif options.hyphenate is False:
        parts.append(NO_HYPHENATE_CSS)
    if options.fullscreen_fixes:
        parts.append(FULLSCREEN_CSS)
    if options.extra_css.strip():
        parts.append(options.extra_css.strip())
    return "\n".join(parts)


def apply_replacements(text: str, options: ConversionOptions) -> str:
    """Apply literal find/replace pairs in order."""
    for find, replace in options.replacements:
        text = text.replace(find, replace)
    return text


def _is_stylesheet_link(link: Tag) -> bool:
    rel = link.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    values = {value.lower() for value in rel}
    return "stylesheet" in values and "alternate" not in values


def _new_style(soup: BeautifulSoup, css: str, css_class: str | None = None) -> Tag:
    attrs = {"type": "text/css"}
    if css_class:
        attrs["class"] = css_class
    style = soup.new_tag("style", attrs=attrs)
    style.string = f"\n{css}\n"
    return style


def inline_stylesheets(
    soup: BeautifulSoup, entry_name: str, archive: zipfile.ZipFile
) -> int:
    """Replace ``<link rel="stylesheet">`` tags with the referenced CSS.

    Alternate stylesheets and links to entries missing from the archive are
    left alone. Returns the number of links replaced.
    """
    base = posixpath.dirname(entry_name)
    replaced = 0
    for link in soup.find_all("link"):
        href = link.get("href")
        if not _is_stylesheet_link(link) or not isinstance(href, str) or not href:
            continue
        target = posixpath.normpath(posixpath.join(base, href.split("#", 1)[0]))
        try:
            css = archive.read(target).decode("utf-8", errors="replace")
        except KeyError:
            logger.debug("stylesheet %s missing from archive", target)
            continue
        link.replace_with(_new_style(soup, css))
        replaced += 1
    return replaced


def inject_style(soup: BeautifulSoup, css: str) -> bool:
    """Append a ``<style>`` element to the document head.

    Returns ``False`` when there is nothing to add or the document has no head.
    """
    if not css or soup.head is None:
        return False
    soup.head.append(_new_style(soup, css, css_class="kepub-tools"))
    return True


def transform_document(
    text: str,
    entry_name: str,
    archive: zipfile.ZipFile,
    options: ConversionOptions,
    css: str,
) -> str:
    """Apply all text-level tweaks to one content document."""
    text = apply_replacements(text, options)
    if not options.inline_styles and not css:
        return text

    soup = BeautifulSoup(text, "html.parser")
    changed = options.inline_styles and inline_stylesheets(soup, entry_name, archive) > 0
    changed = inject_style(soup, css) or changed
    return str(soup) if changed else text


def convert_epub_to_kepub(
    input_path: Path,
    output_path: Path,
    options: ConversionOptions,
) -> Path:
    """Repackage ``input_path`` into ``output_path``.

    The ``mimetype`` entry is written first and uncompressed; content
    documents get the configured replacements and styles, every other entry is
    copied unchanged.

    Raises
    ------
    ConversionFailure
        If the input cannot be read or the output cannot be written. A
        partially written output is removed.
    """
    css = build_extra_css(options)
    try:
        with zipfile.ZipFile(input_path) as source, zipfile.ZipFile(
            output_path, "w", compression=zipfile.ZIP_DEFLATED
        ) as target:
            mimetype = EPUB_MIMETYPE
            if MIMETYPE_ENTRY in source.namelist():
                mimetype = source.read(MIMETYPE_ENTRY).strip() or EPUB_MIMETYPE
            target.writestr(MIMETYPE_ENTRY, mimetype, compress_type=zipfile.ZIP_STORED)

            for info in source.infolist():
                if info.filename == MIMETYPE_ENTRY or info.is_dir():
                    continue
                data = source.read(info)
                if info.filename.lower().endswith(CONTENT_SUFFIXES):
                    try:
                        text = data.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.debug("leaving non-utf8 document %s untouched", info.filename)
                    else:
                        data = transform_document(
                            text, info.filename, source, options, css
                        ).encode("utf-8")
                target.writestr(info.filename, data)
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError) as exc:
        output_path.unlink(missing_ok=True)
        raise ConversionFailure(f"could not convert '{input_path.name}': {exc}") from exc
    return output_path

"""Shared pytest configuration, marker assignment and EPUB builders."""

from __future__ import annotations

import sqlite3
import struct
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

CONTAINER_XML = """<?xml version='1.0' encoding='utf-8'?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{rootfile}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CHAPTER_XHTML = """<?xml version='1.0' encoding='utf-8'?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>Chapter</title><link rel="stylesheet" type="text/css" href="style.css"/></head>
  <body><p>{body}</p></body>
</html>
"""


def build_opf(metadata: str = "") -> str:
    """Return a minimal OPF document with extra ``metadata`` children."""
    return (
        "<?xml version='1.0' encoding='utf-8'?>\n"
        '<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="id">\n'
        '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" '
        'xmlns:opf="http://www.idpf.org/2007/opf">\n'
        '    <dc:identifier id="id">test-book</dc:identifier>\n'
        "    <dc:title>Test Book</dc:title>\n"
        f"    {metadata}\n"
        "  </metadata>\n"
        "  <manifest>\n"
        '    <item id="c1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>\n'
        "  </manifest>\n"
        '  <spine><itemref idref="c1"/></spine>\n'
        "</package>\n"
    )


def series_meta(name: str | None = None, index: str | None = None) -> str:
    """Calibre-style series ``<meta>`` elements."""
    parts = []
    if name is not None:
        parts.append(f'<meta name="calibre:series" content="{name}"/>')
    if index is not None:
        parts.append(f'<meta name="calibre:series_index" content="{index}"/>')
    return "\n    ".join(parts)


def write_epub(
    path: Path,
    *,
    metadata: str = "",
    body: str = "Hello world.",
    rootfile: str = "OEBPS/content.opf",
    container: str | None = None,
    opf: str | None = None,
) -> Path:
    """Write a small but structurally valid EPUB to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr(
            "META-INF/container.xml",
            container if container is not None else CONTAINER_XML.format(rootfile=rootfile),
        )
        zf.writestr(rootfile, opf if opf is not None else build_opf(metadata))
        zf.writestr("OEBPS/chapter1.xhtml", CHAPTER_XHTML.format(body=body))
        zf.writestr("OEBPS/style.css", "p { text-indent: 1em; }")
    return path


@pytest.fixture
def make_epub() -> Callable[..., Path]:
    """Factory fixture writing EPUB files."""
    return write_epub


@pytest.fixture
def kobo_root(tmp_path: Path) -> Path:
    """Fake device root with an empty ``content`` catalog table."""
    root = tmp_path / "KOBOeReader"
    (root / ".kobo").mkdir(parents=True)
    with sqlite3.connect(root / ".kobo" / "KoboReader.sqlite") as conn:
        conn.execute(
            "CREATE TABLE content (ContentID TEXT, ImageID TEXT, Series TEXT, SeriesNumber TEXT)"
        )
    return root


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def meta() -> Callable[..., str]:
    """Factory fixture for calibre series ``<meta>`` markup."""
    return series_meta


def corrupt_entry(path: Path, name: str) -> Path:
    """Overwrite the compressed bytes of a deflated entry in place."""
    with zipfile.ZipFile(path) as zf:
        info = zf.getinfo(name)
    with path.open("r+b") as fh:
        fh.seek(info.header_offset + 26)
        name_len, extra_len = struct.unpack("<HH", fh.read(4))
        fh.seek(info.header_offset + 30 + name_len + extra_len)
        fh.write(b"\xff" * info.compress_size)
    return path


@pytest.fixture
def corrupt() -> Callable[[Path, str], Path]:
    """Factory fixture damaging one archive entry."""
    return corrupt_entry

"""Series metadata extraction from EPUB packages."""

from __future__ import annotations

import logging
import posixpath
import zipfile
import zlib
from collections.abc import Iterator
from pathlib import Path
from xml.etree import ElementTree as ET

from kepub_tools.application.results import PackageMetadata
from kepub_tools.errors import ArchiveError, MalformedContainerError, MalformedPackageError

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
SERIES_NAME_KEY = "calibre:series"
SERIES_INDEX_KEY = "calibre:series_index"

# Raised by ZipFile for unreadable archives and corrupt, truncated or encrypted entries.
ARCHIVE_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    OSError,
    RuntimeError,
)


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_local(root: ET.Element, name: str) -> Iterator[ET.Element]:
    """Iterate elements named ``name`` in any namespace, in document order."""
    for element in root.iter():
        if _local_name(element.tag) == name:
            yield element


def _parse_float(raw: str | None) -> float | None:
    """Parse a plain decimal number; padding and digit separators are rejected."""
    if raw is None or raw != raw.strip() or "_" in raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _read_entry(archive: zipfile.ZipFile, name: str, package_path: Path) -> bytes:
    try:
        return archive.read(name)
    except KeyError as exc:
        raise ArchiveError(f"'{package_path}' has no entry '{name}'") from exc
    except ARCHIVE_READ_ERRORS as exc:
        raise ArchiveError(f"could not read '{name}' from '{package_path}': {exc}") from exc


def find_rootfile(container_xml: bytes) -> str:
    """Return the archive path of the primary content document.

    Raises
    ------
    MalformedContainerError
        If the container cannot be parsed or names no ``rootfile``.
    """
    try:
        root = ET.fromstring(container_xml)
    except ET.ParseError as exc:
        raise MalformedContainerError(f"Cannot parse container: {exc}") from exc
    for rootfile in _iter_local(root, "rootfile"):
        full_path = rootfile.get("full-path", "").strip()
        if full_path:
            return posixpath.normpath(full_path.lstrip("/"))
    raise MalformedContainerError("Cannot parse container: no rootfile full-path")


def _epub3_series(root: ET.Element) -> PackageMetadata | None:
    """Series info from ``belongs-to-collection`` refinements, if present."""
    metas = list(_iter_local(root, "meta"))
    for meta in metas:
        if meta.get("property") != "belongs-to-collection":
            continue
        name = (meta.text or "").strip()
        index = None
        collection_id = meta.get("id")
        if collection_id:
            for refinement in metas:
                if (
                    refinement.get("refines") == f"#{collection_id}"
                    and refinement.get("property") == "group-position"
                ):
                    index = _parse_float((refinement.text or "").strip())
                    if index is not None:
                        break
        return PackageMetadata(series_name=name, series_index=index)
    return None


def parse_series_metadata(opf_xml: bytes) -> PackageMetadata:
    """Read series name and index from an OPF document.

    Calibre ``<meta name="calibre:series" content="…"/>`` entries are
    preferred; EPUB 3 ``belongs-to-collection`` metadata is used when no
    calibre series name exists. For the index, the first entry with a numeric
    value wins.
    """
    try:
        root = ET.fromstring(opf_xml)
    except ET.ParseError as exc:
        raise MalformedPackageError(f"Cannot parse content document: {exc}") from exc

    series_name: str | None = None
    series_index: float | None = None
    for meta in _iter_local(root, "meta"):
        key = meta.get("name")
        if key == SERIES_NAME_KEY and series_name is None:
            series_name = meta.get("content", "")
        elif key == SERIES_INDEX_KEY and series_index is None:
            series_index = _parse_float(meta.get("content"))

    if series_name is None:
        fallback = _epub3_series(root)
        if fallback is not None:
            return PackageMetadata(
                series_name=fallback.series_name,
                series_index=series_index if series_index is not None else fallback.series_index,
            )
    return PackageMetadata(series_name=series_name, series_index=series_index)


def read_package_metadata(package_path: Path) -> PackageMetadata:
    """Extract series metadata from an EPUB file.

    Parameters
    ----------
    package_path : Path
        Path to the ``.epub`` archive.

    Returns
    -------
    PackageMetadata
        Series name and index; either may be ``None``.

    Raises
    ------
    ArchiveError
        If the file is not a readable zip or misses a required entry.
    MalformedContainerError
        If ``META-INF/container.xml`` names no content document.
    MalformedPackageError
        If the content document is not well-formed.
    """
    try:
        archive = zipfile.ZipFile(package_path)
    except ARCHIVE_READ_ERRORS as exc:
        raise ArchiveError(f"could not open '{package_path}': {exc}") from exc

    with archive:
        rootfile = find_rootfile(_read_entry(archive, CONTAINER_PATH, package_path))
        logger.debug("rootfile for %s: %s", package_path, rootfile)
        return parse_series_metadata(_read_entry(archive, rootfile, package_path))


class EpubMetadataReader:
    """Default ``MetadataReader`` backed by :func:`read_package_metadata`."""

    def read(self, package_path: Path) -> PackageMetadata:
        return read_package_metadata(package_path)

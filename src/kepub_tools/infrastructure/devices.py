"""Locate and validate e-reader mount points."""

from __future__ import annotations

import getpass
import logging
import os
import string
import sys
from collections.abc import Iterable
from pathlib import Path

from kepub_tools.errors import DeviceNotFoundError

logger = logging.getLogger(__name__)

DEVICE_DIR = ".kobo"
CATALOG_NAME = "KoboReader.sqlite"


def catalog_path(device_root: Path) -> Path:
    """Path of the catalog database on a device."""
    return device_root / DEVICE_DIR / CATALOG_NAME


def is_device(path: Path) -> bool:
    """Return whether ``path`` looks like the root of a mounted e-reader."""
    return (path / DEVICE_DIR).is_dir()


def default_search_roots() -> list[Path]:
    """Directories whose children are candidate mount points on this platform."""
    if sys.platform == "win32":
        return []
    if sys.platform == "darwin":
        return [Path("/Volumes")]
    user = os.environ.get("USER") or getpass.getuser()
    return [Path("/media") / user, Path("/run/media") / user, Path("/media"), Path("/mnt")]


def _windows_drives() -> list[Path]:
    return [Path(f"{letter}:\\") for letter in string.ascii_uppercase]


def find_devices(search_roots: Iterable[Path] | None = None) -> list[Path]:
    """List mounted devices, sorted and without duplicates."""
    candidates: list[Path] = []
    if search_roots is None and sys.platform == "win32":
        candidates.extend(_windows_drives())
    for root in default_search_roots() if search_roots is None else search_roots:
        try:
            candidates.extend(child for child in root.iterdir() if child.is_dir())
        except OSError:
            logger.debug("cannot scan %s", root)
    found = {candidate.resolve() for candidate in candidates if _safe_is_device(candidate)}
    return sorted(found)


def _safe_is_device(path: Path) -> bool:
    try:
        return is_device(path)
    except OSError:
        return False


def resolve_device_root(
    path: str | os.PathLike[str] | None = None,
    *,
    search_roots: Iterable[Path] | None = None,
) -> Path:
    """Return a validated absolute device root.

    Parameters
    ----------
    path : str | os.PathLike | None, default=None
        Explicit root; a path to the ``.kobo`` directory itself is accepted.
        When omitted, the first detected device is used.
    search_roots : Iterable[Path] | None, default=None
        Override for auto-detection scan locations.

    Raises
    ------
    DeviceNotFoundError
        If no device is detected or ``path`` is not a device root.
    """
    if path is None:
        devices = find_devices(search_roots)
        if not devices:
            raise DeviceNotFoundError("could not automatically detect a kobo")
        logger.debug("detected devices: %s", devices)
        return devices[0]

    root = Path(path).absolute()
    if root.name == DEVICE_DIR:
        root = root.parent
    if not is_device(root):
        raise DeviceNotFoundError(f"'{root}' is not a valid kobo")
    return root

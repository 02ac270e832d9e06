"""Unit tests for device detection and catalog backups."""

from __future__ import annotations

from pathlib import Path

import pytest

from kepub_tools.errors import BackupError, DeviceNotFoundError
from kepub_tools.infrastructure.backup import backup_catalog
from kepub_tools.infrastructure.devices import (
    catalog_path,
    find_devices,
    is_device,
    resolve_device_root,
)


def test_is_device_and_catalog_path(kobo_root: Path, tmp_path: Path) -> None:
    """A device root is recognised by its .kobo directory."""
    assert is_device(kobo_root)
    assert not is_device(tmp_path)
    assert catalog_path(kobo_root) == kobo_root / ".kobo" / "KoboReader.sqlite"


def test_find_devices_scans_search_roots(tmp_path: Path) -> None:
    """Return only mount points carrying a .kobo directory."""
    media = tmp_path / "media"
    (media / "KOBOeReader" / ".kobo").mkdir(parents=True)
    (media / "USBSTICK").mkdir()

    assert find_devices([media, tmp_path / "missing"]) == [
        (media / "KOBOeReader").resolve()
    ]


def test_resolve_device_root_accepts_kobo_dir(kobo_root: Path) -> None:
    """Map an explicit .kobo directory to the device root."""
    assert resolve_device_root(kobo_root) == kobo_root
    assert resolve_device_root(kobo_root / ".kobo") == kobo_root


def test_resolve_device_root_rejects_non_device(tmp_path: Path) -> None:
    """Fail for a directory that is not a device."""
    with pytest.raises(DeviceNotFoundError, match="not a valid kobo"):
        resolve_device_root(tmp_path)


def test_resolve_device_root_autodetect(tmp_path: Path) -> None:
    """Pick the first detected device, or fail when none is present."""
    media = tmp_path / "media"
    (media / "B" / ".kobo").mkdir(parents=True)
    (media / "A" / ".kobo").mkdir(parents=True)

    assert resolve_device_root(search_roots=[media]) == (media / "A").resolve()
    with pytest.raises(DeviceNotFoundError, match="automatically detect"):
        resolve_device_root(search_roots=[tmp_path / "empty"])


def test_backup_catalog_copies_bytes(tmp_path: Path) -> None:
    """Write a byte-identical sibling copy with a .bak suffix."""
    db = tmp_path / "KoboReader.sqlite"
    payload = bytes(range(256)) * 64
    db.write_bytes(payload)

    backup = backup_catalog(db)

    assert backup == tmp_path / "KoboReader.sqlite.bak"
    assert backup.read_bytes() == payload


def test_backup_catalog_failure(tmp_path: Path) -> None:
    """Raise BackupError when the source is missing."""
    with pytest.raises(BackupError, match="Could not make copy"):
        backup_catalog(tmp_path / "KoboReader.sqlite")

"""Verbatim catalog backups taken before any write."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from kepub_tools.errors import BackupError

BACKUP_SUFFIX = ".bak"


def backup_catalog(db_path: Path, backup_path: Path | None = None) -> Path:
    """Copy ``db_path`` byte-for-byte and flush the copy to disk.

    Parameters
    ----------
    db_path : Path
        Catalog file to back up.
    backup_path : Path | None, default=None
        Destination; defaults to ``db_path`` with ``.bak`` appended.

    Returns
    -------
    Path
        Path of the written backup.

    Raises
    ------
    BackupError
        If the copy cannot be written or flushed.
    """
    target = backup_path or db_path.with_name(db_path.name + BACKUP_SUFFIX)
    try:
        with db_path.open("rb") as src, target.open("wb") as dst:
            shutil.copyfileobj(src, dst)
            dst.flush()
            os.fsync(dst.fileno())
    except OSError as exc:
        raise BackupError(f"Could not make copy of {db_path.name}: {exc}") from exc
    return target

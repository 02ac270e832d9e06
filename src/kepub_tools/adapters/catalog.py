"""SQLite adapter for the device catalog (``KoboReader.sqlite``)."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from types import TracebackType

from kepub_tools.errors import DatabaseError

logger = logging.getLogger(__name__)

UPDATE_SERIES_SQL = "UPDATE content SET Series=?, SeriesNumber=? WHERE ImageID=?"


class SqliteCatalog:
    """Device catalog accessed through one parameterized UPDATE per book.

    The connection runs in autocommit mode, so every update is committed on
    its own and an interrupted run keeps the updates applied so far.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def open(self) -> SqliteCatalog:
        if self._conn is not None:
            return self
        if not self.db_path.is_file():
            raise DatabaseError(f"catalog '{self.db_path}' does not exist")
        try:
            self._conn = sqlite3.connect(self.db_path, isolation_level=None)
        except sqlite3.Error as exc:
            raise DatabaseError(f"could not open '{self.db_path}': {exc}") from exc
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SqliteCatalog:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def update_series(
        self,
        image_id: str,
        series_name: str | None,
        series_index: str | None,
    ) -> int:
        """Set ``Series``/``SeriesNumber`` on rows matching ``image_id``.

        Returns
        -------
        int
            Number of rows affected.

        Raises
        ------
        DatabaseError
            If the catalog is not open or the statement fails.
        """
        if self._conn is None:
            raise DatabaseError("catalog is not open")
        try:
            cursor = self._conn.execute(
                UPDATE_SERIES_SQL, (series_name, series_index, image_id)
            )
        except sqlite3.Error as exc:
            raise DatabaseError(f"could not update database: {exc}") from exc
        logger.debug("update %s -> %d row(s)", image_id, cursor.rowcount)
        return cursor.rowcount

"""
Metadata store client

Read-only access to the SQLite database edgecore keeps its cached
resources in. Every row of the ``meta`` table is one serialized object:

    key    TEXT  "<namespace>/<kind>/<name>"
    type   TEXT  resource kind
    value  TEXT  JSON body

Usage:
    with MetaStore('/var/lib/kubeedge/edgecore.db') as store:
        records = store.query('key', 'default/pod/nginx')
"""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

META_TABLE = 'meta'
QUERY_FIELDS = ('key', 'type')


class MetaStoreError(Exception):
    """Base error for metadata store access."""


class StoreOpenError(MetaStoreError):
    """The database could not be opened."""


class StoreQueryError(MetaStoreError):
    """A query against an open database failed."""


def meta_key(namespace: str, kind: str, name: str) -> str:
    """Build the composite key records are stored under."""
    return f"{namespace}/{kind}/{name}"


class MetaStore:
    """
    Lazily opened, read-only handle on the edgecore metadata database.

    The connection is created on the first open() or query() and reused
    for every later query until close().
    """

    def __init__(self, path: Union[str, Path], timeout: float = 5.0):
        self.path = Path(path)
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """
        Open the database if it is not open yet.

        Raises:
            StoreOpenError: if the file is missing or is not a database
        """
        if self._conn is not None:
            return

        if not self.path.is_file():
            raise StoreOpenError(f"database file {self.path} does not exist")

        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, timeout=self.timeout)
            # Force a schema read so a non-database file fails here
            conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
        except sqlite3.Error as e:
            raise StoreOpenError(f"cannot open database {self.path}: {e}") from e

        logger.debug(f"Opened metadata store {self.path}")
        self._conn = conn

    def query(self, field: str, value: str) -> List[str]:
        """
        Return the serialized records whose ``field`` equals ``value``.

        Args:
            field: Column to match, 'key' or 'type'
            value: Value to match exactly

        Returns:
            Record bodies in insertion order (possibly empty)

        Raises:
            ValueError: if field is not a queryable column
            StoreOpenError: if the lazy open fails
            StoreQueryError: if the query itself fails
        """
        if field not in QUERY_FIELDS:
            raise ValueError(f"cannot query meta by {field!r}")

        self.open()
        sql = f"SELECT value FROM {META_TABLE} WHERE {field} = ? ORDER BY rowid"
        try:
            rows = self._conn.execute(sql, (value,)).fetchall()
        except sqlite3.Error as e:
            raise StoreQueryError(f"read database fail: {e}") from e

        logger.debug(f"meta query {field}={value!r} -> {len(rows)} row(s)")
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the connection if one is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed metadata store {self.path}")

    def __enter__(self) -> 'MetaStore':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

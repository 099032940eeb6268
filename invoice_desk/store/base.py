"""
Local record store.

A small keyed document store on top of SQLite. Every partition is a table of
JSON documents keyed by identifier; secondary indexes are SQLite expression
indexes over fields of the document, so lookups by name, email, status or
date do not scan the whole partition.

Each write commits on its own. There is no transaction spanning several
calls.
"""
from __future__ import annotations
import json
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generator, Iterable, Optional, Union
from loguru import logger
from pydantic import TypeAdapter

from ..errors import DuplicateKeyError, StorageUnavailableError
from .partitions import DEFAULT_PARTITIONS, Partition

# Same text form pydantic writes into stored documents (UTC as "Z")
_DATETIMES = TypeAdapter(datetime)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return _DATETIMES.dump_python(value, mode="json")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _index_value(value: Any) -> Any:
    """Convert a lookup value to the form it has inside stored documents."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return _DATETIMES.dump_python(value, mode="json")
    if isinstance(value, date):
        return value.isoformat()
    return value


class RecordStore:
    """
    Keyed record storage with secondary indexes.

    The store opens its database lazily on first use; ``init()`` may also be
    called explicitly and is idempotent. Use it as a context manager (or call
    ``close()``) to release the connection.

    Usage:
        with RecordStore("invoice_desk.db") as store:
            store.add("customers", {"id": "c1", "name": "Acme"})
            store.query_by_index("customers", "by_name", "Acme")
    """

    def __init__(
        self,
        path: Union[str, Path] = ":memory:",
        partitions: Iterable[Partition] = DEFAULT_PARTITIONS,
    ):
        self.path = str(path)
        self.partitions = {p.name: p for p in partitions}
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the database connection, initializing the store if needed."""
        if self._conn is None:
            self.init()
        return self._conn

    def init(self) -> None:
        """Open the database and create partitions and indexes if missing."""
        if self._conn is not None:
            return

        with self._storage_errors("open store"):
            conn = sqlite3.connect(self.path)
            try:
                with conn:
                    for partition in self.partitions.values():
                        self._create_partition(conn, partition)
            except sqlite3.Error:
                conn.close()
                raise
        self._conn = conn
        logger.info(f"Opened record store at {self.path} ({', '.join(self.partitions)})")

    def _create_partition(self, conn: sqlite3.Connection, partition: Partition) -> None:
        conn.execute(
            f'CREATE TABLE IF NOT EXISTS "{partition.name}" '
            "(id TEXT PRIMARY KEY, data TEXT NOT NULL)"
        )
        for index_name, field_name in partition.indexes.items():
            conn.execute(
                f'CREATE INDEX IF NOT EXISTS "{partition.name}_{index_name}" '
                f"ON \"{partition.name}\" (json_extract(data, '$.{field_name}'))"
            )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def _storage_errors(self, action: str) -> Generator:
        """Translate engine failures into ``StorageUnavailableError``."""
        try:
            yield
        except sqlite3.Error as e:
            logger.error(f"Record store failed to {action}: {e}")
            raise StorageUnavailableError(f"Failed to {action}: {e}") from e

    def _partition(self, name: str) -> Partition:
        try:
            return self.partitions[name]
        except KeyError:
            raise ValueError(
                f"Unknown partition: {name}. Valid: {list(self.partitions)}"
            ) from None

    def _index_field(self, partition: Partition, index_name: str) -> str:
        try:
            return partition.indexes[index_name]
        except KeyError:
            raise ValueError(
                f"Unknown index {index_name} on {partition.name}. "
                f"Valid: {list(partition.indexes)}"
            ) from None

    def _key_of(self, partition: Partition, record: dict) -> str:
        key = record.get(partition.key_field)
        if not key:
            raise ValueError(f"Record for {partition.name} has no {partition.key_field!r}")
        return str(key)

    def _fetch(self, sql: str, params: tuple = ()) -> list[dict]:
        rows = self.conn.execute(sql, params).fetchall()
        return [json.loads(row[0]) for row in rows]

    def get_all(self, partition: str) -> list[dict]:
        """Return every record in a partition, in insertion order."""
        p = self._partition(partition)
        with self._storage_errors(f"read {p.name}"):
            return self._fetch(f'SELECT data FROM "{p.name}" ORDER BY rowid')

    def get(self, partition: str, key: str) -> Optional[dict]:
        """Return the record stored under ``key``, or None if there is none."""
        p = self._partition(partition)
        with self._storage_errors(f"read {p.name}"):
            row = self.conn.execute(
                f'SELECT data FROM "{p.name}" WHERE id = ?', (key,)
            ).fetchone()
        return json.loads(row[0]) if row else None

    def add(self, partition: str, record: dict) -> dict:
        """
        Insert a new record.

        Returns:
            The record as stored

        Raises:
            DuplicateKeyError: If a record with the same identifier exists
            StorageUnavailableError: If the write fails
        """
        p = self._partition(partition)
        key = self._key_of(p, record)
        data = json.dumps(record, default=_json_default)
        with self._storage_errors(f"write {p.name}"):
            try:
                with self.conn:
                    self.conn.execute(
                        f'INSERT INTO "{p.name}" (id, data) VALUES (?, ?)', (key, data)
                    )
            except sqlite3.IntegrityError as e:
                raise DuplicateKeyError(p.name, key) from e
        logger.debug(f"Added {key} to {p.name}")
        return json.loads(data)

    def put(self, partition: str, record: dict) -> dict:
        """Insert or replace a record. Replaced records keep their position."""
        p = self._partition(partition)
        key = self._key_of(p, record)
        data = json.dumps(record, default=_json_default)
        with self._storage_errors(f"write {p.name}"):
            with self.conn:
                self.conn.execute(
                    f'INSERT INTO "{p.name}" (id, data) VALUES (?, ?) '
                    "ON CONFLICT(id) DO UPDATE SET data = excluded.data",
                    (key, data),
                )
        logger.debug(f"Stored {key} in {p.name}")
        return json.loads(data)

    def delete(self, partition: str, key: str) -> None:
        """Remove a record. Deleting a missing record is not an error."""
        p = self._partition(partition)
        with self._storage_errors(f"delete from {p.name}"):
            with self.conn:
                cur = self.conn.execute(f'DELETE FROM "{p.name}" WHERE id = ?', (key,))
        if cur.rowcount:
            logger.debug(f"Deleted {key} from {p.name}")

    def query_by_index(self, partition: str, index_name: str, value: Any) -> list[dict]:
        """Return all records whose indexed field equals ``value``."""
        p = self._partition(partition)
        field_name = self._index_field(p, index_name)
        with self._storage_errors(f"query {p.name}"):
            return self._fetch(
                f'SELECT data FROM "{p.name}" '
                f"WHERE json_extract(data, '$.{field_name}') = ? ORDER BY rowid",
                (_index_value(value),),
            )

    def query_range(
        self,
        partition: str,
        index_name: str,
        lower: Any = None,
        upper: Any = None,
    ) -> list[dict]:
        """
        Return records whose indexed field lies within [lower, upper].

        Either bound may be None for an open range. Results are ordered by
        the indexed field.
        """
        p = self._partition(partition)
        field_name = self._index_field(p, index_name)
        expr = f"json_extract(data, '$.{field_name}')"

        conditions = [f"{expr} IS NOT NULL"]
        params: list[Any] = []
        if lower is not None:
            conditions.append(f"{expr} >= ?")
            params.append(_index_value(lower))
        if upper is not None:
            conditions.append(f"{expr} <= ?")
            params.append(_index_value(upper))

        with self._storage_errors(f"query {p.name}"):
            return self._fetch(
                f'SELECT data FROM "{p.name}" WHERE {" AND ".join(conditions)} '
                f"ORDER BY {expr}, rowid",
                tuple(params),
            )

    def count(self, partition: str) -> int:
        """Get record count for a partition."""
        p = self._partition(partition)
        with self._storage_errors(f"read {p.name}"):
            row = self.conn.execute(f'SELECT COUNT(*) FROM "{p.name}"').fetchone()
        return row[0] if row else 0

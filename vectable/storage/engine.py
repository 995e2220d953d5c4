"""
SQLite Storage Backend

Persists collections as SQLite tables with:
- Explicit transaction control (autocommit connection, BEGIN IMMEDIATE)
- A deterministic hamming_distance() SQL function so Stage-1 candidate
  ordering runs inside the query planner
- WAL journaling for file databases

Stage-1 ordering: ascending Hamming distance, ties broken by ascending id.

Thread Safety:
- One connection per backend, statements serialized via an RLock
- The connection is owned by the caller for the duration of an operation
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from vectable.core.config import StorageConfig
from vectable.core.constants import SQLITE_MAX_INTEGER
from vectable.core.errors import (
    AlreadyExists,
    BackendFailure,
    Err,
    InvalidArgument,
    Ok,
    Result,
    VectorTableError,
)
from vectable.core.types import (
    Candidate,
    Collection,
    Encoding,
    RecordId,
    VectorRecord,
)
from vectable.index.distance import hamming
from vectable.index.quantization import from_blob
from vectable.storage.schema import (
    CATALOG_TABLE,
    escape_identifier,
    initialize_catalog,
    table_exists,
    vector_table_ddl,
    vector_table_name,
)

logger = logging.getLogger(__name__)

# SQLite's default bound-parameter ceiling is 999 on older builds
_SELECT_CHUNK = 500


def _table(name: str) -> str:
    return escape_identifier(vector_table_name(name))


def _hamming_udf(code_a: Optional[bytes], code_b: Optional[bytes]) -> Optional[int]:
    if code_a is None or code_b is None:
        return None
    return hamming(bytes(code_a), bytes(code_b))


class SQLiteBackend:
    """
    SQLite implementation of StorageBackendProtocol.

    Usage:
        with SQLiteBackend(StorageConfig(db_path=Path("vectors.db"))) as backend:
            manager = CollectionManager(backend)
            ...
    """

    __slots__ = ("_config", "_conn", "_lock", "_in_transaction")

    PRAGMAS = [
        "PRAGMA journal_mode = WAL",
        "PRAGMA synchronous = NORMAL",
        "PRAGMA temp_store = MEMORY",
    ]

    def __init__(self, config: Optional[StorageConfig] = None) -> None:
        self._config = config or StorageConfig()
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._in_transaction = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def open(self) -> Result[None, VectorTableError]:
        """Connect, apply pragmas, register SQL functions, ensure the catalog."""
        if self._conn is not None:
            return Ok(None)
        try:
            if not self._config.in_memory:
                self._config.db_path.parent.mkdir(parents=True, exist_ok=True)

            conn = sqlite3.connect(
                str(self._config.db_path),
                check_same_thread=False,
                isolation_level=None,  # Autocommit for explicit transaction control
                timeout=self._config.busy_timeout_ms / 1000,
            )
            conn.row_factory = sqlite3.Row
            if not self._config.in_memory:
                for pragma in self.PRAGMAS:
                    conn.execute(pragma)
            conn.create_function("hamming_distance", 2, _hamming_udf, deterministic=True)
            initialize_catalog(conn)
            self._conn = conn

            logger.info(
                "SQLite backend opened",
                extra={"db_path": str(self._config.db_path)},
            )
            return Ok(None)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"SQLite backend open failed: {e}")
            return Err(BackendFailure.from_exception(
                "open", e, db_path=str(self._config.db_path),
            ))

    def close(self) -> None:
        if self._conn is None:
            return
        if self._in_transaction:
            self._conn.execute("ROLLBACK")
            self._in_transaction = False
        self._conn.close()
        self._conn = None
        logger.info("SQLite backend closed")

    def __enter__(self) -> SQLiteBackend:
        self.open().unwrap()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def engine(self) -> str:
        return self._config.engine

    @property
    def max_blob_bytes(self) -> int:
        return self._config.max_blob_bytes

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._conn is None:
            raise sqlite3.ProgrammingError("SQLite backend is not open")
        with self._lock:
            yield self._conn

    def _decode(self, name: str, record_id: int, blob: bytes) -> Any:
        try:
            return from_blob(bytes(blob))
        except InvalidArgument as e:
            raise _CorruptRecord(BackendFailure.corrupted(name, record_id, e.message)) from e

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------
    def create_store(
        self,
        name: str,
        dimension: int,
        encoding: Encoding,
    ) -> Result[Collection, VectorTableError]:
        collection = Collection(
            name=name, dimension=dimension, engine=self.engine, encoding=encoding,
        )
        try:
            with self._connection() as conn:
                row = conn.execute(
                    f"SELECT 1 FROM {CATALOG_TABLE} WHERE name = ?", (name,),
                ).fetchone()
                if row is not None or table_exists(conn, collection.table_name):
                    return Err(AlreadyExists.collection(name))

                conn.execute(vector_table_ddl(
                    collection.table_name,
                    blob_length=collection.blob_length,
                    code_length=collection.code_length,
                ))
                conn.execute(
                    f"INSERT INTO {CATALOG_TABLE} (name, dimension, engine, encoding) "
                    "VALUES (?, ?, ?, ?)",
                    (name, dimension, self.engine, encoding.value),
                )
            return Ok(collection)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("create_store", e, collection=name))

    def drop_store(self, name: str) -> Result[bool, VectorTableError]:
        table = vector_table_name(name)
        try:
            with self._connection() as conn:
                existed = table_exists(conn, table)
                conn.execute(f"DROP TABLE IF EXISTS {escape_identifier(table)}")
                cursor = conn.execute(f"DELETE FROM {CATALOG_TABLE} WHERE name = ?", (name,))
                return Ok(existed or cursor.rowcount > 0)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("drop_store", e, collection=name))

    def describe_store(self, name: str) -> Result[Optional[Collection], VectorTableError]:
        try:
            with self._connection() as conn:
                row = conn.execute(
                    f"SELECT name, dimension, engine, encoding FROM {CATALOG_TABLE} "
                    "WHERE name = ?",
                    (name,),
                ).fetchone()
            if row is None:
                return Ok(None)
            return Ok(Collection(
                name=row["name"],
                dimension=int(row["dimension"]),
                engine=row["engine"],
                encoding=Encoding(row["encoding"]),
            ))
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("describe_store", e, collection=name))

    def list_stores(self) -> Result[list[Collection], VectorTableError]:
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    f"SELECT name, dimension, engine, encoding FROM {CATALOG_TABLE} "
                    "ORDER BY name",
                ).fetchall()
            return Ok([
                Collection(
                    name=r["name"],
                    dimension=int(r["dimension"]),
                    engine=r["engine"],
                    encoding=Encoding(r["encoding"]),
                )
                for r in rows
            ])
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("list_stores", e))

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    def insert(
        self,
        name: str,
        blob: bytes,
        binary_code: bytes,
    ) -> Result[RecordId, VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    f"INSERT INTO {table} (normalized_vector, binary_code) VALUES (?, ?)",
                    (sqlite3.Binary(blob), sqlite3.Binary(binary_code)),
                )
                return Ok(int(cursor.lastrowid))
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("insert", e, collection=name))

    def update_by_id(
        self,
        name: str,
        record_id: RecordId,
        blob: bytes,
        binary_code: bytes,
    ) -> Result[int, VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    f"UPDATE {table} SET normalized_vector = ?, binary_code = ? WHERE id = ?",
                    (sqlite3.Binary(blob), sqlite3.Binary(binary_code), int(record_id)),
                )
                return Ok(cursor.rowcount)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception(
                "update_by_id", e, collection=name, id=record_id,
            ))

    def select_by_ids(
        self,
        name: str,
        ids: Sequence[RecordId],
    ) -> Result[list[VectorRecord], VectorTableError]:
        if not ids:
            return Ok([])
        table = _table(name)
        unique_ids = list(dict.fromkeys(int(i) for i in ids))
        records: list[VectorRecord] = []
        try:
            with self._connection() as conn:
                for start in range(0, len(unique_ids), _SELECT_CHUNK):
                    chunk = unique_ids[start:start + _SELECT_CHUNK]
                    placeholders = ", ".join("?" for _ in chunk)
                    rows = conn.execute(
                        f"SELECT id, normalized_vector, binary_code FROM {table} "
                        f"WHERE id IN ({placeholders})",
                        chunk,
                    ).fetchall()
                    records.extend(self._to_record(name, row) for row in rows)
            return Ok(records)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("select_by_ids", e, collection=name))
        except _CorruptRecord as e:
            return Err(e.error)

    def select_all(self, name: str) -> Result[list[VectorRecord], VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    f"SELECT id, normalized_vector, binary_code FROM {table} ORDER BY id",
                ).fetchall()
            return Ok([self._to_record(name, row) for row in rows])
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("select_all", e, collection=name))
        except _CorruptRecord as e:
            return Err(e.error)

    def count(self, name: str) -> Result[int, VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                row = conn.execute(f"SELECT COUNT(id) FROM {table}").fetchone()
            return Ok(int(row[0]))
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("count", e, collection=name))

    def delete_by_id(self, name: str, record_id: RecordId) -> Result[int, VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (int(record_id),))
                return Ok(cursor.rowcount)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception(
                "delete_by_id", e, collection=name, id=record_id,
            ))

    def top_k_by_hamming_distance(
        self,
        name: str,
        query_code: bytes,
        k: int,
    ) -> Result[list[Candidate], VectorTableError]:
        table = _table(name)
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    f"SELECT id, normalized_vector FROM {table} "
                    "ORDER BY hamming_distance(binary_code, ?) ASC, id ASC "
                    "LIMIT ?",
                    (sqlite3.Binary(query_code), min(int(k), SQLITE_MAX_INTEGER)),
                ).fetchall()
            return Ok([
                Candidate(
                    id=int(row["id"]),
                    normalized_vector=self._decode(name, row["id"], row["normalized_vector"]),
                )
                for row in rows
            ])
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception(
                "top_k_by_hamming_distance", e, collection=name,
            ))
        except _CorruptRecord as e:
            return Err(e.error)

    def _to_record(self, name: str, row: sqlite3.Row) -> VectorRecord:
        return VectorRecord(
            id=int(row["id"]),
            normalized_vector=self._decode(name, row["id"], row["normalized_vector"]),
            binary_code=bytes(row["binary_code"]),
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------
    def begin(self) -> Result[None, VectorTableError]:
        if self._conn is None:
            return Err(BackendFailure.unavailable(self.engine))
        try:
            with self._connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                self._in_transaction = True
            return Ok(None)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("begin", e))

    def commit(self) -> Result[None, VectorTableError]:
        try:
            with self._connection() as conn:
                conn.execute("COMMIT")
                self._in_transaction = False
            return Ok(None)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("commit", e))

    def rollback(self) -> Result[None, VectorTableError]:
        try:
            with self._connection() as conn:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                self._in_transaction = False
            return Ok(None)
        except sqlite3.Error as e:
            return Err(BackendFailure.from_exception("rollback", e))


class _CorruptRecord(Exception):
    """Carries a BackendFailure out of a row-decoding comprehension."""

    def __init__(self, error: BackendFailure) -> None:
        super().__init__(error.message)
        self.error = error

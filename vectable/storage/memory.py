"""
In-Memory Storage Backend: Development and Testing Implementation

Full StorageBackendProtocol compliance without a database:
    - Monotonic per-collection ids, never reused after delete
    - Snapshot transactions: begin() copies the store map, rollback()
      restores it, commit() discards the snapshot
    - Stage-1 ordering by vectorized Hamming distance, ties by ascending id

Performance Characteristics:
    - insert/update/delete: O(1)
    - top_k_by_hamming_distance: O(n * code_length)
    - begin: O(n) shallow copy
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from vectable.core.constants import DEFAULT_ENGINE, PORTABLE_MAX_BLOB_BYTES
from vectable.core.errors import (
    AlreadyExists,
    BackendFailure,
    Err,
    NotFound,
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
from vectable.index.distance import hamming_batch
from vectable.index.quantization import from_blob

logger = logging.getLogger(__name__)


@dataclass
class _Store:
    """Records of one collection: id -> (blob, binary_code)."""
    collection: Collection
    records: dict[int, tuple[bytes, bytes]] = field(default_factory=dict)
    next_id: int = 1

    def copy(self) -> _Store:
        return _Store(
            collection=self.collection,
            records=dict(self.records),
            next_id=self.next_id,
        )


class InMemoryBackend:
    """
    Dict-backed implementation of StorageBackendProtocol.

    Example:
        backend = InMemoryBackend()
        manager = CollectionManager(backend)
        docs = manager.create("docs", 384).unwrap()
    """

    __slots__ = ("_stores", "_snapshot", "_engine", "_max_blob_bytes")

    def __init__(
        self,
        max_blob_bytes: int = PORTABLE_MAX_BLOB_BYTES,
        engine: str = "memory",
    ) -> None:
        self._stores: dict[str, _Store] = {}
        self._snapshot: Optional[dict[str, _Store]] = None
        self._engine = engine or DEFAULT_ENGINE
        self._max_blob_bytes = max_blob_bytes

    @property
    def engine(self) -> str:
        return self._engine

    @property
    def max_blob_bytes(self) -> int:
        return self._max_blob_bytes

    @property
    def in_transaction(self) -> bool:
        return self._snapshot is not None

    def _store(self, name: str) -> _Store:
        store = self._stores.get(name)
        if store is None:
            raise KeyError(name)
        return store

    def _missing(self, operation: str, name: str) -> Err[VectorTableError]:
        return Err(BackendFailure.from_exception(
            operation, NotFound.collection(name), collection=name,
        ))

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------
    def create_store(
        self,
        name: str,
        dimension: int,
        encoding: Encoding,
    ) -> Result[Collection, VectorTableError]:
        if name in self._stores:
            return Err(AlreadyExists.collection(name))
        collection = Collection(
            name=name, dimension=dimension, engine=self._engine, encoding=encoding,
        )
        self._stores[name] = _Store(collection=collection)
        return Ok(collection)

    def drop_store(self, name: str) -> Result[bool, VectorTableError]:
        return Ok(self._stores.pop(name, None) is not None)

    def describe_store(self, name: str) -> Result[Optional[Collection], VectorTableError]:
        store = self._stores.get(name)
        return Ok(store.collection if store is not None else None)

    def list_stores(self) -> Result[list[Collection], VectorTableError]:
        return Ok([self._stores[n].collection for n in sorted(self._stores)])

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    def insert(
        self,
        name: str,
        blob: bytes,
        binary_code: bytes,
    ) -> Result[RecordId, VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("insert", name)
        record_id = store.next_id
        store.records[record_id] = (bytes(blob), bytes(binary_code))
        store.next_id += 1
        return Ok(record_id)

    def update_by_id(
        self,
        name: str,
        record_id: RecordId,
        blob: bytes,
        binary_code: bytes,
    ) -> Result[int, VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("update_by_id", name)
        if record_id not in store.records:
            return Ok(0)
        store.records[record_id] = (bytes(blob), bytes(binary_code))
        return Ok(1)

    def select_by_ids(
        self,
        name: str,
        ids: Sequence[RecordId],
    ) -> Result[list[VectorRecord], VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("select_by_ids", name)
        records = []
        for record_id in dict.fromkeys(ids):
            entry = store.records.get(record_id)
            if entry is not None:
                records.append(VectorRecord(
                    id=record_id,
                    normalized_vector=from_blob(entry[0]),
                    binary_code=entry[1],
                ))
        return Ok(records)

    def select_all(self, name: str) -> Result[list[VectorRecord], VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("select_all", name)
        return Ok([
            VectorRecord(id=record_id, normalized_vector=from_blob(blob), binary_code=code)
            for record_id, (blob, code) in sorted(store.records.items())
        ])

    def count(self, name: str) -> Result[int, VectorTableError]:
        try:
            return Ok(len(self._store(name).records))
        except KeyError:
            return self._missing("count", name)

    def delete_by_id(self, name: str, record_id: RecordId) -> Result[int, VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("delete_by_id", name)
        return Ok(1 if store.records.pop(record_id, None) is not None else 0)

    def top_k_by_hamming_distance(
        self,
        name: str,
        query_code: bytes,
        k: int,
    ) -> Result[list[Candidate], VectorTableError]:
        try:
            store = self._store(name)
        except KeyError:
            return self._missing("top_k_by_hamming_distance", name)
        if not store.records or k <= 0:
            return Ok([])

        ids = np.fromiter(store.records.keys(), dtype=np.int64, count=len(store.records))
        codes = np.frombuffer(
            b"".join(code for _, code in store.records.values()),
            dtype=np.uint8,
        ).reshape(len(ids), -1)
        distances = hamming_batch(query_code, codes)

        # lexsort: last key is primary -> distance, then id
        order = np.lexsort((ids, distances))[:min(k, len(ids))]
        return Ok([
            Candidate(id=int(ids[i]), normalized_vector=from_blob(store.records[int(ids[i])][0]))
            for i in order
        ])

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------
    def begin(self) -> Result[None, VectorTableError]:
        if self._snapshot is not None:
            return Err(BackendFailure.from_exception(
                "begin", RuntimeError("transaction already active"),
            ))
        self._snapshot = {name: store.copy() for name, store in self._stores.items()}
        return Ok(None)

    def commit(self) -> Result[None, VectorTableError]:
        if self._snapshot is None:
            return Err(BackendFailure.from_exception(
                "commit", RuntimeError("no active transaction"),
            ))
        self._snapshot = None
        return Ok(None)

    def rollback(self) -> Result[None, VectorTableError]:
        if self._snapshot is not None:
            self._stores = self._snapshot
            self._snapshot = None
            logger.debug("In-memory transaction rolled back")
        return Ok(None)

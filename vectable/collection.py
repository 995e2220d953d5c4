"""
Collection Manager: Lifecycle and Record Writes

Owns every path by which vectors enter storage:

    vector -> L2 normalize (float64) -> round to binary32
           -> blob (binary32 LE) + binary code (sign bits of the blob vector)

Both persisted columns derive from the same binary32 vector, so a stored
code always matches its stored blob.

Multi-step writes (create, drop, batch insert) run inside one backend
transaction; any failure rolls the whole unit back.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

import numpy as np

from vectable.core.config import SearchConfig
from vectable.core.constants import DEFAULT_DIMENSION
from vectable.core.errors import (
    Err,
    InvalidArgument,
    InvalidDimension,
    NotFound,
    Ok,
    Result,
    VectorTableError,
)
from vectable.core.protocols import StorageBackendProtocol
from vectable.core.types import (
    Collection,
    Encoding,
    RecordId,
    SearchMatch,
    VectorLike,
    VectorRecord,
)
from vectable.index.distance import cosim as cosine_similarity
from vectable.index.distance import normalize_vector
from vectable.index.quantization import as_binary32, max_collection_dimension, to_bits
from vectable.index.search import SearchOrchestrator
from vectable.observability.logging import log_context
from vectable.storage.transaction import run_in_transaction

logger = logging.getLogger(__name__)

CollectionRef = Union[Collection, str]


def _name(collection: CollectionRef) -> str:
    return collection.name if isinstance(collection, Collection) else collection


def encode_vector(vector: np.ndarray) -> tuple[bytes, bytes]:
    """
    Normalize and encode a vector into its two persisted columns.

    Returns:
        (normalized binary32 blob, packed binary code)
    """
    stored = as_binary32(normalize_vector(vector))
    return stored.tobytes(), to_bits(stored)


def validate_vector(
    vector: VectorLike,
    dimension: int,
    what: str = "vector",
) -> Result[np.ndarray, VectorTableError]:
    """Coerce to a 1D float64 array of exactly dimension finite components."""
    try:
        arr = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        return Err(InvalidArgument.invalid(what, vector, f"not numeric: {e}"))

    if arr.ndim != 1:
        return Err(InvalidArgument.invalid(what, vector, f"expected 1D vector, got {arr.ndim}D"))
    if arr.shape[0] != dimension:
        return Err(InvalidDimension.mismatch(dimension, arr.shape[0], what=what))
    if not np.all(np.isfinite(arr)):
        return Err(InvalidArgument.invalid(what, vector, "contains NaN or infinity"))
    return Ok(arr)


class CollectionManager:
    """
    Creates, drops and writes to collections on a storage backend.

    Usage:
        manager = CollectionManager(backend)
        docs = manager.create("docs", 384).unwrap()
        record_id = manager.upsert(docs, embedding).unwrap()
        matches = manager.search(docs, query, top_n=5).unwrap()
    """

    __slots__ = ("_backend", "_search")

    def __init__(
        self,
        backend: StorageBackendProtocol,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self._backend = backend
        self._search = SearchOrchestrator(backend, config)

    @property
    def backend(self) -> StorageBackendProtocol:
        return self._backend

    @property
    def searcher(self) -> SearchOrchestrator:
        return self._search

    # =========================================================================
    # LIFECYCLE
    # =========================================================================
    def max_dimension(self, encoding: Encoding = Encoding.BINARY32_BLOB) -> int:
        """Largest dimension a new collection may declare on this backend."""
        return max_collection_dimension(self._backend.max_blob_bytes, encoding)

    def create(
        self,
        name: str,
        dimension: int = DEFAULT_DIMENSION,
        encoding: Encoding = Encoding.BINARY32_BLOB,
    ) -> Result[Collection, VectorTableError]:
        """
        Create an empty collection.

        The existence check and the table creation run in one transaction,
        so a concurrent creator observes AlreadyExists rather than a
        half-built store.

        Errors:
            InvalidArgument: empty name
            InvalidDimension: dimension <= 0 or above max_dimension(encoding)
            AlreadyExists: name taken
        """
        if not name:
            return Err(InvalidArgument.invalid("name", name, "must be a non-empty string"))
        if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)):
            return Err(InvalidArgument.invalid("dimension", dimension, "must be an integer"))
        dimension = int(dimension)
        if dimension <= 0:
            return Err(InvalidDimension.non_positive(dimension))
        ceiling = self.max_dimension(encoding)
        if dimension > ceiling:
            return Err(InvalidDimension.too_large(dimension, ceiling))

        with log_context(collection=name, operation="create"):
            result = run_in_transaction(
                self._backend,
                lambda: self._backend.create_store(name, dimension, encoding),
                label="create",
            )
            if result.is_ok():
                logger.info(
                    "Collection created",
                    extra={"dimension": dimension, "encoding": encoding.value},
                )
            return result

    def drop(self, collection: CollectionRef) -> Result[bool, VectorTableError]:
        """Remove a collection and all its records. Absent collections are a no-op."""
        name = _name(collection)
        with log_context(collection=name, operation="drop"):
            result = run_in_transaction(
                self._backend,
                lambda: self._backend.drop_store(name),
                label="drop",
            )
            if result.is_ok() and result.value:
                logger.info("Collection dropped")
            return result

    def open(self, name: str) -> Result[Collection, VectorTableError]:
        """Look up a persisted collection by name."""
        described = self._backend.describe_store(name)
        if described.is_err():
            return described
        if described.value is None:
            return Err(NotFound.collection(name))
        return Ok(described.value)

    def exists(self, name: str) -> Result[bool, VectorTableError]:
        return self._backend.describe_store(name).map(lambda c: c is not None)

    def list_collections(self) -> Result[list[Collection], VectorTableError]:
        return self._backend.list_stores()

    # =========================================================================
    # WRITES
    # =========================================================================
    def upsert(
        self,
        collection: Collection,
        vector: VectorLike,
        id: Optional[RecordId] = None,
    ) -> Result[RecordId, VectorTableError]:
        """
        Insert a new record, or replace record `id` wholesale.

        Returns:
            The new id on insert, the given id on update

        Errors:
            InvalidDimension: len(vector) != collection.dimension
            NotFound: id given but no such record
        """
        validated = validate_vector(vector, collection.dimension)
        if validated.is_err():
            return validated
        blob, code = encode_vector(validated.value)

        with log_context(collection=collection.name, operation="upsert"):
            if id is None:
                result = self._backend.insert(collection.name, blob, code)
                if result.is_ok():
                    logger.debug("Record inserted", extra={"id": result.value})
                return result

            updated = self._backend.update_by_id(collection.name, id, blob, code)
            if updated.is_err():
                return updated
            if updated.value == 0:
                return Err(NotFound.record(collection.name, id))
            logger.debug("Record updated", extra={"id": id})
            return Ok(id)

    def batch_insert(
        self,
        collection: Collection,
        vectors: Sequence[VectorLike],
    ) -> Result[list[RecordId], VectorTableError]:
        """
        Insert many vectors as one all-or-nothing unit.

        Every vector is validated before the first write; a dimension
        mismatch anywhere leaves the collection untouched.

        Returns:
            Assigned ids in input order
        """
        encoded: list[tuple[bytes, bytes]] = []
        for position, vector in enumerate(vectors):
            validated = validate_vector(vector, collection.dimension, what=f"vectors[{position}]")
            if validated.is_err():
                return validated
            encoded.append(encode_vector(validated.value))

        if not encoded:
            return Ok([])

        def insert_all() -> Result[list[RecordId], VectorTableError]:
            ids: list[RecordId] = []
            for blob, code in encoded:
                inserted = self._backend.insert(collection.name, blob, code)
                if inserted.is_err():
                    return inserted
                ids.append(inserted.value)
            return Ok(ids)

        with log_context(collection=collection.name, operation="batch_insert"):
            result = run_in_transaction(self._backend, insert_all, label="batch_insert")
            if result.is_ok():
                logger.info("Batch inserted", extra={"count": len(result.value)})
            return result

    def delete(self, collection: Collection, id: RecordId) -> Result[bool, VectorTableError]:
        """Delete record `id`. Returns whether a record was removed; absent ids are not an error."""
        with log_context(collection=collection.name, operation="delete"):
            result = self._backend.delete_by_id(collection.name, id)
            if result.is_err():
                return result
            if result.value:
                logger.debug("Record deleted", extra={"id": id})
            return Ok(result.value > 0)

    # =========================================================================
    # READS
    # =========================================================================
    def select(
        self,
        collection: Collection,
        ids: Sequence[RecordId],
    ) -> Result[list[VectorRecord], VectorTableError]:
        """Records matching ids; unknown ids are omitted. Order unspecified."""
        if not ids:
            return Ok([])
        return self._backend.select_by_ids(collection.name, ids)

    def select_all(self, collection: Collection) -> Result[list[VectorRecord], VectorTableError]:
        return self._backend.select_all(collection.name)

    def count(self, collection: Collection) -> Result[int, VectorTableError]:
        return self._backend.count(collection.name)

    def cosim(
        self,
        collection: Collection,
        v1: VectorLike,
        v2: VectorLike,
    ) -> Result[float, VectorTableError]:
        """Cosine similarity of two raw vectors, both of the collection's dimension."""
        first = validate_vector(v1, collection.dimension, what="v1")
        if first.is_err():
            return first
        second = validate_vector(v2, collection.dimension, what="v2")
        if second.is_err():
            return second
        return Ok(cosine_similarity(first.value, second.value))

    def search(
        self,
        collection: Collection,
        query: VectorLike,
        top_n: Optional[int] = None,
        include_vectors: bool = False,
    ) -> Result[list[SearchMatch], VectorTableError]:
        """Shorthand for SearchOrchestrator.search on this manager's backend."""
        return self._search.search(collection, query, top_n=top_n, include_vectors=include_vectors)

"""
Protocol Definitions: Structural Subtyping for Pluggable Backends

StorageBackendProtocol is the full contract the collection manager and
search orchestrator consume. Backends own record identity, transactional
writes and ordering by Hamming distance; they never compute similarity.

Implementations:
    - SQLiteBackend: file or in-memory SQLite database
    - InMemoryBackend: dict-backed store with snapshot transactions
"""

from __future__ import annotations

from abc import abstractmethod
from typing import (
    TYPE_CHECKING,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

if TYPE_CHECKING:
    from vectable.core.errors import Result, VectorTableError
    from vectable.core.types import (
        Candidate,
        Collection,
        Encoding,
        RecordId,
        VectorRecord,
    )


@runtime_checkable
class StorageBackendProtocol(Protocol):
    """
    Storage backend contract.

    Every fallible call returns a Result whose error is a BackendFailure
    unless stated otherwise. Writes issued between begin() and commit()
    become visible atomically; rollback() discards them all.
    """

    @property
    def engine(self) -> str:
        """Storage-engine identifier recorded on created collections."""
        ...

    @property
    def max_blob_bytes(self) -> int:
        """Per-record byte ceiling for any single encoded column."""
        ...

    @property
    def in_transaction(self) -> bool:
        ...

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------
    @abstractmethod
    def create_store(
        self,
        name: str,
        dimension: int,
        encoding: "Encoding",
    ) -> "Result[Collection, VectorTableError]":
        """Create store. Fails with AlreadyExists if the name is taken."""
        ...

    @abstractmethod
    def drop_store(self, name: str) -> "Result[bool, VectorTableError]":
        """Drop store and all records. Returns True if it existed."""
        ...

    @abstractmethod
    def describe_store(self, name: str) -> "Result[Optional[Collection], VectorTableError]":
        """Persisted collection metadata, None if absent."""
        ...

    @abstractmethod
    def list_stores(self) -> "Result[list[Collection], VectorTableError]":
        """All catalogued collections, ordered by name."""
        ...

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    @abstractmethod
    def insert(
        self,
        name: str,
        blob: bytes,
        binary_code: bytes,
    ) -> "Result[RecordId, VectorTableError]":
        ...

    @abstractmethod
    def update_by_id(
        self,
        name: str,
        record_id: "RecordId",
        blob: bytes,
        binary_code: bytes,
    ) -> "Result[int, VectorTableError]":
        """Replace a record wholesale. Returns rows affected (0 or 1)."""
        ...

    @abstractmethod
    def select_by_ids(
        self,
        name: str,
        ids: Sequence["RecordId"],
    ) -> "Result[list[VectorRecord], VectorTableError]":
        ...

    @abstractmethod
    def select_all(self, name: str) -> "Result[list[VectorRecord], VectorTableError]":
        ...

    @abstractmethod
    def count(self, name: str) -> "Result[int, VectorTableError]":
        ...

    @abstractmethod
    def delete_by_id(self, name: str, record_id: "RecordId") -> "Result[int, VectorTableError]":
        """Returns rows affected; zero is not an error."""
        ...

    @abstractmethod
    def top_k_by_hamming_distance(
        self,
        name: str,
        query_code: bytes,
        k: int,
    ) -> "Result[list[Candidate], VectorTableError]":
        """k records with smallest Hamming distance, ascending, ties by id."""
        ...

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------
    @abstractmethod
    def begin(self) -> "Result[None, VectorTableError]":
        ...

    @abstractmethod
    def commit(self) -> "Result[None, VectorTableError]":
        ...

    @abstractmethod
    def rollback(self) -> "Result[None, VectorTableError]":
        ...

"""
VectorTable: Binary-Quantized Two-Stage Vector Similarity Search

Features:
    - Fixed-dimension collections over a pluggable storage backend
    - Sign-bit binary quantization for Hamming-distance candidate filtering
    - Exact cosine rerank of the candidates on unit-length vectors
    - All-or-nothing batch inserts

Usage:
    from vectable import CollectionManager, SQLiteBackend, StorageConfig

    with SQLiteBackend(StorageConfig(db_path=Path("vectors.db"))) as backend:
        manager = CollectionManager(backend)
        docs = manager.create("docs", 384).unwrap()

        ids = manager.batch_insert(docs, embeddings).unwrap()
        for match in manager.search(docs, query, top_n=10).unwrap():
            print(match.id, match.similarity)
"""

from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# PUBLIC API
# =============================================================================
from vectable.core.errors import (
    Result,
    Ok,
    Err,
    VectorTableError,
    InvalidDimension,
    InvalidArgument,
    AlreadyExists,
    NotFound,
    BackendFailure,
)
from vectable.core.types import (
    Collection,
    Encoding,
    SearchMatch,
    VectorRecord,
)
from vectable.core.config import (
    SearchConfig,
    StorageConfig,
    VectorTableConfig,
)
from vectable.index.distance import cosim, dot, normalize_vector
from vectable.index.quantization import binary_code_hex, max_dimension, to_bits
from vectable.index.search import SearchOrchestrator
from vectable.storage.engine import SQLiteBackend
from vectable.storage.memory import InMemoryBackend
from vectable.collection import CollectionManager


__all__ = [
    # Version
    "__version__",
    # Error handling
    "Result",
    "Ok",
    "Err",
    "VectorTableError",
    "InvalidDimension",
    "InvalidArgument",
    "AlreadyExists",
    "NotFound",
    "BackendFailure",
    # Core types
    "Collection",
    "Encoding",
    "SearchMatch",
    "VectorRecord",
    # Configuration
    "SearchConfig",
    "StorageConfig",
    "VectorTableConfig",
    # Kernels
    "cosim",
    "dot",
    "normalize_vector",
    "binary_code_hex",
    "max_dimension",
    "to_bits",
    # Search & storage
    "SearchOrchestrator",
    "SQLiteBackend",
    "InMemoryBackend",
    "CollectionManager",
]

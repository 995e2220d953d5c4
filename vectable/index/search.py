"""
Two-Stage Search: Hamming Filter + Exact Rerank

Pipeline:
    1. Normalize the query, round to binary32, quantize to a binary code
    2. Stage 1 (backend): k = top_n * candidate_multiplier records with the
       smallest Hamming distance to the query code
    3. Stage 2 (here): exact dot product of each candidate against the
       float64 normalized query, descending, truncated to top_n

The returned similarity is always the Stage-2 dot product. The Hamming
distance only decides which records are considered; a record absent from
the Stage-1 candidates can never appear in the result even if its exact
similarity would rank it first.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from vectable.core.config import SearchConfig
from vectable.core.errors import (
    BackendFailure,
    Err,
    InvalidArgument,
    InvalidDimension,
    Ok,
    Result,
    VectorTableError,
)
from vectable.core.protocols import StorageBackendProtocol
from vectable.core.types import Collection, SearchMatch, VectorLike
from vectable.index.distance import dot_batch, normalize_vector
from vectable.index.quantization import as_binary32, to_bits
from vectable.observability.logging import log_context

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """
    Ranks a collection's records against a query vector.

    Usage:
        searcher = SearchOrchestrator(backend)
        matches = searcher.search(docs, query, top_n=10).unwrap()
        for match in matches:
            print(match.id, match.similarity)
    """

    __slots__ = ("_backend", "_config")

    def __init__(
        self,
        backend: StorageBackendProtocol,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self._backend = backend
        self._config = config or SearchConfig()

    @property
    def config(self) -> SearchConfig:
        return self._config

    def search(
        self,
        collection: Collection,
        query: VectorLike,
        top_n: Optional[int] = None,
        include_vectors: bool = False,
    ) -> Result[list[SearchMatch], VectorTableError]:
        """
        Return up to top_n matches ordered by descending cosine similarity.

        Args:
            collection: Target collection
            query: Raw query vector of collection.dimension components
            top_n: Result count (default: config.default_top_n)
            include_vectors: Attach each match's stored normalized vector

        Errors:
            InvalidArgument: empty query, top_n <= 0
            InvalidDimension: len(query) != collection.dimension
            BackendFailure: Stage-1 query failed or returned a malformed record
        """
        if top_n is None:
            top_n = self._config.default_top_n
        if isinstance(top_n, bool) or not isinstance(top_n, (int, np.integer)) or top_n <= 0:
            return Err(InvalidArgument.invalid_top_n(top_n))
        top_n = int(top_n)

        try:
            arr = np.asarray(query, dtype=np.float64)
        except (TypeError, ValueError) as e:
            return Err(InvalidArgument.invalid("query", query, f"not numeric: {e}"))
        if arr.ndim != 1:
            return Err(InvalidArgument.invalid("query", query, f"expected 1D vector, got {arr.ndim}D"))
        if arr.shape[0] == 0:
            return Err(InvalidArgument.empty_vector("query"))
        if arr.shape[0] != collection.dimension:
            return Err(InvalidDimension.mismatch(collection.dimension, arr.shape[0], what="query"))

        with log_context(collection=collection.name, operation="search"):
            start = time.perf_counter()

            normalized = normalize_vector(arr)
            query_code = to_bits(as_binary32(normalized))

            k = top_n * self._config.candidate_multiplier
            fetched = self._backend.top_k_by_hamming_distance(collection.name, query_code, k)
            if fetched.is_err():
                logger.error(
                    "Candidate retrieval failed",
                    extra={"error": fetched.error.to_dict()},
                )
                return fetched
            candidates = fetched.value

            if not candidates:
                return Ok([])

            for candidate in candidates:
                if candidate.normalized_vector.shape[0] != collection.dimension:
                    return Err(BackendFailure.corrupted(
                        collection.name,
                        candidate.id,
                        f"stored dimension {candidate.normalized_vector.shape[0]}, "
                        f"expected {collection.dimension}",
                    ))

            matrix = np.stack([c.normalized_vector for c in candidates]).astype(np.float64)
            scores = dot_batch(normalized, matrix)

            # Stable sort keeps Stage-1 order among equal similarities
            order = np.argsort(-scores, kind="stable")[:min(top_n, len(candidates))]
            matches = [
                SearchMatch(
                    id=candidates[i].id,
                    similarity=float(scores[i]),
                    normalized_vector=candidates[i].normalized_vector if include_vectors else None,
                )
                for i in order
            ]

            logger.debug(
                "Search complete",
                extra={
                    "top_n": top_n,
                    "candidates": len(candidates),
                    "returned": len(matches),
                    "elapsed_ms": round((time.perf_counter() - start) * 1000, 3),
                },
            )
            return Ok(matches)

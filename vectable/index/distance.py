"""
Normalization and Similarity Kernels

Provides:
    - L2 normalization with a zero-vector fallback
    - Dot product (cosine similarity on unit vectors)
    - Hamming distance on packed binary codes (XOR + popcount)

All kernels are pure and stateless; accumulation runs in float64 so that
grouping never changes the reported value beyond float rounding.
"""

from __future__ import annotations

import numpy as np

from vectable.core.constants import DOT_GROUP_SIZE, NORMALIZE_EPSILON
from vectable.core.errors import InvalidDimension
from vectable.core.types import VectorLike


# =============================================================================
# VECTOR NORMALIZATION
# =============================================================================
def magnitude(v: VectorLike) -> float:
    """L2 norm: sqrt(sum(v_i^2))."""
    arr = np.asarray(v, dtype=np.float64)
    return float(np.sqrt(np.dot(arr, arr)))


def normalize_vector(v: VectorLike, epsilon: float = NORMALIZE_EPSILON) -> np.ndarray:
    """
    L2-normalize vector to unit length.

    A magnitude below epsilon is replaced by epsilon, so the zero vector
    maps to itself and near-zero vectors scale up by 1/epsilon instead of
    producing NaN or infinity.

    Args:
        v: Single vector (1D)
        epsilon: Substitute magnitude for degenerate inputs

    Returns:
        float64 vector with ||v|| = 1 for non-degenerate input

    Complexity: O(d)
    """
    arr = np.asarray(v, dtype=np.float64)
    norm = magnitude(arr)
    if abs(norm) < epsilon:
        norm = epsilon
    return arr / norm


def normalize_batch(vectors: VectorLike, epsilon: float = NORMALIZE_EPSILON) -> np.ndarray:
    """Row-wise normalize_vector over a 2D batch."""
    arr = np.asarray(vectors, dtype=np.float64)
    norms = np.sqrt(np.einsum("ij,ij->i", arr, arr))[:, np.newaxis]
    norms = np.where(np.abs(norms) < epsilon, epsilon, norms)
    return arr / norms


# =============================================================================
# DOT PRODUCT
# =============================================================================
def dot(a: VectorLike, b: VectorLike) -> float:
    """
    Compute inner (dot) product.

    Formula: a · b = Σ(aᵢ × bᵢ)

    Components are consumed in groups of DOT_GROUP_SIZE and the partial
    sums accumulated in float64. On unit vectors the value approximates
    cosine similarity in [-1, 1].

    Raises:
        InvalidDimension: len(a) != len(b)

    Complexity: O(d)
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidDimension.mismatch(a.shape[0], b.shape[0], what="dot operand")

    total = 0.0
    for start in range(0, a.shape[0], DOT_GROUP_SIZE):
        stop = start + DOT_GROUP_SIZE
        total += float(np.dot(a[start:stop], b[start:stop]))
    return total


def dot_batch(query: VectorLike, vectors: VectorLike) -> np.ndarray:
    """
    Dot product between query and batch of vectors.

    Args:
        query: Query vector (1D, shape [d])
        vectors: Candidate vectors (2D, shape [n, d])

    Returns:
        Scores (1D, shape [n])
    """
    query = np.asarray(query, dtype=np.float64)
    vectors = np.asarray(vectors, dtype=np.float64)
    if vectors.size == 0:
        return np.zeros(0, dtype=np.float64)
    if vectors.ndim != 2 or vectors.shape[1] != query.shape[0]:
        raise InvalidDimension.mismatch(query.shape[0], vectors.shape[-1], what="dot operand")
    return vectors @ query


# =============================================================================
# COSINE SIMILARITY
# =============================================================================
def cosim(v1: VectorLike, v2: VectorLike) -> float:
    """
    Cosine similarity: normalize both vectors, then dot.

    Raises:
        InvalidDimension: len(v1) != len(v2)

    Returns:
        Similarity in [-1, 1], symmetric in its arguments
    """
    a = np.asarray(v1, dtype=np.float64)
    b = np.asarray(v2, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidDimension.mismatch(a.shape[0], b.shape[0], what="cosim operand")
    return dot(normalize_vector(a), normalize_vector(b))


# =============================================================================
# HAMMING DISTANCE
# =============================================================================
def hamming(code_a: bytes, code_b: bytes) -> int:
    """
    Count differing bits between two equal-length binary codes.

    Ordering signal only; never reported as a similarity value.

    Raises:
        InvalidDimension: codes differ in length
    """
    if len(code_a) != len(code_b):
        raise InvalidDimension.mismatch(len(code_a), len(code_b), what="binary code")
    a = np.frombuffer(code_a, dtype=np.uint8)
    b = np.frombuffer(code_b, dtype=np.uint8)
    return int(np.unpackbits(np.bitwise_xor(a, b)).sum())


def hamming_batch(query_code: bytes, codes: np.ndarray) -> np.ndarray:
    """
    Hamming distance between one code and a batch of packed codes.

    Args:
        query_code: Packed query code (L bytes)
        codes: uint8 array of shape [n, L]

    Returns:
        int64 distances (shape [n])
    """
    q = np.frombuffer(query_code, dtype=np.uint8)
    if codes.size == 0:
        return np.zeros(0, dtype=np.int64)
    if codes.shape[1] != q.shape[0]:
        raise InvalidDimension.mismatch(q.shape[0], codes.shape[1], what="binary code")
    xor = np.bitwise_xor(codes, q[np.newaxis, :])
    return np.unpackbits(xor, axis=1).sum(axis=1).astype(np.int64)

"""
Index module: Similarity kernels, binary quantization, and two-stage search.
"""

from vectable.index.distance import (
    cosim,
    dot,
    dot_batch,
    hamming,
    hamming_batch,
    magnitude,
    normalize_batch,
    normalize_vector,
)
from vectable.index.quantization import (
    binary_code_hex,
    from_blob,
    max_collection_dimension,
    max_dimension,
    to_bits,
    to_blob,
    unpack_bits,
)
from vectable.index.search import SearchOrchestrator

__all__ = [
    "cosim",
    "dot",
    "dot_batch",
    "hamming",
    "hamming_batch",
    "magnitude",
    "normalize_batch",
    "normalize_vector",
    "binary_code_hex",
    "from_blob",
    "max_collection_dimension",
    "max_dimension",
    "to_bits",
    "to_blob",
    "unpack_bits",
    "SearchOrchestrator",
]

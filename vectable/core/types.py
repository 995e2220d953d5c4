"""
Core Type Definitions

Immutable value types shared by the index, storage and collection layers.

Memory Layout:
    - normalized vectors are contiguous float32 numpy arrays, marked
      read-only after construction so they are never resized or mutated
    - binary codes are immutable bytes, ceil(dimension / 8) long
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

import numpy as np

from vectable.core.constants import (
    BITS_PER_BYTE,
    DEFAULT_ENGINE,
    FLOAT32_BYTES,
    VECTOR_TABLE_SUFFIX,
)

if TYPE_CHECKING:
    import numpy.typing as npt

# Type alias for vector input
VectorLike = Union[np.ndarray, Sequence[float], "npt.NDArray[np.float32]"]
RecordId = int


# =============================================================================
# ENCODINGS
# =============================================================================
class Encoding(Enum):
    """
    Persisted vector encodings.

    Ordered by bytes per component (ascending):
        BIT_PACKED: 1 bit (sign-pattern binary code)
        BINARY32_BLOB: 4 bytes (IEEE-754 binary32, little-endian)
        JSON_TEXT: up to 16 bytes (decimal text array)
    """
    BIT_PACKED = "bit_packed"
    BINARY32_BLOB = "binary32_blob"
    JSON_TEXT = "json_text"


def code_length(dimension: int) -> int:
    """Byte length of the binary code for a given dimension: ceil(d / 8)."""
    return (dimension + BITS_PER_BYTE - 1) // BITS_PER_BYTE


def _frozen_vector(values: VectorLike) -> np.ndarray:
    arr = np.array(values, dtype=np.float32)
    arr.setflags(write=False)
    return arr


# =============================================================================
# COLLECTION
# =============================================================================
@dataclass(frozen=True, slots=True)
class Collection:
    """
    Named set of vector records sharing one fixed dimension.

    The dimension is immutable after creation; the storage engine
    identifier records which backend flavor persisted it, and encoding
    is the one declared at creation (it bounded the dimension).
    """
    name: str
    dimension: int
    engine: str = DEFAULT_ENGINE
    encoding: Encoding = Encoding.BINARY32_BLOB

    @property
    def table_name(self) -> str:
        """Backend table holding the collection's records."""
        return f"{self.name}{VECTOR_TABLE_SUFFIX}"

    @property
    def code_length(self) -> int:
        return code_length(self.dimension)

    @property
    def blob_length(self) -> int:
        return self.dimension * FLOAT32_BYTES


# =============================================================================
# RECORDS
# =============================================================================
@dataclass(frozen=True, slots=True)
class VectorRecord:
    """
    Persisted vector record.

    Attributes:
        id: Backend-assigned identifier, stable after first insert
        normalized_vector: Unit-length float32 vector (read-only)
        binary_code: Sign-bit quantization of normalized_vector
    """
    id: RecordId
    normalized_vector: np.ndarray = field(compare=False)
    binary_code: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "normalized_vector", _frozen_vector(self.normalized_vector))

    @property
    def dimension(self) -> int:
        return int(self.normalized_vector.shape[0])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "normalized_vector": self.normalized_vector.tolist(),
            "binary_code": self.binary_code.hex(),
        }


@dataclass(frozen=True, slots=True)
class Candidate:
    """Stage-1 search candidate returned by the storage backend."""
    id: RecordId
    normalized_vector: np.ndarray = field(compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "normalized_vector", _frozen_vector(self.normalized_vector))


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """
    Single ranked search result.

    similarity is the exact cosine similarity in [-1, 1]; the Hamming
    distance used for candidate filtering is never reported.
    """
    id: RecordId
    similarity: float
    normalized_vector: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "similarity": self.similarity}
        if self.normalized_vector is not None:
            data["normalized_vector"] = self.normalized_vector.tolist()
        return data

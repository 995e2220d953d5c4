"""
Vector Encodings: Binary Quantization and Binary32 Blobs

Bit-exact encodings shared by every backend:

    Binary quantization code:
        byte i, bit j (0 <= j < 8) = 1 iff vector[8*i + j] > 0
        component 0 -> least-significant bit; zero and negatives are unset;
        padding bits of the final byte are 0.

    Normalized-vector blob:
        IEEE-754 binary32, little-endian, one 4-byte unit per component,
        in component order; length = 4 * dimension.

Round-trip through the blob reproduces each component within binary32
rounding (~1.2e-7 relative). Components below the binary32 subnormal
range flush to zero and lose their sign bit; codes are therefore always
computed from the binary32 vector that is actually persisted.
"""

from __future__ import annotations

import numpy as np

from vectable.core.constants import BITS_PER_BYTE, FLOAT32_BYTES, JSON_COMPONENT_BYTES
from vectable.core.errors import InvalidArgument
from vectable.core.types import Encoding, VectorLike

# Explicit little-endian binary32 regardless of host byte order
BLOB_DTYPE = np.dtype("<f4")


# =============================================================================
# BINARY QUANTIZATION
# =============================================================================
def to_bits(vector: VectorLike) -> bytes:
    """
    Quantize vector signs into a packed binary code.

    Example:
        to_bits([1, -1, 1, 0, 1, -1, 0, 1]) == b"\\x95"

    Complexity: O(d)
    """
    arr = np.asarray(vector, dtype=np.float64)
    return np.packbits(arr > 0, bitorder="little").tobytes()


def binary_code_hex(vector: VectorLike) -> str:
    """Hexadecimal rendering of to_bits(vector)."""
    return to_bits(vector).hex()


def unpack_bits(code: bytes, dimension: int) -> np.ndarray:
    """Expand a packed code back into a boolean sign mask of length dimension."""
    raw = np.frombuffer(code, dtype=np.uint8)
    return np.unpackbits(raw, bitorder="little")[:dimension].astype(bool)


# =============================================================================
# BINARY32 BLOBS
# =============================================================================
def as_binary32(vector: VectorLike) -> np.ndarray:
    """Round vector to the binary32 values a blob will carry."""
    return np.asarray(vector, dtype=BLOB_DTYPE)


def to_blob(vector: VectorLike) -> bytes:
    """Encode vector as little-endian binary32 bytes."""
    return as_binary32(vector).tobytes()


def from_blob(blob: bytes) -> np.ndarray:
    """
    Decode little-endian binary32 bytes into a native float32 vector.

    Raises:
        InvalidArgument: blob length is not a multiple of 4
    """
    if len(blob) % FLOAT32_BYTES:
        raise InvalidArgument.malformed_blob(len(blob))
    return np.frombuffer(blob, dtype=BLOB_DTYPE).astype(np.float32)


# =============================================================================
# STORAGE CEILINGS
# =============================================================================
def max_dimension(max_record_bytes: int, encoding: Encoding) -> int:
    """
    Largest dimension whose encoding fits in max_record_bytes.

    BIT_PACKED:     8 components per byte
    BINARY32_BLOB:  floor(bytes / 4)
    JSON_TEXT:      floor(bytes / JSON_COMPONENT_BYTES), worst-case width
    """
    if encoding is Encoding.BIT_PACKED:
        return max_record_bytes * BITS_PER_BYTE
    if encoding is Encoding.BINARY32_BLOB:
        return max_record_bytes // FLOAT32_BYTES
    if encoding is Encoding.JSON_TEXT:
        return max_record_bytes // JSON_COMPONENT_BYTES
    raise ValueError(f"Unknown encoding: {encoding}")


def max_collection_dimension(max_record_bytes: int, encoding: Encoding) -> int:
    """
    Dimension ceiling for a collection declared with encoding.

    Every collection persists a BINARY32_BLOB vector and its BIT_PACKED
    code regardless of encoding, so the tightest of the three ceilings
    applies. Declaring JSON_TEXT only ever lowers the ceiling.
    """
    return min(
        max_dimension(max_record_bytes, encoding),
        max_dimension(max_record_bytes, Encoding.BINARY32_BLOB),
        max_dimension(max_record_bytes, Encoding.BIT_PACKED),
    )

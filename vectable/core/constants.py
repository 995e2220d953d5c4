"""
Library-Wide Constants

All magic numbers and defaults centralized here.
"""

from typing import Final

# =============================================================================
# NUMERICS
# =============================================================================
# Magnitude substituted for zero and near-zero vectors during normalization
NORMALIZE_EPSILON: Final[float] = 1e-12
FLOAT32_BYTES: Final[int] = 4
BITS_PER_BYTE: Final[int] = 8
# Widest decimal rendering of a binary32 component plus separator, e.g. "-1.23456789e-38,"
JSON_COMPONENT_BYTES: Final[int] = 16
# Components processed per step by the grouped dot product
DOT_GROUP_SIZE: Final[int] = 64

# =============================================================================
# COLLECTIONS
# =============================================================================
DEFAULT_DIMENSION: Final[int] = 384
DEFAULT_ENGINE: Final[str] = "sqlite"
VECTOR_TABLE_SUFFIX: Final[str] = "_vectors"

# =============================================================================
# STORAGE
# =============================================================================
# SQLITE_MAX_LENGTH default: largest string or BLOB a row may hold
SQLITE_MAX_BLOB_BYTES: Final[int] = 1_000_000_000
# Largest VARBINARY column MySQL supports, kept as the portable default ceiling
PORTABLE_MAX_BLOB_BYTES: Final[int] = 65_535
BUSY_TIMEOUT_MS: Final[int] = 5000
# Largest value SQLite binds as INTEGER (signed 64-bit)
SQLITE_MAX_INTEGER: Final[int] = 2**63 - 1

# =============================================================================
# SEARCH
# =============================================================================
DEFAULT_TOP_N: Final[int] = 10
DEFAULT_CANDIDATE_MULTIPLIER: Final[int] = 1

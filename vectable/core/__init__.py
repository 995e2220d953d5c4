"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for vector tables:
- Result monad for expected failures
- Error taxonomy with named constructors
- Immutable collection, record and match types
- Configuration management with validation
"""

from vectable.core.errors import (
    Result,
    Ok,
    Err,
    ErrorCode,
    VectorTableError,
    InvalidDimension,
    InvalidArgument,
    AlreadyExists,
    NotFound,
    BackendFailure,
)
from vectable.core.types import (
    Candidate,
    Collection,
    Encoding,
    RecordId,
    SearchMatch,
    VectorRecord,
)
from vectable.core.config import (
    ObservabilityConfig,
    SearchConfig,
    StorageConfig,
    VectorTableConfig,
)
from vectable.core.protocols import StorageBackendProtocol

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ErrorCode",
    "VectorTableError",
    "InvalidDimension",
    "InvalidArgument",
    "AlreadyExists",
    "NotFound",
    "BackendFailure",
    "Candidate",
    "Collection",
    "Encoding",
    "RecordId",
    "SearchMatch",
    "VectorRecord",
    "ObservabilityConfig",
    "SearchConfig",
    "StorageConfig",
    "VectorTableConfig",
    "StorageBackendProtocol",
]

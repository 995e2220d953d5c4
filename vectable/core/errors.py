"""
Result Monad & Error Types

Rust-inspired Result[T, E] used by every fallible collection, search and
storage operation. Expected failures are returned as Err values; pure
kernels raise the same error classes when their preconditions break.

Taxonomy:
    InvalidDimension: non-positive, above the encoding ceiling, or mismatched
    InvalidArgument:  malformed input (empty query, top_n <= 0, bad blob)
    AlreadyExists:    collection creation collision
    NotFound:         explicit lookup/update miss
    BackendFailure:   any storage error, original exception kept as cause
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    NoReturn,
    Optional,
    TypeVar,
    Union,
    final,
)
from uuid import uuid4


# =============================================================================
# TYPE VARIABLES
# =============================================================================
T = TypeVar("T")  # Success value type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD: SUCCESS VARIANT
# =============================================================================
@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Example:
        result: Result[int, VectorTableError] = Ok(42)
        if result.is_ok():
            value = result.unwrap()
    """
    _value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self._value

    def unwrap_or(self, default: T) -> T:
        return self._value

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        """
        Apply transformation to success value.

        Example:
            Ok(5).map(lambda x: x * 2)  # Ok(10)
        """
        return Ok(fn(self._value))

    def map_err(self, fn: Callable[[Any], Any]) -> "Ok[T]":
        """No-op on success variant."""
        return self

    def flat_map(self, fn: Callable[[T], "Result[U, Any]"]) -> "Result[U, Any]":
        """Monadic bind for chaining fallible operations."""
        return fn(self._value)

    @property
    def value(self) -> T:
        return self._value

    @property
    def error(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"Ok({self._value!r})"

    def __bool__(self) -> Literal[True]:
        return True


# =============================================================================
# RESULT MONAD: ERROR VARIANT
# =============================================================================
@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Error variant of Result monad.

    Example:
        result = manager.create("docs", 0)
        if result.is_err():
            print(f"Error: {result.error}")
    """
    _error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> NoReturn:
        """
        Unwrapping an error is a programming error.

        Raises:
            The carried error when it is an exception, RuntimeError otherwise
        """
        if isinstance(self._error, BaseException):
            raise self._error
        raise RuntimeError(f"Called unwrap() on Err: {self._error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], U]) -> "Err[E]":
        """No-op on error variant - propagates error unchanged."""
        return self

    def map_err(self, fn: Callable[[E], U]) -> "Err[U]":
        return Err(fn(self._error))

    def flat_map(self, fn: Callable[[Any], "Result[U, Any]"]) -> "Err[E]":
        """Propagate error through monadic chain."""
        return self

    @property
    def value(self) -> None:
        return None

    @property
    def error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Err({self._error!r})"

    def __bool__(self) -> Literal[False]:
        return False


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# ERROR TAXONOMY
# =============================================================================
class ErrorCode(Enum):
    """
    Canonical error codes.

    Ranges:
        1000-1999: Dimension errors
        2000-2999: Argument errors
        3000-3999: Catalog errors (exists / not found)
        4000-4999: Backend errors
    """
    INVALID_DIMENSION = 1001
    DIMENSION_MISMATCH = 1002
    DIMENSION_TOO_LARGE = 1003

    INVALID_ARGUMENT = 2001
    INVALID_TOP_N = 2002
    EMPTY_VECTOR = 2003
    MALFORMED_BLOB = 2004

    ALREADY_EXISTS = 3001
    COLLECTION_NOT_FOUND = 3002
    RECORD_NOT_FOUND = 3003

    BACKEND_FAILURE = 4001
    BACKEND_UNAVAILABLE = 4002
    BACKEND_CORRUPTED = 4003


@dataclass(eq=False)
class VectorTableError(Exception):
    """
    Base error for all vector table operations.

    Carries:
        - code for programmatic handling
        - human-readable message
        - error_id for log correlation
        - cause: originating exception (backend diagnostics preserved)
        - context: machine-readable details
    """
    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        return {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "cause": repr(self.cause) if self.cause is not None else None,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r})"
        )


# =============================================================================
# SPECIALIZED ERROR TYPES (Convenience constructors)
# =============================================================================
@dataclass(eq=False, repr=False)
class InvalidDimension(VectorTableError):
    """Dimension is non-positive, too large, or mismatched."""

    @classmethod
    def non_positive(cls, dimension: int) -> "InvalidDimension":
        return cls(
            code=ErrorCode.INVALID_DIMENSION,
            message=f"Dimension must be a positive integer, got {dimension}",
            context={"dimension": dimension},
        )

    @classmethod
    def too_large(cls, dimension: int, max_dimension: int) -> "InvalidDimension":
        return cls(
            code=ErrorCode.DIMENSION_TOO_LARGE,
            message=f"Maximum supported dimension is {max_dimension}, got {dimension}",
            context={"dimension": dimension, "max_dimension": max_dimension},
        )

    @classmethod
    def mismatch(cls, expected: int, actual: int, what: str = "vector") -> "InvalidDimension":
        return cls(
            code=ErrorCode.DIMENSION_MISMATCH,
            message=f"Dimension mismatch for {what}: expected {expected}, got {actual}",
            context={"expected": expected, "actual": actual, "what": what},
        )


@dataclass(eq=False, repr=False)
class InvalidArgument(VectorTableError):
    """Malformed input other than a dimension problem."""

    @classmethod
    def empty_vector(cls, what: str = "query") -> "InvalidArgument":
        return cls(
            code=ErrorCode.EMPTY_VECTOR,
            message=f"The {what} vector cannot be empty",
            context={"what": what},
        )

    @classmethod
    def invalid_top_n(cls, top_n: int) -> "InvalidArgument":
        return cls(
            code=ErrorCode.INVALID_TOP_N,
            message=f"Number of results must be positive, got {top_n}",
            context={"top_n": top_n},
        )

    @classmethod
    def malformed_blob(cls, length: int) -> "InvalidArgument":
        return cls(
            code=ErrorCode.MALFORMED_BLOB,
            message=f"Blob length {length} is not a multiple of 4 bytes",
            context={"length": length},
        )

    @classmethod
    def invalid(cls, param: str, value: Any, reason: str) -> "InvalidArgument":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"Invalid '{param}': {reason}",
            context={"param": param, "value": str(value)[:100], "reason": reason},
        )


@dataclass(eq=False, repr=False)
class AlreadyExists(VectorTableError):
    """Collection creation collided with an existing store."""

    @classmethod
    def collection(cls, name: str) -> "AlreadyExists":
        return cls(
            code=ErrorCode.ALREADY_EXISTS,
            message=f"Collection '{name}' already exists",
            context={"collection": name},
        )


@dataclass(eq=False, repr=False)
class NotFound(VectorTableError):
    """Explicit lookup or update missed."""

    @classmethod
    def collection(cls, name: str) -> "NotFound":
        return cls(
            code=ErrorCode.COLLECTION_NOT_FOUND,
            message=f"Collection '{name}' not found",
            context={"collection": name},
        )

    @classmethod
    def record(cls, name: str, record_id: int) -> "NotFound":
        return cls(
            code=ErrorCode.RECORD_NOT_FOUND,
            message=f"Record {record_id} not found in collection '{name}'",
            context={"collection": name, "id": record_id},
        )


@dataclass(eq=False, repr=False)
class BackendFailure(VectorTableError):
    """Wraps any underlying storage error."""

    @classmethod
    def from_exception(
        cls,
        operation: str,
        cause: BaseException,
        **context: Any,
    ) -> "BackendFailure":
        return cls(
            code=ErrorCode.BACKEND_FAILURE,
            message=f"Storage operation '{operation}' failed: {cause}",
            cause=cause,
            context={"operation": operation, **context},
        )

    @classmethod
    def unavailable(cls, backend: str) -> "BackendFailure":
        return cls(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message=f"Storage backend '{backend}' is not open",
            context={"backend": backend},
        )

    @classmethod
    def corrupted(cls, name: str, record_id: int, reason: str) -> "BackendFailure":
        return cls(
            code=ErrorCode.BACKEND_CORRUPTED,
            message=f"Record {record_id} in '{name}' is corrupted: {reason}",
            context={"collection": name, "id": record_id, "reason": reason},
        )

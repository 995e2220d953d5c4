"""Result assertions shared by the test modules."""

from __future__ import annotations

from typing import Any, Type

from vectable.core.errors import ErrorCode, Result


def assert_ok(result: Result[Any, Any]) -> Any:
    """Assert success and return the value."""
    assert result.is_ok(), f"expected Ok, got {result!r}"
    return result.value


def assert_err(
    result: Result[Any, Any],
    error_type: Type[BaseException],
    code: ErrorCode | None = None,
) -> Any:
    """Assert failure of the given type (and code) and return the error."""
    assert result.is_err(), f"expected Err, got {result!r}"
    assert isinstance(result.error, error_type), f"expected {error_type.__name__}, got {result.error!r}"
    if code is not None:
        assert result.error.code is code, f"expected {code.name}, got {result.error.code.name}"
    return result.error

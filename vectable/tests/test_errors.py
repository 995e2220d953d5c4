"""
Result Monad & Error Taxonomy Tests
"""

from __future__ import annotations

import pytest

from vectable.core.errors import (
    AlreadyExists,
    BackendFailure,
    Err,
    ErrorCode,
    InvalidArgument,
    InvalidDimension,
    NotFound,
    Ok,
    VectorTableError,
)


class TestResult:
    """Ok/Err combinators."""

    def test_ok(self):
        result = Ok(5)

        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 5
        assert result.map(lambda x: x * 2).unwrap() == 10
        assert result.flat_map(lambda x: Ok(x + 1)).unwrap() == 6
        assert result.unwrap_or(0) == 5
        assert bool(result)

    def test_err(self):
        result = Err("boom")

        assert result.is_err() and not result.is_ok()
        assert result.map(lambda x: x * 2) is result
        assert result.unwrap_or(7) == 7
        assert result.map_err(str.upper).error == "BOOM"
        assert not bool(result)

    def test_unwrap_err_raises_carried_exception(self):
        error = NotFound.collection("docs")

        with pytest.raises(NotFound):
            Err(error).unwrap()

    def test_unwrap_err_non_exception(self):
        with pytest.raises(RuntimeError):
            Err("plain").unwrap()


class TestErrors:
    """Error constructors and serialization."""

    @pytest.mark.parametrize(
        "error, cls, code",
        [
            (InvalidDimension.non_positive(0), InvalidDimension, ErrorCode.INVALID_DIMENSION),
            (InvalidDimension.too_large(10, 5), InvalidDimension, ErrorCode.DIMENSION_TOO_LARGE),
            (InvalidDimension.mismatch(4, 3), InvalidDimension, ErrorCode.DIMENSION_MISMATCH),
            (InvalidArgument.empty_vector(), InvalidArgument, ErrorCode.EMPTY_VECTOR),
            (InvalidArgument.invalid_top_n(0), InvalidArgument, ErrorCode.INVALID_TOP_N),
            (InvalidArgument.malformed_blob(3), InvalidArgument, ErrorCode.MALFORMED_BLOB),
            (AlreadyExists.collection("docs"), AlreadyExists, ErrorCode.ALREADY_EXISTS),
            (NotFound.record("docs", 1), NotFound, ErrorCode.RECORD_NOT_FOUND),
            (BackendFailure.unavailable("sqlite"), BackendFailure, ErrorCode.BACKEND_UNAVAILABLE),
            (BackendFailure.corrupted("docs", 1, "bad"), BackendFailure, ErrorCode.BACKEND_CORRUPTED),
        ],
    )
    def test_constructors(self, error, cls, code):
        assert isinstance(error, cls)
        assert isinstance(error, VectorTableError)
        assert error.code is code
        assert str(error).startswith(f"[{code.name}]")

    def test_cause_preserved(self):
        cause = ValueError("disk I/O error")
        error = BackendFailure.from_exception("insert", cause, collection="docs")

        assert error.cause is cause
        assert error.__cause__ is cause
        assert "disk I/O error" in error.message
        assert error.context == {"operation": "insert", "collection": "docs"}

    def test_to_dict(self):
        data = InvalidDimension.mismatch(4, 3, what="query").to_dict()

        assert data["code"] == "DIMENSION_MISMATCH"
        assert data["code_value"] == 1002
        assert data["context"] == {"expected": 4, "actual": 3, "what": "query"}
        assert data["cause"] is None

    def test_raisable(self):
        with pytest.raises(VectorTableError):
            raise InvalidArgument.invalid("top_n", "x", "not an integer")

    def test_unique_error_ids(self):
        assert NotFound.collection("a").error_id != NotFound.collection("a").error_id

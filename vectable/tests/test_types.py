"""
Unit Tests: Core Types
"""

import dataclasses

import pytest
import numpy as np

from vectable.core.types import (
    Candidate,
    Collection,
    SearchMatch,
    VectorRecord,
    code_length,
)


class TestCollection:
    """Tests for Collection."""

    def test_derived_lengths(self):
        collection = Collection(name="docs", dimension=384)

        assert collection.code_length == 48
        assert collection.blob_length == 1536
        assert collection.table_name == "docs_vectors"
        assert collection.engine == "sqlite"

    def test_immutable(self):
        collection = Collection(name="docs", dimension=4)

        with pytest.raises(dataclasses.FrozenInstanceError):
            collection.dimension = 8

    @pytest.mark.parametrize("dimension, expected", [(1, 1), (8, 1), (9, 2), (385, 49)])
    def test_code_length(self, dimension, expected):
        assert code_length(dimension) == expected


class TestVectorRecord:
    """Tests for VectorRecord."""

    def test_vector_is_read_only_float32(self):
        record = VectorRecord(id=1, normalized_vector=[0.6, 0.8], binary_code=b"\x03")

        assert record.normalized_vector.dtype == np.float32
        assert record.dimension == 2
        with pytest.raises(ValueError):
            record.normalized_vector[0] = 1.0

    def test_source_array_not_shared(self):
        source = np.array([0.6, 0.8], dtype=np.float32)
        record = VectorRecord(id=1, normalized_vector=source)

        source[0] = 0.0
        assert record.normalized_vector[0] == pytest.approx(0.6)

    def test_to_dict(self):
        data = VectorRecord(id=3, normalized_vector=[1.0, 0.0], binary_code=b"\x01").to_dict()

        assert data == {"id": 3, "normalized_vector": [1.0, 0.0], "binary_code": "01"}

    def test_equality_by_id_and_code(self):
        a = VectorRecord(id=1, normalized_vector=[1.0], binary_code=b"\x01")
        b = VectorRecord(id=1, normalized_vector=[1.0], binary_code=b"\x01")

        assert a == b


class TestSearchMatch:
    """Tests for SearchMatch and Candidate."""

    def test_to_dict_without_vector(self):
        assert SearchMatch(id=1, similarity=0.5).to_dict() == {"id": 1, "similarity": 0.5}

    def test_candidate_vector_read_only(self):
        candidate = Candidate(id=1, normalized_vector=np.ones(2))

        assert not candidate.normalized_vector.flags.writeable

"""
Unit Tests: Encodings

Tests:
    - Binary quantization bit layout
    - Binary32 blob encoding and decoding
    - Dimension ceilings per encoding
"""

import struct

import pytest
import numpy as np

from vectable.core.errors import ErrorCode, InvalidArgument
from vectable.core.types import Encoding, code_length
from vectable.index.distance import hamming
from vectable.index.quantization import (
    binary_code_hex,
    from_blob,
    max_collection_dimension,
    max_dimension,
    to_bits,
    to_blob,
    unpack_bits,
)


class TestToBits:
    """Tests for sign-bit quantization."""

    def test_bit_order(self):
        """Component 0 is the least-significant bit of byte 0."""
        assert to_bits([1, -1, 1, 0, 1, -1, 0, 1]) == b"\x95"

    def test_zero_is_unset(self):
        assert to_bits([0.0] * 8) == b"\x00"

    def test_length_is_ceil_of_dimension(self):
        for d in (1, 7, 8, 9, 16, 383, 384, 385):
            assert len(to_bits(np.ones(d))) == code_length(d) == -(-d // 8)

    def test_padding_bits_are_zero(self):
        """Nine positive components fill byte 0 and only bit 0 of byte 1."""
        assert to_bits(np.ones(9)) == b"\xff\x01"

    def test_384_dimension_layout(self):
        vector = np.full(384, -1.0)
        vector[[0, 7, 383]] = 1.0
        code = to_bits(vector)

        assert len(code) == 48
        assert code[0] == 0x81
        assert code[-1] == 0x80
        assert code[1:-1] == bytes(46)

    def test_hex_rendering(self):
        assert binary_code_hex([1, -1, 1, 0, 1, -1, 0, 1]) == "95"

    def test_unpack_inverts_sign_mask(self, rng):
        vector = rng.standard_normal(21)
        mask = unpack_bits(to_bits(vector), 21)

        np.testing.assert_array_equal(mask, vector > 0)

    def test_opposite_vectors_maximally_distant(self):
        vector = np.array([1.0, -2.0, 3.0, -4.0, 5.0])
        assert hamming(to_bits(vector), to_bits(-vector)) == 5


class TestBlob:
    """Tests for the binary32 little-endian blob."""

    def test_layout_is_little_endian_binary32(self):
        blob = to_blob([1.0, -2.5])

        assert blob == struct.pack("<ff", 1.0, -2.5)

    def test_length(self):
        assert len(to_blob(np.zeros(384))) == 4 * 384

    def test_decode_within_binary32_rounding(self, rng):
        vector = rng.standard_normal(64)
        decoded = from_blob(to_blob(vector))

        assert decoded.dtype == np.float32
        np.testing.assert_allclose(decoded, vector, rtol=1.2e-7)

    def test_empty_blob(self):
        assert from_blob(b"").shape == (0,)

    def test_malformed_length_raises(self):
        with pytest.raises(InvalidArgument) as exc_info:
            from_blob(b"\x00\x00\x00")
        assert exc_info.value.code is ErrorCode.MALFORMED_BLOB


class TestMaxDimension:
    """Tests for per-encoding dimension ceilings."""

    def test_binary32(self):
        assert max_dimension(65_535, Encoding.BINARY32_BLOB) == 16_383

    def test_bit_packed(self):
        assert max_dimension(65_535, Encoding.BIT_PACKED) == 524_280

    def test_json_text(self):
        assert max_dimension(65_535, Encoding.JSON_TEXT) == 4_095

    def test_ordering_across_encodings(self):
        budget = 10_000
        assert (
            max_dimension(budget, Encoding.JSON_TEXT)
            < max_dimension(budget, Encoding.BINARY32_BLOB)
            < max_dimension(budget, Encoding.BIT_PACKED)
        )

    def test_collection_ceiling_is_the_tightest_one(self):
        assert max_collection_dimension(4_000, Encoding.BINARY32_BLOB) == 1_000
        assert max_collection_dimension(4_000, Encoding.BIT_PACKED) == 1_000
        assert max_collection_dimension(4_000, Encoding.JSON_TEXT) == 250

    def test_collection_ceiling_never_exceeds_blob(self):
        for encoding in Encoding:
            assert 4 * max_collection_dimension(4_001, encoding) <= 4_001

"""Tests for chained reference construction and recognition."""

import pytest

from relayer_sdk.errors import InvalidChainedReferenceError
from relayer_sdk.relayer import (
    from_chained_reference,
    is_chained_reference,
    to_chained_reference,
)
from relayer_sdk.relayer.chained_reference import MAX_CHAINED_REFERENCE_KEY, to_hex


class TestToChainedReference:
    def test_wire_format(self) -> None:
        """0x + ba10 + zero padding + big-endian key, 64 hex digits."""
        assert to_hex(to_chained_reference(0)) == "0xba10" + "0" * 60
        assert to_hex(to_chained_reference(7)) == "0xba10" + "0" * 59 + "7"
        assert to_hex(to_chained_reference(0x1234)) == "0xba10" + "0" * 56 + "1234"

    def test_fits_in_uint256(self) -> None:
        assert to_chained_reference(MAX_CHAINED_REFERENCE_KEY) < 2**256

    def test_injective(self) -> None:
        keys = [0, 1, 2, 255, 256, 10**6, MAX_CHAINED_REFERENCE_KEY]
        references = {to_chained_reference(k) for k in keys}
        assert len(references) == len(keys)

    def test_deterministic(self) -> None:
        assert to_chained_reference(42) == to_chained_reference(42)

    def test_above_any_real_amount(self) -> None:
        # 10^30 tokens of 18 decimals is far beyond any supply
        assert to_chained_reference(0) > 10**48

    @pytest.mark.parametrize("key", [-1, MAX_CHAINED_REFERENCE_KEY + 1])
    def test_key_out_of_range(self, key: int) -> None:
        with pytest.raises(InvalidChainedReferenceError):
            to_chained_reference(key)


class TestRecognition:
    def test_is_chained_reference(self) -> None:
        assert is_chained_reference(to_chained_reference(3))
        assert is_chained_reference(str(to_chained_reference(3)))

    def test_plain_amounts_are_not_references(self) -> None:
        assert not is_chained_reference(0)
        assert not is_chained_reference(10**18)
        assert not is_chained_reference("-1")
        assert not is_chained_reference(2**256)

    def test_from_chained_reference(self) -> None:
        for key in (0, 5, 1000, MAX_CHAINED_REFERENCE_KEY):
            assert from_chained_reference(to_chained_reference(key)) == key

    def test_from_chained_reference_accepts_string(self) -> None:
        assert from_chained_reference(str(to_chained_reference(9))) == 9

    def test_from_plain_amount_raises(self) -> None:
        with pytest.raises(InvalidChainedReferenceError):
            from_chained_reference(10**18)

"""
Module 01 - Canonical JSON Unit Tests
Tests for core/schemas/canonical.py

Tests:
- Key sorting and compact separators
- None handling (kept by default, optional drop)
- Rejection of values with no canonical form
- Pydantic models and datetimes
"""
from datetime import datetime, timedelta, timezone

import pytest

from core.schemas.basket import BasketData
from core.schemas.canonical import (
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    format_datetime_canonical,
    loads_canonical,
)
from core.schemas.errors import CanonicalizationException


class TestDumpsCanonical:
    """Tests for dumps_canonical()."""

    def test_sorted_compact(self):
        assert dumps_canonical({"b": 2, "a": {"d": None, "c": 1}}) == '{"a":{"c":1,"d":null},"b":2}'

    def test_drop_none(self):
        assert dumps_canonical({"a": 1, "b": None}, drop_none=True) == '{"a":1}'

    def test_unicode_not_escaped(self):
        assert dumps_canonical({"k": "ü"}) == '{"k":"ü"}'

    def test_big_integers_exact(self):
        big = 2**255 + 1

        assert dumps_canonical({"v": big}) == '{"v":%d}' % big

    def test_bytes_as_hex(self):
        assert dumps_canonical({"b": b"\x01\xff"}) == '{"b":"0x01ff"}'

    def test_tuple_as_list(self):
        assert dumps_canonical((1, 2)) == "[1,2]"

    def test_infinity_rejected(self):
        with pytest.raises(CanonicalizationException):
            dumps_canonical({"x": float("inf")})

    def test_non_string_key_rejected(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            dumps_canonical({1: "a"})

        assert exc_info.value.details["key"] == "1"

    def test_unknown_type_rejected(self):
        with pytest.raises(CanonicalizationException):
            dumps_canonical({"s": {1, 2}})

    def test_pydantic_model_uses_aliases(self):
        data = BasketData(salt="0x" + "00" * 32, token_id=3, value=9)

        assert dumps_canonical(data) == '{"salt":"0x%s","tokenId":3,"value":9}' % ("00" * 32)


class TestDatetimes:
    """Tests for datetime canonicalization."""

    def test_utc_z_suffix(self):
        dt = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        assert format_datetime_canonical(dt) == "2026-01-02T03:04:05Z"

    def test_offset_converted_to_utc(self):
        dt = datetime(2026, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))

        assert format_datetime_canonical(dt) == "2026-01-02T03:04:05Z"

    def test_naive_treated_as_utc(self):
        assert canonicalize_value(datetime(2026, 1, 1)) == "2026-01-01T00:00:00Z"


class TestHelpers:
    """Tests for loads_canonical() and canonical_equals()."""

    def test_round_trip(self):
        obj = {"a": [1, {"b": None}]}

        assert loads_canonical(dumps_canonical(obj)) == obj

    def test_canonical_equals_ignores_order(self):
        assert canonical_equals({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_canonical_equals_false_for_uncanonicalizable(self):
        assert not canonical_equals({"a": float("nan")}, {"a": float("nan")})

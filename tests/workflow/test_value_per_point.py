"""Tests for value-per-point normalization."""

import itertools
import math
from decimal import Decimal

import pytest

from catalog_cms.domain.entities import Currency, SalesChannel, ValuePerPoint
from catalog_cms.workflow.value_per_point import coerce_number, normalize_value_per_points


def make_entry(code, channel_id, vpp, currency_id=1):
    """Create a raw override mapping."""
    return {
        "currency": {"id": currency_id, "code": code, "name": f"{code} name", "symbol": "¤"},
        "sales_channel": {"id": channel_id, "name": f"Channel {channel_id}"},
        "vpp": vpp,
    }


class TestCoerceNumber:
    """Tests for raw value coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1, 1.0),
            (0, 0.0),
            (2.5, 2.5),
            (Decimal("1.25"), 1.25),
            ("3", 3.0),
            ("  4.75 ", 4.75),
            ("-.5", -0.5),
            ("2E3", 2000.0),
        ],
    )
    def test_accepts_finite_numbers(self, raw, expected):
        """Test numbers and numeric strings are coerced."""
        assert coerce_number(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "   ",
            "abc",
            "1_000",
            "0x10",
            "1e",
            True,
            False,
            math.nan,
            math.inf,
            "inf",
            "1e999",
            [],
            {},
        ],
    )
    def test_rejects_non_numbers(self, raw):
        """Test unusable values are treated as absent."""
        assert coerce_number(raw) is None


class TestNormalizeValuePerPoints:
    """Tests for normalize_value_per_points."""

    def test_empty_inputs(self):
        """Test missing or non-list inputs normalize to an empty list."""
        assert normalize_value_per_points(None) == []
        assert normalize_value_per_points([]) == []
        assert normalize_value_per_points("INR") == []
        assert normalize_value_per_points({"currency": None}) == []

    def test_output_shape(self):
        """Test a valid entry produces the full output item."""
        result = normalize_value_per_points([make_entry("usd", 7, "1.5", currency_id=3)])

        assert result == [
            {
                "currency_id": 3,
                "currency_code": "USD",
                "currency_name": "usd name",
                "currency_symbol": "¤",
                "sales_channel_id": 7,
                "sales_channel_name": "Channel 7",
                "value": 1.5,
            }
        ]

    def test_drops_incomplete_entries(self):
        """Test entries without code, channel or value are dropped."""
        entries = [
            make_entry("", 1, 1),
            make_entry("  ", 1, 1),
            {"currency": {"id": 1, "code": "USD"}, "sales_channel": None, "vpp": 1},
            {"currency": None, "sales_channel": {"id": 1}, "vpp": 1},
            make_entry("USD", 1, "not-a-number"),
            make_entry("USD", 1, None),
            None,
            make_entry("EUR", 1, 2),
        ]

        result = normalize_value_per_points(entries)

        assert [item["currency_code"] for item in result] == ["EUR"]

    def test_case_insensitive_duplicates_keep_last(self):
        """Test "inr" and "INR" for one channel collapse to the later value."""
        entries = [
            make_entry("inr", 1, 1, currency_id=10),
            make_entry("INR", 1, "2.5", currency_id=11),
        ]

        result = normalize_value_per_points(entries)

        assert len(result) == 1
        assert result[0]["currency_code"] == "INR"
        assert result[0]["currency_id"] == 11
        assert result[0]["value"] == 2.5

    def test_same_code_different_channels_kept(self):
        """Test the dedup key includes the sales channel."""
        result = normalize_value_per_points([make_entry("USD", 1, 1), make_entry("USD", 2, 2)])

        assert [item["sales_channel_id"] for item in result] == [1, 2]

    def test_sorted_by_code_then_channel_string(self):
        """Test channel ids sort as strings within a currency."""
        entries = [
            make_entry("USD", 2, 1),
            make_entry("EUR", 5, 1),
            make_entry("USD", 10, 1),
        ]

        result = normalize_value_per_points(entries)

        assert [(item["currency_code"], item["sales_channel_id"]) for item in result] == [
            ("EUR", 5),
            ("USD", 10),
            ("USD", 2),
        ]

    def test_order_independent(self):
        """Test every permutation of distinct entries normalizes identically."""
        entries = [
            make_entry("USD", 1, 1),
            make_entry("EUR", 2, "0.5"),
            make_entry("GBP", 1, Decimal("3")),
        ]
        expected = normalize_value_per_points(entries)

        for permutation in itertools.permutations(entries):
            assert normalize_value_per_points(list(permutation)) == expected

    def test_accepts_domain_objects(self):
        """Test ValuePerPoint dataclasses are read like mappings."""
        entry = ValuePerPoint(
            currency=Currency(id=1, code="usd", name="US Dollar", symbol="$"),
            sales_channel=SalesChannel(id=4, name="Web"),
            vpp=Decimal("0.01"),
        )

        result = normalize_value_per_points([entry])

        assert result[0]["currency_code"] == "USD"
        assert result[0]["currency_symbol"] == "$"
        assert result[0]["sales_channel_name"] == "Web"
        assert result[0]["value"] == 0.01

"""Tests for cart parsing and the charge total."""

from decimal import Decimal

import pytest
from ordering.checkout.cart import CartLine, cart_total, parse_cart
from ordering.checkout.errors import InvalidRequest


class TestParseCart:
    def test_parse_lines_ignoring_extra_keys(self):
        lines = parse_cart([{"_id": "p1", "price": 12.5, "name": "Mug", "quantity": 7}])
        assert lines == [CartLine(product_id="p1", price=Decimal("12.5"))]

    def test_keeps_cart_order(self):
        lines = parse_cart([{"_id": "b", "price": 1}, {"_id": "a", "price": 2}, {"_id": "b", "price": 1}])
        assert [line.product_id for line in lines] == ["b", "a", "b"]

    def test_string_prices(self):
        assert parse_cart([{"_id": "p1", "price": "3.10"}])[0].price == Decimal("3.10")

    @pytest.mark.parametrize("payload", [None, [], {}, "cart"])
    def test_missing_or_empty_cart(self, payload):
        with pytest.raises(InvalidRequest):
            parse_cart(payload)

    @pytest.mark.parametrize(
        "line",
        [
            "p1",
            {"price": 1},
            {"_id": "", "price": 1},
            {"_id": "p1"},
            {"_id": "p1", "price": None},
            {"_id": "p1", "price": True},
            {"_id": "p1", "price": "abc"},
            {"_id": "p1", "price": -0.01},
            {"_id": "p1", "price": "NaN"},
            {"_id": "p1", "price": "Infinity"},
        ],
    )
    def test_malformed_line(self, line):
        with pytest.raises(InvalidRequest) as exc:
            parse_cart([line])
        assert exc.value.kind == "invalid_request"
        assert exc.value.status_code == 400


class TestCartTotal:
    @pytest.mark.parametrize(
        "prices, expected",
        [
            ([0.1, 0.2], "0.30"),
            ([19.99, 5.01], "25.00"),
            ([19.999], "20.00"),
            ([1.005], "1.01"),
            ([1.004], "1.00"),
            ([10], "10.00"),
            ([0.333, 0.333, 0.333], "1.00"),
        ],
    )
    def test_total_is_rounded_half_up_to_cents(self, prices, expected):
        lines = parse_cart([{"_id": f"p{i}", "price": price} for i, price in enumerate(prices)])
        total = cart_total(lines)
        assert total == Decimal(expected)
        assert str(total) == expected

    def test_rounding_happens_after_summing(self):
        lines = parse_cart([{"_id": "a", "price": 0.004}, {"_id": "b", "price": 0.004}])
        assert cart_total(lines) == Decimal("0.01")

    @pytest.mark.parametrize("price", [1e30, "123456789012345678901234567890"])
    def test_total_beyond_cent_precision_is_invalid(self, price):
        lines = parse_cart([{"_id": "p1", "price": price}])
        with pytest.raises(InvalidRequest) as exc:
            cart_total(lines)
        assert exc.value.status_code == 400

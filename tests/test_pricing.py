# tests/test_pricing.py

"""Unit tests for price parsing and discount application."""

import unittest
from decimal import Decimal
from unittest.mock import patch

from MARKET.utils.pricing import (
    NO_DISCOUNT,
    AmountDiscount,
    PercentageDiscount,
    compute_final_price,
    discount_from_fields,
    parse_base_price,
    round_money,
    validate_discount_fields,
)


class TestParseBasePrice(unittest.TestCase):
    """Verify display strings and numbers become a positive base price."""

    def test_currency_string_with_thousands_separator(self) -> None:
        """Verify digit runs are joined for 'Rs. 2,200'."""
        self.assertEqual(parse_base_price("Rs. 2,200"), Decimal("2200"))

    def test_currency_prefix_without_space(self) -> None:
        """Verify a dotted currency prefix is not read as a decimal point."""
        self.assertEqual(parse_base_price("Rs.500"), Decimal("500"))

    def test_trailing_dash_suffix(self) -> None:
        """Verify '/-' suffixes are ignored."""
        self.assertEqual(parse_base_price("Rs. 1,250/-"), Decimal("1250"))

    def test_decimal_fraction_is_kept(self) -> None:
        """Verify '45.50' parses to 45.5 rather than 4550."""
        self.assertEqual(parse_base_price("45.50"), Decimal("45.5"))

    def test_separator_and_fraction(self) -> None:
        """Verify '1,234.56' keeps its fraction."""
        self.assertEqual(parse_base_price("1,234.56"), Decimal("1234.56"))

    def test_numbers_pass_through(self) -> None:
        """Verify ints and floats are used as-is."""
        self.assertEqual(parse_base_price(550), Decimal("550"))
        self.assertEqual(parse_base_price(99.99), Decimal("99.99"))

    def test_unusable_values_fall_back(self) -> None:
        """Verify non-numeric, missing, zero and negative prices use the fallback."""
        for raw in ("abc", "", None, 0, -5, "Rs. 0", True, float("nan"), ["100"]):
            with self.subTest(raw=raw):
                self.assertEqual(parse_base_price(raw), Decimal("0"))

    def test_configured_fallback(self) -> None:
        """Verify the fallback comes from FALLBACK_BASE_PRICE."""
        with patch("MARKET.utils.pricing.FALLBACK_BASE_PRICE", "100"):
            self.assertEqual(parse_base_price("free"), Decimal("100"))


class TestDiscounts(unittest.TestCase):
    """Verify discount construction and application."""

    def test_percentage(self) -> None:
        """Verify 10% off 2200 is 1980."""
        quote = compute_final_price("Rs. 2,200", PercentageDiscount(Decimal("10")))
        self.assertEqual(quote.base_price, Decimal("2200.00"))
        self.assertEqual(quote.final_price, Decimal("1980.00"))
        self.assertEqual(quote.savings, Decimal("220.00"))

    def test_amount_clamps_at_zero(self) -> None:
        """Verify an amount larger than the price yields zero."""
        quote = compute_final_price(2200, AmountDiscount(Decimal("3000")))
        self.assertEqual(quote.final_price, Decimal("0.00"))

    def test_percentage_over_hundred_clamps_at_zero(self) -> None:
        """Verify stored percentages above 100 never go negative."""
        quote = compute_final_price(100, PercentageDiscount(Decimal("150")))
        self.assertEqual(quote.final_price, Decimal("0.00"))

    def test_rounding_is_half_up(self) -> None:
        """Verify money rounds half-up to two places."""
        self.assertEqual(compute_final_price(10.005).final_price, Decimal("10.01"))
        self.assertEqual(
            compute_final_price(10, PercentageDiscount(Decimal("33"))).final_price,
            Decimal("6.70"),
        )

    def test_discount_from_fields(self) -> None:
        """Verify stored fields map to the right discount variant."""
        self.assertEqual(discount_from_fields("percentage", 10), PercentageDiscount(Decimal("10")))
        self.assertEqual(discount_from_fields("amount", "50"), AmountDiscount(Decimal("50")))

    def test_absent_discounts(self) -> None:
        """Verify missing, zero, negative or unknown discounts mean none."""
        cases = [(None, None), ("percentage", 0), ("amount", -10), ("bogo", 5), (None, 10), ("amount", "x")]
        for kind, value in cases:
            with self.subTest(kind=kind, value=value):
                self.assertIs(discount_from_fields(kind, value), NO_DISCOUNT)

    def test_no_discount_metadata(self) -> None:
        """Verify NoDiscount reports no kind and no value."""
        self.assertIsNone(NO_DISCOUNT.kind)
        self.assertIsNone(NO_DISCOUNT.value)
        self.assertEqual(compute_final_price(550).final_price, Decimal("550.00"))

    def test_as_dict_uses_camel_case_floats(self) -> None:
        """Verify the wire shape of a quote."""
        quote = compute_final_price(550, AmountDiscount(Decimal("50")))
        self.assertEqual(quote.as_dict(), {"basePrice": 550.0, "finalPrice": 500.0})


class TestValidateDiscountFields(unittest.TestCase):
    """Verify write-time discount validation."""

    def test_accepts_valid(self) -> None:
        """Verify in-range values pass."""
        validate_discount_fields("percentage", 0)
        validate_discount_fields("percentage", 100)
        validate_discount_fields("amount", 5000)
        validate_discount_fields(None, None)

    def test_rejects_percentage_over_hundred(self) -> None:
        """Verify percentages above 100 are rejected."""
        with self.assertRaises(ValueError):
            validate_discount_fields("percentage", 101)

    def test_rejects_negative(self) -> None:
        """Verify negative values are rejected for any type."""
        with self.assertRaises(ValueError):
            validate_discount_fields("amount", -1)

    def test_rejects_unknown_type(self) -> None:
        """Verify unknown discount types are rejected."""
        with self.assertRaises(ValueError):
            validate_discount_fields("bogo", 1)


class TestMoneyHelpers(unittest.TestCase):
    """Verify rounding helpers."""

    def test_round_money(self) -> None:
        """Verify two-place half-up rounding."""
        self.assertEqual(round_money(Decimal("2.345")), Decimal("2.35"))

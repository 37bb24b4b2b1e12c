# MARKET/utils/pricing.py
"""
Price parsing and discount application.

Catalog prices arrive either as numbers or as display strings such as
``"Rs. 2,200"``. They are parsed once into a :class:`~decimal.Decimal`,
discounted, then rounded half-up to two decimal places.
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, ClassVar, Optional, Union

from MARKET.core.config import FALLBACK_BASE_PRICE

logger = logging.getLogger("utils.pricing")

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

DISCOUNT_TYPES = ("percentage", "amount")

_DIGIT_RUNS = re.compile(r"\d+")
_DECIMAL_FRACTION = re.compile(r"\d\.\d")
_NOT_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if result.is_nan() or result.is_infinite():
        return None
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


# ---------------------------
# Discounts
# ---------------------------
@dataclass(frozen=True)
class NoDiscount:
    kind: ClassVar[Optional[str]] = None
    value: ClassVar[Optional[Decimal]] = None

    def apply(self, base: Decimal) -> Decimal:
        return base


@dataclass(frozen=True)
class PercentageDiscount:
    value: Decimal
    kind: ClassVar[str] = "percentage"

    def apply(self, base: Decimal) -> Decimal:
        return max(ZERO, base * (1 - self.value / HUNDRED))


@dataclass(frozen=True)
class AmountDiscount:
    value: Decimal
    kind: ClassVar[str] = "amount"

    def apply(self, base: Decimal) -> Decimal:
        return max(ZERO, base - self.value)


Discount = Union[NoDiscount, PercentageDiscount, AmountDiscount]
NO_DISCOUNT = NoDiscount()


def discount_from_fields(discount_type: Any, discount_value: Any) -> Discount:
    """Build a discount from stored listing fields; absent or zero means none."""
    if not discount_type or not discount_value:
        return NO_DISCOUNT
    value = _to_decimal(discount_value)
    if value is None or value <= ZERO:
        return NO_DISCOUNT
    if discount_type == "percentage":
        return PercentageDiscount(value)
    if discount_type == "amount":
        return AmountDiscount(value)
    logger.warning("Ignoring unknown discount type %r", discount_type)
    return NO_DISCOUNT


def validate_discount_fields(discount_type: Any, discount_value: Any) -> None:
    """Write-time check: value >= 0 and percentages within [0, 100]."""
    if discount_type is not None and discount_type not in DISCOUNT_TYPES:
        raise ValueError(f"discountType must be one of {', '.join(DISCOUNT_TYPES)}")
    if discount_value is None:
        return
    value = _to_decimal(discount_value)
    if value is None:
        raise ValueError("discountValue must be a number")
    if value < ZERO:
        raise ValueError("discountValue must be zero or greater")
    if discount_type == "percentage" and value > HUNDRED:
        raise ValueError("percentage discountValue must be between 0 and 100")


# ---------------------------
# Base price parsing
# ---------------------------
def _fallback_price() -> Decimal:
    return _to_decimal(FALLBACK_BASE_PRICE) or ZERO


def _parse_price_string(text: str) -> Optional[Decimal]:
    text = text.strip()
    digit_runs = _DIGIT_RUNS.findall(text)

    # Method 1: join every digit run ("Rs. 2,200" -> "2200").
    if digit_runs and not _DECIMAL_FRACTION.search(text):
        return Decimal("".join(digit_runs))

    # Method 2: keep digits and dots, read the leading decimal ("45.50" -> 45.5).
    cleaned = _NOT_NUMERIC.sub("", text).lstrip(".")
    match = _LEADING_NUMBER.match(cleaned)
    return Decimal(match.group()) if match else None


def parse_base_price(raw: Any) -> Decimal:
    if isinstance(raw, str):
        price = _parse_price_string(raw)
    elif isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        price = None if isinstance(raw, float) and math.isnan(raw) else _to_decimal(raw)
    else:
        price = None

    if price is None or price <= ZERO:
        logger.debug("Unparsable price %r, using fallback", raw)
        return _fallback_price()
    return price


@dataclass(frozen=True)
class PriceQuote:
    base_price: Decimal
    final_price: Decimal

    @property
    def savings(self) -> Decimal:
        return self.base_price - self.final_price

    def as_dict(self) -> dict:
        return {"basePrice": float(self.base_price), "finalPrice": float(self.final_price)}


def compute_final_price(raw_price: Any, discount: Discount = NO_DISCOUNT) -> PriceQuote:
    base = parse_base_price(raw_price)
    final = discount.apply(base)
    return PriceQuote(base_price=round_money(base), final_price=round_money(final))

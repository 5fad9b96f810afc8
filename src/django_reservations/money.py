"""Money helpers: Decimal normalization, rounding and display formatting."""

import logging
from decimal import (
    ROUND_CEILING,
    ROUND_FLOOR,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
)
from typing import Union

from django.core.exceptions import ImproperlyConfigured
from django.utils import translation
from django.utils.formats import number_format

from django_reservations.conf import RoundingStrategy
from django_reservations.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

# Currency precision rules for display
CURRENCY_DECIMALS = {
    "USD": 2, "EUR": 2, "GBP": 2, "MXN": 2,
    "CAD": 2, "AUD": 2, "CHF": 2, "CNY": 2,
    "JPY": 0, "KRW": 0,  # No decimal currencies
    "BTC": 8,  # Crypto
}

CURRENCY_SYMBOLS = {
    "USD": "$", "EUR": "€", "GBP": "£", "MXN": "MX$",
    "CAD": "CA$", "AUD": "A$", "CHF": "CHF ", "CNY": "CN¥",
    "JPY": "¥", "KRW": "₩",
    "BTC": "₿",
}

ONE = Decimal("1")
QUARTERS_PER_DOLLAR = Decimal("4")


def to_decimal(value: Number) -> Decimal:
    """Normalize a numeric value to Decimal.

    Floats go through ``str`` so 19.99 stays 19.99.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary value: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a monetary value: {value!r}")


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places using banker's rounding."""
    return amount.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_EVEN)


def round_price(amount: Decimal, strategy: str) -> Decimal:
    """Round a total according to a RoundingStrategy.

    Raises:
        InvalidConfigurationError: Unknown strategy
    """
    if strategy == RoundingStrategy.NONE:
        return amount
    if strategy == RoundingStrategy.NEAREST_DOLLAR:
        return amount.quantize(ONE, rounding=ROUND_HALF_EVEN)
    if strategy == RoundingStrategy.NEAREST_QUARTER:
        quarters = (amount * QUARTERS_PER_DOLLAR).quantize(ONE, rounding=ROUND_HALF_EVEN)
        return quarters / QUARTERS_PER_DOLLAR
    if strategy == RoundingStrategy.UP:
        return amount.quantize(ONE, rounding=ROUND_CEILING)
    if strategy == RoundingStrategy.DOWN:
        return amount.quantize(ONE, rounding=ROUND_FLOOR)
    raise InvalidConfigurationError(
        f"Unknown rounding strategy: {strategy}",
        errors=[f"rounding_strategy={strategy!r}"],
    )


def currency_symbol(currency: str) -> str:
    """Return the display symbol for an ISO 4217 code.

    Codes without a known symbol are shown as the code itself.

    Raises:
        ValueError: Not a three-letter currency code
    """
    if not isinstance(currency, str) or len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"Invalid currency code: {currency!r}")
    code = currency.upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_price(
    amount: Number,
    currency: str = "USD",
    show_symbol: bool = True,
    decimal_places: int | None = None,
    locale: str | None = None,
) -> str:
    """Format an amount for display using the active (or given) locale.

    Grouping and decimal separators come from Django's locale formats.
    Never raises for formatting problems: falls back to ``$`` plus a
    fixed two-decimal string.

    Example:
        format_price(Decimal("1234.5"))            # "$1,234.50"
        format_price(Decimal("1234.5"), "EUR", locale="de")  # "€1.234,50"
    """
    amount = to_decimal(amount)

    try:
        symbol = currency_symbol(currency) if show_symbol else ""
        places = decimal_places
        if places is None:
            places = CURRENCY_DECIMALS.get(currency.upper(), 2)
        quantized = round_money(amount, places)
        sign = "-" if quantized < 0 else ""
        if locale:
            with translation.override(locale):
                number = number_format(abs(quantized), decimal_pos=places, force_grouping=True)
        else:
            number = number_format(abs(quantized), decimal_pos=places, force_grouping=True)
        return f"{sign}{symbol}{number}"
    except (ValueError, TypeError, ArithmeticError, ImproperlyConfigured) as e:
        logger.warning(f"Price formatting failed, using fallback: {e}")
        symbol = "$" if show_symbol else ""
        return f"{symbol}{amount:.2f}"


def calculate_discount_percentage(original_price: Number, discounted_price: Number) -> Decimal:
    """Discount between two prices as a fraction (0.2 for 20%)."""
    original = to_decimal(original_price)
    discounted = to_decimal(discounted_price)
    if original <= 0:
        return Decimal("0")
    return max(Decimal("0"), (original - discounted) / original)


def format_discount_percentage(discount_percent: Number, include_percent: bool = True) -> str:
    """Format a discount fraction, e.g. 0.15 -> "15%"."""
    percent = (to_decimal(discount_percent) * 100).quantize(ONE, rounding=ROUND_HALF_UP)
    return f"{percent}{'%' if include_percent else ''}"

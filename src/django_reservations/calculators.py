"""Reservation price calculation.

Turns a day count and a tier set into a PricingResult: base price from the
resolved tier, optional tax, rounding of the total, price per day and a
display breakdown with savings against single-day pricing.

Calculation is a pure function of its arguments. Identical inputs give
equal results, formatted strings included.
"""

import dataclasses
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

from django.db import models

from django_reservations.conf import PricingConfig, RoundingStrategy, resolve_config
from django_reservations.exceptions import (
    CalculationError,
    InvalidDayCountError,
    NoMatchingTierError,
    NoTiersProvidedError,
    PricingError,
)
from django_reservations.money import format_price, round_price, to_decimal
from django_reservations.tiers import PricingTier, find_best_price_tier, is_positive_day_count

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class LineItemType(models.TextChoices):
    BASE = "base", "Base"
    DISCOUNT = "discount", "Discount"
    TAX = "tax", "Tax"
    FEE = "fee", "Fee"


@dataclass(frozen=True)
class PricingOptions:
    """Per-call calculation flags. Never persisted.

    Attributes:
        include_tax: Add tax on top of the base price
        tax_rate: Rate 0-1; None uses PricingConfig.default_tax_rate
        round_prices: Round the total with the configured strategy
        currency: ISO code; None uses PricingConfig.default_currency
        require_consecutive_days: Recorded on the result as is_consecutive
    """

    include_tax: bool = False
    tax_rate: Decimal | None = None
    round_prices: bool = False
    currency: str | None = None
    require_consecutive_days: bool = False

    def __post_init__(self):
        if self.tax_rate is not None and not isinstance(self.tax_rate, Decimal):
            object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate))

    def merged(self, **changes) -> "PricingOptions":
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


class PriceLineItem(NamedTuple):
    """One row of a price breakdown."""

    description: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    type: str


@dataclass(frozen=True)
class PriceBreakdown:
    """Itemized explanation of a calculation, for display only."""

    tier_description: str
    line_items: tuple[PriceLineItem, ...]
    explanation: tuple[str, ...]
    savings: Decimal | None = None


@dataclass(frozen=True)
class PricingResult:
    """Immutable result of one price calculation.

    ``total_price`` equals ``base_price + tax_amount`` before rounding, and
    ``price_per_day`` equals ``total_price / day_count`` after it.
    """

    total_price: Decimal
    base_price: Decimal
    applied_tier: PricingTier | None
    tax_amount: Decimal
    day_count: int
    price_per_day: Decimal
    is_consecutive: bool
    currency: str
    formatted_price: str
    breakdown: PriceBreakdown


def calculate_reservation_price(
    day_count: int,
    tiers,
    options: PricingOptions | None = None,
    config: PricingConfig | None = None,
) -> PricingResult:
    """Calculate the total price for a multi-day reservation.

    Args:
        day_count: Number of days booked (positive integer)
        tiers: Pricing tiers to resolve against
        options: Per-call flags (tax, rounding, currency)
        config: Engine configuration; None reads Django settings

    Returns:
        PricingResult with breakdown

    Raises:
        NoTiersProvidedError: Empty tier set
        InvalidDayCountError: day_count not a positive integer
        NoMatchingTierError: Resolver found nothing
        CalculationError: Any other failure, wrapping the cause
    """
    if not tiers:
        raise NoTiersProvidedError(day_count=day_count)

    available_days: list[int] = []
    try:
        available_days = sorted(t.number_of_days for t in tiers)

        if not is_positive_day_count(day_count):
            raise InvalidDayCountError(day_count, available_days=available_days)

        options = options or PricingOptions()
        config = resolve_config(config)

        return _calculate(day_count, tiers, options, config, available_days)
    except PricingError:
        raise
    except Exception as e:
        raise CalculationError(e, day_count=day_count, available_days=available_days) from e


def _calculate(day_count, tiers, options, config, available_days) -> PricingResult:
    applied_tier = find_best_price_tier(day_count, tiers)
    if applied_tier is None:
        raise NoMatchingTierError(day_count, available_days=available_days)

    currency = options.currency or config.default_currency
    base_price = applied_tier.price
    total_price = base_price

    line_items = [
        PriceLineItem(
            description=applied_tier.display_label,
            quantity=1,
            unit_price=base_price,
            total_price=base_price,
            type=LineItemType.BASE,
        )
    ]

    tax_amount = ZERO
    tax_rate = ZERO
    if options.include_tax:
        tax_rate = options.tax_rate if options.tax_rate is not None else config.default_tax_rate
        tax_amount = base_price * tax_rate
        total_price = base_price + tax_amount

        if tax_amount > 0:
            line_items.append(
                PriceLineItem(
                    description=f"Tax ({tax_rate * 100:.1f}%)",
                    quantity=1,
                    unit_price=tax_amount,
                    total_price=tax_amount,
                    type=LineItemType.TAX,
                )
            )

    # Rounding applies to the total, not to individual line items
    if options.round_prices or config.rounding_strategy != RoundingStrategy.NONE:
        total_price = round_price(total_price, config.rounding_strategy)

    price_per_day = total_price / day_count

    def fmt(amount):
        return format_price(amount, currency, locale=config.locale)

    explanation = [
        f"Using {applied_tier.number_of_days}-day pricing tier",
        f"Base price: {fmt(base_price)}",
    ]
    if tax_amount > 0:
        explanation.append(f"Tax: {fmt(tax_amount)}")
    explanation.append(f"Total: {fmt(total_price)}")

    savings = None
    single_day_tier = next((t for t in tiers if t.number_of_days == 1), None)
    if single_day_tier is not None and day_count > 1:
        single_day_total = single_day_tier.price * day_count
        if options.include_tax:
            single_day_total = single_day_total * (1 + tax_rate)
        difference = single_day_total - total_price
        if difference > 0:
            savings = difference
            explanation.append(f"Savings vs {day_count} individual days: {fmt(savings)}")

    breakdown = PriceBreakdown(
        tier_description=applied_tier.label or f"{applied_tier.number_of_days} day pricing",
        line_items=tuple(line_items),
        explanation=tuple(explanation),
        savings=savings,
    )

    return PricingResult(
        total_price=total_price,
        base_price=base_price,
        applied_tier=applied_tier,
        tax_amount=tax_amount,
        day_count=day_count,
        price_per_day=price_per_day,
        is_consecutive=options.require_consecutive_days,
        currency=currency,
        formatted_price=fmt(total_price),
        breakdown=breakdown,
    )

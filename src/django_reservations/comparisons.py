"""Price comparison tables across day counts."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django_reservations.calculators import PricingOptions, calculate_reservation_price
from django_reservations.conf import PricingConfig, resolve_config
from django_reservations.exceptions import PricingError
from django_reservations.money import format_price

logger = logging.getLogger(__name__)


@dataclass
class PriceComparison:
    """One row of a comparison table."""

    day_count: int
    option: str
    price: Decimal
    price_per_day: Decimal
    savings: Decimal = Decimal("0")
    is_recommended: bool = False
    notes: list[str] = field(default_factory=list)


def compare_pricing_options(
    day_counts,
    tiers,
    options: PricingOptions | None = None,
    config: PricingConfig | None = None,
) -> list[PriceComparison]:
    """Price each day count and flag the best value.

    Day counts that fail to calculate are skipped with a warning. The
    entry with the lowest price per day is recommended (first one wins a
    tie), and each entry's savings is measured against the most expensive
    entry. Rows are returned ascending by day count.
    """
    if not day_counts or not tiers:
        return []

    options = options or PricingOptions()
    try:
        config = resolve_config(config)
    except PricingError as e:
        logger.warning(f"Could not compare pricing options: {e}")
        return []

    currency = options.currency or config.default_currency

    comparisons: list[PriceComparison] = []
    for day_count in day_counts:
        try:
            result = calculate_reservation_price(day_count, tiers, options, config)
        except PricingError as e:
            logger.warning(f"Could not calculate pricing for {day_count} days: {e}")
            continue

        comparisons.append(
            PriceComparison(
                day_count=day_count,
                option=f"{day_count} day{'s' if day_count > 1 else ''}",
                price=result.total_price,
                price_per_day=result.price_per_day,
                notes=[
                    f"{result.formatted_price} total",
                    f"{format_price(result.price_per_day, currency, locale=config.locale)} per day",
                ],
            )
        )

    if not comparisons:
        return []

    best_value = min(c.price_per_day for c in comparisons)
    best = next(c for c in comparisons if c.price_per_day == best_value)
    best.is_recommended = True
    best.notes.append("Best value per day")

    max_price = max(c.price for c in comparisons)
    for comparison in comparisons:
        comparison.savings = max_price - comparison.price

    return sorted(comparisons, key=lambda c: c.day_count)

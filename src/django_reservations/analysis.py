"""Tier set tooling for administrators.

Generating tier sets from a daily rate, summarizing and merging them, and
scoring how consistent a pricing strategy is. None of this is needed to
price a booking; it backs the admin tier-management screens.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from django.db import models

from django_reservations.conf import PricingConfig, resolve_config
from django_reservations.exceptions import InvalidConfigurationError
from django_reservations.money import (
    calculate_discount_percentage,
    format_discount_percentage,
    format_price,
    to_decimal,
)
from django_reservations.tiers import (
    PricingTier,
    can_price_day_count,
    create_pricing_tier,
    sort_tiers,
)

ONE = Decimal("1")


class DiscountStrategy(models.TextChoices):
    NONE = "none", "No discount"
    LINEAR = "linear", "5% per extra day (max 50%)"
    PROGRESSIVE = "progressive", "10% plus 3% per extra day (max 40%)"
    BULK = "bulk", "Thresholds at 3, 5 and 7 days"


class ConflictResolution(models.TextChoices):
    HIGHER_PRICE = "higher_price", "Keep higher price"
    LOWER_PRICE = "lower_price", "Keep lower price"
    ERROR = "error", "Raise on conflict"


class BestValueTier(NamedTuple):
    tier: PricingTier
    price_per_day: Decimal


class PricingCoverage(NamedTuple):
    covered_days: list[int]
    gaps: list[int]
    coverage_percent: int
    highest_tier: int


@dataclass(frozen=True)
class StrategyAnalysis:
    """Result of analyze_pricing_strategy().

    Attributes:
        is_optimal: No issues and per-day value is consistent
        issues: Tiers priced higher per day than a shorter tier
        suggestions: Advice for improving the tier set
        metrics: average_discount_percent, max_discount_percent,
            price_range_ratio, value_consistency
    """

    is_optimal: bool
    issues: list[str]
    suggestions: list[str]
    metrics: dict = field(default_factory=dict)


def _discount_for(strategy: str, days: int) -> Decimal:
    if strategy == DiscountStrategy.NONE:
        return Decimal("0")
    if strategy == DiscountStrategy.LINEAR:
        if days > 1:
            return min((days - 1) * Decimal("0.05"), Decimal("0.5"))
        return Decimal("0")
    if strategy == DiscountStrategy.PROGRESSIVE:
        if days >= 2:
            return min(Decimal("0.1") + (days - 2) * Decimal("0.03"), Decimal("0.4"))
        return Decimal("0")
    if strategy == DiscountStrategy.BULK:
        if days >= 7:
            return Decimal("0.3")
        if days >= 5:
            return Decimal("0.2")
        if days >= 3:
            return Decimal("0.1")
        return Decimal("0")
    raise InvalidConfigurationError(
        f"Unknown discount strategy: {strategy}",
        errors=[f"discount_strategy={strategy!r}"],
    )


def generate_pricing_tiers(
    base_daily_rate,
    max_days: int,
    discount_strategy: str = DiscountStrategy.PROGRESSIVE,
) -> tuple[PricingTier, ...]:
    """Generate one tier per day count from 1 to ``max_days``.

    Each tier is ``base_daily_rate * days`` less the strategy's discount,
    rounded to whole dollars.

    Example:
        generate_pricing_tiers(75, 3)
        # 1 Day $75, 2 Days $135, 3 Days $196

    Raises:
        InvalidConfigurationError: Non-positive rate or max_days, or an
            unknown strategy
    """
    rate = to_decimal(base_daily_rate)
    if rate <= 0 or max_days <= 0:
        raise InvalidConfigurationError(
            "Base daily rate and max days must be positive numbers",
            errors=[f"base_daily_rate={base_daily_rate}", f"max_days={max_days}"],
        )

    tiers = []
    for days in range(1, max_days + 1):
        price = rate * days * (1 - _discount_for(discount_strategy, days))
        tiers.append(create_pricing_tier(days, price.quantize(ONE, rounding=ROUND_HALF_UP)))
    return tuple(tiers)


def find_best_value_tier(tiers, preferred_days: int | None = None) -> BestValueTier | None:
    """Tier with the lowest price per day.

    With ``preferred_days`` each tier is also penalized by 2 per day of
    distance from the preference. Earlier tiers win ties.
    """
    if not tiers:
        return None

    def score(tier: PricingTier) -> Decimal:
        value = tier.price_per_day
        if preferred_days:
            value += abs(tier.number_of_days - preferred_days) * 2
        return value

    best = tiers[0]
    for tier in tiers[1:]:
        if score(tier) < score(best):
            best = tier
    return BestValueTier(tier=best, price_per_day=best.price_per_day)


def create_pricing_summary(tiers, config: PricingConfig | None = None) -> str:
    """One-line summary, e.g. "1 day: $75.00, 3 days: $200.00 (save 11%)"."""
    if not tiers:
        return "No pricing available"

    config = resolve_config(config)
    ordered = sort_tiers(tiers)
    base_per_day = ordered[0].price_per_day

    parts = []
    for tier in ordered:
        price = format_price(tier.price, config.default_currency, locale=config.locale)
        days = f"{tier.number_of_days} day{'s' if tier.number_of_days > 1 else ''}"
        expected = base_per_day * tier.number_of_days
        savings = expected - tier.price

        if savings > 5 and tier.number_of_days > 1:
            percent = format_discount_percentage(savings / expected)
            parts.append(f"{days}: {price} (save {percent})")
        else:
            parts.append(f"{days}: {price}")

    return ", ".join(parts)


def get_pricing_coverage(tiers, max_days: int = 30) -> PricingCoverage:
    """Which day counts in 1..max_days a tier covers without falling back."""
    if not tiers:
        return PricingCoverage(
            covered_days=[],
            gaps=list(range(1, max_days + 1)),
            coverage_percent=0,
            highest_tier=0,
        )

    covered = []
    gaps = []
    for day in range(1, max_days + 1):
        if can_price_day_count(day, tiers):
            covered.append(day)
        else:
            gaps.append(day)

    percent = (Decimal(len(covered)) * 100 / max_days).quantize(ONE, rounding=ROUND_HALF_UP)
    return PricingCoverage(
        covered_days=covered,
        gaps=gaps,
        coverage_percent=int(percent),
        highest_tier=max(t.number_of_days for t in tiers),
    )


def merge_pricing_tiers(
    tier_sets,
    conflict_resolution: str = ConflictResolution.ERROR,
) -> tuple[PricingTier, ...]:
    """Merge several tier sets into one with unique day counts.

    Raises:
        InvalidConfigurationError: Conflicting day counts when
            conflict_resolution is "error"
    """
    merged: dict[int, PricingTier] = {}

    for tiers in tier_sets:
        for tier in tiers:
            existing = merged.get(tier.number_of_days)
            if existing is None:
                merged[tier.number_of_days] = tier
            elif conflict_resolution == ConflictResolution.ERROR:
                raise InvalidConfigurationError(
                    f"Conflicting pricing tiers for {tier.number_of_days} days",
                    errors=[f"{existing.price} vs {tier.price}"],
                )
            elif conflict_resolution == ConflictResolution.HIGHER_PRICE and tier.price > existing.price:
                merged[tier.number_of_days] = tier
            elif conflict_resolution == ConflictResolution.LOWER_PRICE and tier.price < existing.price:
                merged[tier.number_of_days] = tier

    return sort_tiers(merged.values())


def analyze_pricing_strategy(tiers) -> StrategyAnalysis:
    """Score a tier set's discount progression and per-day consistency."""
    if not tiers:
        return StrategyAnalysis(
            is_optimal=False,
            issues=["No pricing tiers provided"],
            suggestions=["Add at least one pricing tier"],
            metrics={
                "average_discount_percent": Decimal("0"),
                "max_discount_percent": Decimal("0"),
                "price_range_ratio": Decimal("0"),
                "value_consistency": Decimal("0"),
            },
        )

    ordered = sort_tiers(tiers)
    base = ordered[0]
    base_per_day = base.price_per_day

    issues = []
    suggestions = []
    total_discount = Decimal("0")
    max_discount = Decimal("0")
    inconsistencies = 0

    for i, tier in enumerate(ordered):
        expected = base_per_day * tier.number_of_days
        discount = calculate_discount_percentage(expected, tier.price)
        total_discount += discount
        max_discount = max(max_discount, discount)

        if i > 0:
            previous = ordered[i - 1]
            if tier.price_per_day > previous.price_per_day:
                inconsistencies += 1
                issues.append(
                    f"{tier.number_of_days}-day tier has higher price per day "
                    f"than {previous.number_of_days}-day tier"
                )
            if discount < Decimal("0.02") and tier.number_of_days > 2:
                suggestions.append(
                    f"Consider increasing discount for {tier.number_of_days}-day tier "
                    f"to provide better value"
                )

    average_discount = total_discount / len(ordered)
    consistency = 1 - Decimal(inconsistencies) / max(1, len(ordered) - 1)

    if average_discount < Decimal("0.05"):
        suggestions.append(
            "Consider offering higher discounts for longer stays to encourage larger bookings"
        )
    if max_discount > Decimal("0.5"):
        suggestions.append(
            "Very high discount tiers may devalue your service, consider reducing maximum discount"
        )
    if consistency < Decimal("0.8"):
        suggestions.append(
            "Pricing structure has inconsistencies, longer stays should offer better per-day value"
        )

    return StrategyAnalysis(
        is_optimal=not issues and consistency > Decimal("0.8"),
        issues=issues,
        suggestions=suggestions,
        metrics={
            "average_discount_percent": average_discount,
            "max_discount_percent": max_discount,
            "price_range_ratio": ordered[-1].price / base.price,
            "value_consistency": consistency,
        },
    )

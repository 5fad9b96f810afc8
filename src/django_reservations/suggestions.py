"""Value-optimization suggestions for the selected day count.

Suggestions are advisory. A failure while generating them is logged and
reported as a degraded result, never raised, so it can't block a price
calculation or a booking.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import models

from django_reservations.calculators import calculate_reservation_price
from django_reservations.conf import PricingConfig, resolve_config
from django_reservations.money import format_price
from django_reservations.tiers import is_positive_day_count

logger = logging.getLogger(__name__)


class SuggestionType(models.TextChoices):
    ADD_DAYS = "add_days", "Add days"
    REMOVE_DAYS = "remove_days", "Remove days"
    DIFFERENT_TIER = "different_tier", "Different tier"
    CONSECUTIVE_DISCOUNT = "consecutive_discount", "Consecutive discount"


class SuggestionPriority(models.TextChoices):
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"


@dataclass(frozen=True)
class PricingSuggestion:
    """Recommendation to change the day count for better value."""

    type: str
    suggested_days: int
    current_price: Decimal
    suggested_price: Decimal
    savings: Decimal
    message: str
    priority: str
    details: str = ""


@dataclass(frozen=True)
class SuggestionResult:
    """Suggestions plus whether generation degraded.

    Iterating yields the suggestions, so callers that only want the list
    can treat the result as one.
    """

    suggestions: list[PricingSuggestion] = field(default_factory=list)
    degraded: bool = False
    cause: BaseException | None = None

    def __iter__(self):
        return iter(self.suggestions)

    def __len__(self) -> int:
        return len(self.suggestions)

    def __getitem__(self, index):
        return self.suggestions[index]


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def get_suggested_pricing(
    current_day_count: int,
    tiers,
    config: PricingConfig | None = None,
) -> SuggestionResult:
    """Suggest adding or removing days when another tier is better value.

    For every tier other than the current day count:
    - a longer tier is suggested (add_days) when pricing its days at the
      current per-day rate would cost at least ``min_suggested_savings``
      more than the tier does; high priority above twice the threshold
    - a shorter tier is suggested (remove_days, low priority) when its
      per-day rate is strictly cheaper and the total drops by at least
      the threshold

    Returns at most ``max_suggestions`` entries, largest savings first.
    """
    try:
        config = resolve_config(config)
        if not config.enable_suggestions or not tiers or not is_positive_day_count(current_day_count):
            return SuggestionResult()
        suggestions = _build_suggestions(current_day_count, tiers, config)
    except Exception as e:
        logger.warning(f"Failed to generate pricing suggestions for {current_day_count} days: {e}")
        return SuggestionResult(degraded=True, cause=e)

    suggestions.sort(key=lambda s: s.savings, reverse=True)
    return SuggestionResult(suggestions=suggestions[: config.max_suggestions])


def _build_suggestions(current_day_count, tiers, config) -> list[PricingSuggestion]:
    threshold = config.min_suggested_savings
    current = calculate_reservation_price(current_day_count, tiers, config=config)
    suggestions = []

    def fmt(amount):
        return format_price(amount, config.default_currency, locale=config.locale)

    for tier in tiers:
        if tier.number_of_days == current_day_count:
            continue

        candidate = calculate_reservation_price(tier.number_of_days, tiers, config=config)

        if tier.number_of_days > current_day_count:
            additional = tier.number_of_days - current_day_count
            projected = current.price_per_day * tier.number_of_days
            savings = projected - candidate.total_price
            if savings < threshold:
                continue
            suggestions.append(
                PricingSuggestion(
                    type=SuggestionType.ADD_DAYS,
                    suggested_days=tier.number_of_days,
                    current_price=current.total_price,
                    suggested_price=candidate.total_price,
                    savings=savings,
                    message=f"Add {additional} more day{_plural(additional)} and save {fmt(savings)}",
                    priority=(
                        SuggestionPriority.HIGH
                        if savings > threshold * 2
                        else SuggestionPriority.MEDIUM
                    ),
                    details=f"{tier.number_of_days}-day package offers better value per day",
                )
            )
        elif candidate.price_per_day < current.price_per_day:
            savings = current.total_price - candidate.total_price
            if savings < threshold:
                continue
            suggestions.append(
                PricingSuggestion(
                    type=SuggestionType.REMOVE_DAYS,
                    suggested_days=tier.number_of_days,
                    current_price=current.total_price,
                    suggested_price=candidate.total_price,
                    savings=savings,
                    message=(
                        f"Consider {tier.number_of_days} day{_plural(tier.number_of_days)} "
                        f"instead and save {fmt(savings)}"
                    ),
                    priority=SuggestionPriority.LOW,
                    details=f"{tier.number_of_days}-day option provides good value",
                )
            )

    return suggestions

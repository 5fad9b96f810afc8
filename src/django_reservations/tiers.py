"""Pricing tiers: value object, boundary parsing, validation and resolution.

A tier means "booking exactly N days costs P", and the top tier doubles as
the flat rate for bookings longer than any tier. Tier sets for one event
must have unique day counts.

Resolution never interpolates. For a requested day count it returns:
1. the tier with exactly that many days, else
2. the smallest tier covering more days (never undercharge), else
3. the largest tier (the booking runs past every tier).
"""

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from django_reservations.money import to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingTier:
    """Immutable (day count, price) pair configured by an administrator."""

    number_of_days: int
    price: Decimal
    label: str | None = None

    def __post_init__(self):
        """Normalize price to Decimal."""
        if not isinstance(self.price, Decimal):
            # Use object.__setattr__ because dataclass is frozen
            object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def price_per_day(self) -> Decimal:
        return self.price / self.number_of_days

    @property
    def display_label(self) -> str:
        """Label for line items, e.g. "3 days"."""
        if self.label:
            return self.label
        return f"{self.number_of_days} day{'s' if self.number_of_days > 1 else ''}"


@dataclass(frozen=True)
class TierValidationResult:
    """Result of tier set validation.

    Attributes:
        is_valid: True if no issues were found
        issues: Hard problems that make the tier set unusable
        warnings: Soft problems (pricing strategy inconsistencies)
    """

    is_valid: bool
    issues: list[str]
    warnings: list[str]

    def __bool__(self) -> bool:
        """Allow truthy/falsy evaluation based on is_valid."""
        return self.is_valid


@dataclass(frozen=True)
class TierParseResult:
    """Tagged result of parsing untrusted tier input.

    Either ``tiers`` holds the parsed tiers and ``issues`` is empty, or
    ``issues`` explains why the input could not be parsed.
    """

    tiers: tuple[PricingTier, ...]
    issues: list[str]

    @property
    def is_ok(self) -> bool:
        return not self.issues

    def __bool__(self) -> bool:
        return self.is_ok


def create_pricing_tier(number_of_days: int, price, label: str | None = None) -> PricingTier:
    """Create a tier with a default "N Day(s)" label."""
    if not label:
        label = f"{number_of_days} Day{'s' if number_of_days > 1 else ''}"
    return PricingTier(number_of_days=number_of_days, price=price, label=label)


def _parse_tier(raw, position: int) -> tuple[PricingTier | None, list[str]]:
    prefix = f"Tier {position}"

    if isinstance(raw, PricingTier):
        days, price, label = raw.number_of_days, raw.price, raw.label
    elif isinstance(raw, Mapping):
        days = raw.get("number_of_days", raw.get("numberOfDays"))
        price = raw.get("price")
        label = raw.get("label")
    else:
        return None, [f"{prefix}: must be a mapping"]

    errors = []

    if days is None:
        errors.append(f"{prefix}: missing required field number_of_days")
    elif isinstance(days, bool) or not isinstance(days, int):
        errors.append(f"{prefix}: number_of_days must be an integer")

    if price is None:
        errors.append(f"{prefix}: missing required field price")
    else:
        try:
            price = to_decimal(price)
        except ValueError:
            errors.append(f"{prefix}: price must be a number")
        else:
            if not price.is_finite():
                errors.append(f"{prefix}: price must be a finite number")

    if label is not None and not isinstance(label, str):
        errors.append(f"{prefix}: label must be a string")

    if errors:
        return None, errors
    if isinstance(raw, PricingTier):
        return raw, []
    return PricingTier(number_of_days=days, price=price, label=label), []


def parse_pricing_tiers(raw) -> TierParseResult:
    """Turn untrusted input into PricingTier values.

    Accepts a list or tuple of PricingTier objects or mappings with
    ``number_of_days`` (or ``numberOfDays``), ``price`` and ``label``.
    Only shape is checked here; business rules live in
    ``validate_pricing_tiers``.
    """
    if not isinstance(raw, (list, tuple)):
        return TierParseResult(tiers=(), issues=["Pricing tiers must be an array"])

    tiers = []
    issues = []
    for i, item in enumerate(raw):
        tier, errors = _parse_tier(item, i + 1)
        if errors:
            issues.extend(errors)
        else:
            tiers.append(tier)

    if issues:
        return TierParseResult(tiers=(), issues=issues)
    return TierParseResult(tiers=tuple(tiers), issues=[])


def sort_tiers(tiers: Iterable[PricingTier]) -> tuple[PricingTier, ...]:
    """Return tiers ordered ascending by day count (stable)."""
    return tuple(sorted(tiers, key=lambda t: t.number_of_days))


def validate_pricing_tiers(tiers) -> TierValidationResult:
    """Validate a tier set for structure and pricing strategy consistency.

    Issues (make the set invalid), all collected:
    - input is not a list/tuple (returned alone)
    - input is empty (returned alone)
    - any tier with number_of_days <= 0 or price <= 0
    - duplicate day counts

    Warnings (never affect validity):
    - a longer tier costs more per day than the next shorter one

    Free (zero-price) tiers are rejected.
    """
    issues: list[str] = []
    warnings: list[str] = []

    if not isinstance(tiers, (list, tuple)):
        parsed = parse_pricing_tiers(tiers)
        return TierValidationResult(is_valid=False, issues=parsed.issues, warnings=[])

    if len(tiers) == 0:
        issues.append("At least one pricing tier is required")
        return TierValidationResult(is_valid=False, issues=issues, warnings=warnings)

    parsed = parse_pricing_tiers(tiers)
    if not parsed:
        return TierValidationResult(is_valid=False, issues=parsed.issues, warnings=warnings)
    tiers = parsed.tiers

    for i, tier in enumerate(tiers):
        if tier.number_of_days <= 0:
            issues.append(f"Tier {i + 1}: numberOfDays must be positive")
        if tier.price <= 0:
            issues.append(f"Tier {i + 1}: price must be positive")

    day_counts = [t.number_of_days for t in tiers]
    if len(day_counts) != len(set(day_counts)):
        issues.append("Duplicate day counts found in pricing tiers")

    # Per-day price should not rise as day count rises
    ordered = [t for t in sort_tiers(tiers) if t.number_of_days > 0]
    for previous, current in zip(ordered, ordered[1:]):
        if previous.number_of_days == current.number_of_days:
            continue
        if current.price_per_day > previous.price_per_day:
            warnings.append(
                f"{current.number_of_days}-day tier has higher price per day "
                f"than {previous.number_of_days}-day tier"
            )

    return TierValidationResult(is_valid=not issues, issues=issues, warnings=warnings)


def is_positive_day_count(day_count) -> bool:
    """True for ints >= 1 (bools excluded)."""
    return isinstance(day_count, int) and not isinstance(day_count, bool) and day_count > 0


def find_best_price_tier(day_count, tiers) -> PricingTier | None:
    """Select the tier that prices ``day_count`` days.

    Returns None for an empty tier set or a day count that is not a
    positive integer. See the module docstring for the fallback order.
    """
    if not tiers or not is_positive_day_count(day_count):
        return None

    ordered = sort_tiers(tiers)

    for tier in ordered:
        if tier.number_of_days == day_count:
            return tier

    for tier in ordered:
        if tier.number_of_days > day_count:
            logger.debug(
                f"No {day_count}-day tier, using next tier up ({tier.number_of_days} days)"
            )
            return tier

    top = ordered[-1]
    logger.debug(f"{day_count} days exceeds every tier, using {top.number_of_days}-day tier")
    return top


def can_price_day_count(day_count, tiers) -> bool:
    """True when some tier covers at least ``day_count`` days."""
    if not tiers or not is_positive_day_count(day_count):
        return False
    return any(t.number_of_days >= day_count for t in tiers)


# =============================================================================
# ADMIN TIER MANAGEMENT
# =============================================================================


def add_tier(tiers: Iterable[PricingTier], tier: PricingTier) -> tuple[PricingTier, ...]:
    """Return a new sorted tier set with ``tier`` appended."""
    return sort_tiers([*tiers, tier])


def update_tier(tiers: Iterable[PricingTier], index: int, **changes) -> tuple[PricingTier, ...]:
    """Return a new sorted tier set with the tier at ``index`` changed.

    Raises:
        IndexError: If index is out of range
    """
    tiers = list(tiers)
    tiers[index] = dataclasses.replace(tiers[index], **changes)
    return sort_tiers(tiers)


def remove_tier(tiers: Iterable[PricingTier], index: int) -> tuple[PricingTier, ...]:
    """Return a new sorted tier set without the tier at ``index``.

    Raises:
        IndexError: If index is out of range
    """
    tiers = list(tiers)
    del tiers[index]
    return sort_tiers(tiers)

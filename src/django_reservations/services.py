"""Pricing session and booking hand-off services.

PricingSession keeps the latest pricing snapshot for one booking flow.
The engine is stateless, so superseding a stale recalculation only means
ignoring its result: each request gets an increasing id and only the
snapshot for the newest id is applied. Debouncing (``debounce_delay``) is
the caller's timer; nothing here sleeps or schedules.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from django_reservations.calculators import (
    PricingOptions,
    PricingResult,
    calculate_reservation_price,
)
from django_reservations.comparisons import PriceComparison, compare_pricing_options
from django_reservations.conf import PricingConfig, resolve_config
from django_reservations.exceptions import PricingError
from django_reservations.selection import DaySelection
from django_reservations.suggestions import PricingSuggestion, get_suggested_pricing
from django_reservations.tiers import (
    PricingTier,
    can_price_day_count,
    is_positive_day_count,
    sort_tiers,
)

logger = logging.getLogger(__name__)

COMMON_DAY_COUNTS = (1, 2, 3, 4, 5, 6, 7, 14, 21, 30)
MAX_COMPARISONS = 10


@dataclass(frozen=True)
class PricingSnapshot:
    """Everything a pricing display needs for one day count."""

    day_count: int
    price: PricingResult | None = None
    suggestions: list[PricingSuggestion] = field(default_factory=list)
    comparisons: list[PriceComparison] = field(default_factory=list)
    error: str | None = None
    suggestions_degraded: bool = False


@dataclass(frozen=True)
class ReservationDetails:
    """Final booking data handed to the booking-creation collaborator."""

    selected_dates: list[date]
    number_of_days: int
    applied_tier: PricingTier | None
    total_price: Decimal
    is_consecutive: bool
    check_in_date: date
    check_out_date: date | None


def comparison_day_counts(tiers) -> list[int]:
    """Day counts worth showing in a comparison table.

    Every tier's day count plus the common counts that don't exceed the
    largest tier, ascending, at most MAX_COMPARISONS entries.
    """
    if not tiers:
        return []
    tier_days = {t.number_of_days for t in tiers}
    highest = max(tier_days)
    days = tier_days | {d for d in COMMON_DAY_COUNTS if d <= highest}
    return sorted(days)[:MAX_COMPARISONS]


class PricingSession:
    """Latest-request-wins pricing state for one booking flow.

    Usage:
        session = PricingSession(tiers)
        request_id = session.request()
        snapshot = session.compute(selection.selected_count)
        session.apply(request_id, snapshot)  # False if superseded
        session.snapshot.price.total_price
    """

    def __init__(
        self,
        tiers,
        options: PricingOptions | None = None,
        config: PricingConfig | None = None,
    ):
        self.tiers = sort_tiers(tiers or ())
        self.options = options or PricingOptions()
        self.config = resolve_config(config)
        self.snapshot: PricingSnapshot | None = None
        self._latest_request = 0

    @property
    def debounce_delay(self) -> int:
        """Milliseconds the caller should wait before recalculating."""
        return self.config.debounce_delay

    @property
    def latest_request(self) -> int:
        return self._latest_request

    def request(self) -> int:
        """Issue a new request id, superseding every earlier one."""
        self._latest_request += 1
        return self._latest_request

    def compute(self, day_count: int) -> PricingSnapshot:
        """Price, suggest and compare for ``day_count``. Never raises."""
        if not self.tiers or not is_positive_day_count(day_count):
            return PricingSnapshot(day_count=day_count)

        try:
            price = calculate_reservation_price(day_count, self.tiers, self.options, self.config)
        except PricingError as e:
            logger.warning(f"Pricing failed for {day_count} days: {e}")
            return PricingSnapshot(day_count=day_count, error=str(e))

        suggestions = get_suggested_pricing(day_count, self.tiers, self.config)
        comparisons = compare_pricing_options(
            comparison_day_counts(self.tiers), self.tiers, self.options, self.config
        )
        return PricingSnapshot(
            day_count=day_count,
            price=price,
            suggestions=list(suggestions),
            comparisons=comparisons,
            suggestions_degraded=suggestions.degraded,
        )

    def apply(self, request_id: int, snapshot: PricingSnapshot) -> bool:
        """Store ``snapshot`` if ``request_id`` is still the latest."""
        if request_id != self._latest_request:
            logger.debug(
                f"Ignoring stale pricing result {request_id} (latest is {self._latest_request})"
            )
            return False
        self.snapshot = snapshot
        return True

    def recalculate(self, day_count: int) -> PricingSnapshot:
        """Request, compute and apply in one step."""
        request_id = self.request()
        snapshot = self.compute(day_count)
        self.apply(request_id, snapshot)
        return snapshot

    def update_options(self, **changes) -> PricingOptions:
        """Merge ``changes`` into the current options.

        Results computed under the old options become stale, so a new
        request id is issued.
        """
        self.options = self.options.merged(**changes)
        self.request()
        return self.options

    def get_price_for_days(self, days: int) -> PricingResult | None:
        if not self.tiers or not is_positive_day_count(days):
            return None
        try:
            return calculate_reservation_price(days, self.tiers, self.options, self.config)
        except PricingError:
            return None

    def can_price_days(self, days: int) -> bool:
        return can_price_day_count(days, self.tiers)


def build_reservation_details(selection: DaySelection, result: PricingResult) -> ReservationDetails:
    """Convert a finished selection and its price into booking data.

    Raises:
        ValueError: Empty selection, or a price for a different day count
    """
    dates = selection.to_list()
    if not dates:
        raise ValueError("Cannot build reservation details from an empty selection")
    if result.day_count != len(dates):
        raise ValueError(
            f"Price was calculated for {result.day_count} days but {len(dates)} are selected"
        )

    return ReservationDetails(
        selected_dates=dates,
        number_of_days=len(dates),
        applied_tier=result.applied_tier,
        total_price=result.total_price,
        is_consecutive=selection.is_consecutive,
        check_in_date=dates[0],
        check_out_date=dates[-1] if len(dates) > 1 else None,
    )

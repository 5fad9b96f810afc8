"""Django Reservations - Multi-day reservation pricing and day selection."""

__version__ = "0.1.0"

from django_reservations.calculators import (
    PriceBreakdown,
    PriceLineItem,
    PricingOptions,
    PricingResult,
    calculate_reservation_price,
)
from django_reservations.comparisons import PriceComparison, compare_pricing_options
from django_reservations.conf import (
    DEFAULT_PRICING_CONFIG,
    PricingConfig,
    RoundingStrategy,
    get_pricing_config,
)
from django_reservations.exceptions import (
    CalculationError,
    InvalidConfigurationError,
    InvalidDayCountError,
    NoMatchingTierError,
    NoTiersProvidedError,
    PricingError,
)
from django_reservations.selection import ConsecutiveRange, DaySelection
from django_reservations.services import (
    PricingSession,
    PricingSnapshot,
    ReservationDetails,
    build_reservation_details,
)
from django_reservations.suggestions import (
    PricingSuggestion,
    SuggestionResult,
    get_suggested_pricing,
)
from django_reservations.tiers import (
    PricingTier,
    TierParseResult,
    TierValidationResult,
    find_best_price_tier,
    parse_pricing_tiers,
    validate_pricing_tiers,
)

__all__ = [
    # Configuration
    "DEFAULT_PRICING_CONFIG",
    "PricingConfig",
    "RoundingStrategy",
    "get_pricing_config",
    # Exceptions
    "PricingError",
    "NoTiersProvidedError",
    "InvalidDayCountError",
    "NoMatchingTierError",
    "CalculationError",
    "InvalidConfigurationError",
    # Tiers
    "PricingTier",
    "TierParseResult",
    "TierValidationResult",
    "parse_pricing_tiers",
    "validate_pricing_tiers",
    "find_best_price_tier",
    # Calculation
    "PricingOptions",
    "PricingResult",
    "PriceBreakdown",
    "PriceLineItem",
    "calculate_reservation_price",
    "PricingSuggestion",
    "SuggestionResult",
    "get_suggested_pricing",
    "PriceComparison",
    "compare_pricing_options",
    # Selection
    "ConsecutiveRange",
    "DaySelection",
    # Services
    "PricingSession",
    "PricingSnapshot",
    "ReservationDetails",
    "build_reservation_details",
]

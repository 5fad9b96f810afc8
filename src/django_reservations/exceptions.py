"""Exceptions for django-reservations."""


class PricingError(Exception):
    """Base exception for pricing errors.

    Attributes:
        kind: Machine-readable error category
        details: Context for rendering a message (day count, tier day counts)
    """

    kind = "pricing_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class NoTiersProvidedError(PricingError):
    """Raised when a calculation is attempted without any pricing tiers."""

    kind = "no_tiers_provided"

    def __init__(self, day_count=None):
        super().__init__(
            "No pricing tiers provided for calculation",
            details={"day_count": day_count, "available_days": []},
        )
        self.day_count = day_count


class InvalidDayCountError(PricingError):
    """Raised when the requested day count is not a positive integer."""

    kind = "invalid_day_count"

    def __init__(self, day_count, available_days: list[int] | None = None):
        super().__init__(
            f"Invalid day count: {day_count}",
            details={"day_count": day_count, "available_days": available_days or []},
        )
        self.day_count = day_count
        self.available_days = available_days or []


class NoMatchingTierError(PricingError):
    """Raised when no tier can be resolved for a day count."""

    kind = "no_matching_tier"

    def __init__(self, day_count, available_days: list[int] | None = None):
        super().__init__(
            f"No pricing tier found for {day_count} days",
            details={"day_count": day_count, "available_days": available_days or []},
        )
        self.day_count = day_count
        self.available_days = available_days or []


class CalculationError(PricingError):
    """Wraps an unexpected failure during price calculation."""

    kind = "calculation_error"

    def __init__(self, cause: BaseException, day_count=None, available_days=None):
        super().__init__(
            f"Price calculation failed: {cause}",
            details={
                "day_count": day_count,
                "available_days": available_days or [],
                "original_error": cause,
            },
        )
        self.cause = cause
        self.day_count = day_count


class InvalidConfigurationError(PricingError):
    """Raised when pricing configuration is invalid or incomplete."""

    kind = "invalid_configuration"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, details={"errors": errors or []})
        self.errors = errors or []

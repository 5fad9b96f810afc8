"""Django Reservations pricing configuration.

Defaults live in named constants below. Any of them can be overridden in
your Django settings.py:

Example:
    # settings.py
    RESERVATIONS_PRICING = {
        "default_currency": "EUR",
        "default_tax_rate": "0.19",
        "rounding_strategy": "nearest_quarter",
    }

Calculation functions take an explicit ``PricingConfig``. Passing ``None``
resolves one through ``get_pricing_config()`` at the call boundary.
"""

import dataclasses
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import models

from django_reservations.exceptions import InvalidConfigurationError


class RoundingStrategy(models.TextChoices):
    """How the final total of a calculation is rounded."""

    NONE = "none", "No rounding"
    NEAREST_DOLLAR = "nearest_dollar", "Nearest dollar"
    NEAREST_QUARTER = "nearest_quarter", "Nearest quarter"
    UP = "up", "Round up"
    DOWN = "down", "Round down"


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_CURRENCY = "USD"
DEFAULT_TAX_RATE = Decimal("0")
DEFAULT_ENABLE_SUGGESTIONS = True
DEFAULT_MAX_SUGGESTIONS = 3
DEFAULT_MIN_SUGGESTED_SAVINGS = Decimal("5.00")
DEFAULT_ROUNDING_STRATEGY = RoundingStrategy.NEAREST_DOLLAR
DEFAULT_LOCALE = None  # None uses the active Django language
DEFAULT_DEBOUNCE_DELAY = 300  # milliseconds

SETTINGS_NAME = "RESERVATIONS_PRICING"


@dataclass(frozen=True)
class PricingConfig:
    """Immutable configuration for the pricing engine.

    Attributes:
        default_currency: ISO 4217 code used when options give none
        default_tax_rate: Tax rate (0-1) used when options give none
        enable_suggestions: Whether the suggestion engine runs at all
        max_suggestions: Upper bound on returned suggestions
        min_suggested_savings: Smallest saving worth suggesting
        rounding_strategy: One of RoundingStrategy values
        locale: Language code for number formatting, or None for active
        debounce_delay: Milliseconds a caller waits before recalculating
    """

    default_currency: str = DEFAULT_CURRENCY
    default_tax_rate: Decimal = DEFAULT_TAX_RATE
    enable_suggestions: bool = DEFAULT_ENABLE_SUGGESTIONS
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS
    min_suggested_savings: Decimal = DEFAULT_MIN_SUGGESTED_SAVINGS
    rounding_strategy: str = DEFAULT_ROUNDING_STRATEGY
    locale: str | None = DEFAULT_LOCALE
    debounce_delay: int = DEFAULT_DEBOUNCE_DELAY

    def __post_init__(self):
        """Normalize numeric fields to Decimal and validate."""
        errors = []
        for name in ("default_tax_rate", "min_suggested_savings"):
            value = getattr(self, name)
            if isinstance(value, Decimal):
                continue
            try:
                # Use object.__setattr__ because dataclass is frozen
                object.__setattr__(self, name, Decimal(str(value)))
            except (InvalidOperation, ValueError, TypeError):
                errors.append(f"{name} must be a number, got {value!r}")

        if errors:
            raise InvalidConfigurationError("Invalid pricing configuration", errors=errors)

        errors = validate_pricing_config(self)
        if errors:
            raise InvalidConfigurationError("Invalid pricing configuration", errors=errors)


def validate_pricing_config(config: PricingConfig) -> list[str]:
    """Return a list of problems with a config (empty if valid)."""
    errors: list[str] = []

    if not isinstance(config.default_currency, str) or not config.default_currency:
        errors.append("default_currency must be a non-empty string")

    if not Decimal("0") <= config.default_tax_rate <= Decimal("1"):
        errors.append("default_tax_rate must be between 0 and 1")

    if isinstance(config.max_suggestions, bool) or not isinstance(config.max_suggestions, int):
        errors.append("max_suggestions must be an integer")
    elif config.max_suggestions < 0:
        errors.append("max_suggestions must be >= 0")

    if config.min_suggested_savings < 0:
        errors.append("min_suggested_savings must be >= 0")

    if config.rounding_strategy not in RoundingStrategy.values:
        errors.append(
            f"rounding_strategy must be one of {', '.join(RoundingStrategy.values)}"
        )

    if isinstance(config.debounce_delay, bool) or not isinstance(config.debounce_delay, int):
        errors.append("debounce_delay must be an integer number of milliseconds")
    elif config.debounce_delay < 0:
        errors.append("debounce_delay must be >= 0")

    return errors


DEFAULT_PRICING_CONFIG = PricingConfig()

_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(PricingConfig))


def get_settings_overrides() -> dict:
    """Read RESERVATIONS_PRICING from Django settings.

    Raises:
        InvalidConfigurationError: If the setting is not a dictionary
    """
    overrides = getattr(settings, SETTINGS_NAME, None)
    if overrides is None:
        return {}
    if not isinstance(overrides, dict):
        raise InvalidConfigurationError(
            f"{SETTINGS_NAME} setting must be a dictionary",
            errors=[f"{SETTINGS_NAME} is {type(overrides).__name__}"],
        )
    return dict(overrides)


def get_pricing_config(**overrides) -> PricingConfig:
    """Build a PricingConfig from defaults, settings and call overrides.

    Merge order: named defaults, then RESERVATIONS_PRICING, then keyword
    overrides. Returns a new config; nothing is cached.

    Raises:
        InvalidConfigurationError: Unknown keys or invalid values
    """
    values = get_settings_overrides()
    values.update(overrides)

    unknown = sorted(set(values) - _FIELD_NAMES)
    if unknown:
        raise InvalidConfigurationError(
            f"Unknown pricing configuration keys: {', '.join(unknown)}",
            errors=[f"unknown key: {key}" for key in unknown],
        )

    return dataclasses.replace(DEFAULT_PRICING_CONFIG, **values)


def resolve_config(config: PricingConfig | None) -> PricingConfig:
    """Return ``config`` or, when None, the settings-derived config."""
    if config is not None:
        return config
    return get_pricing_config()

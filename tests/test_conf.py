"""Tests for pricing configuration."""

from decimal import Decimal

import pytest
from django.test import override_settings

from django_reservations.calculators import calculate_reservation_price
from django_reservations.conf import (
    DEFAULT_PRICING_CONFIG,
    PricingConfig,
    RoundingStrategy,
    get_pricing_config,
    resolve_config,
    validate_pricing_config,
)
from django_reservations.exceptions import InvalidConfigurationError
from django_reservations.tiers import PricingTier


class TestPricingConfig:

    def test_defaults(self):
        config = PricingConfig()
        assert config.default_currency == "USD"
        assert config.default_tax_rate == Decimal("0")
        assert config.enable_suggestions is True
        assert config.max_suggestions == 3
        assert config.min_suggested_savings == Decimal("5.00")
        assert config.rounding_strategy == RoundingStrategy.NEAREST_DOLLAR
        assert config.locale is None
        assert config.debounce_delay == 300

    def test_numbers_normalized(self):
        config = PricingConfig(default_tax_rate="0.19", min_suggested_savings=10)
        assert config.default_tax_rate == Decimal("0.19")
        assert config.min_suggested_savings == Decimal("10")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_PRICING_CONFIG.max_suggestions = 5

    @pytest.mark.parametrize(
        "field, value",
        [
            ("default_tax_rate", "1.5"),
            ("default_tax_rate", "lots"),
            ("max_suggestions", -1),
            ("max_suggestions", True),
            ("rounding_strategy", "bankers"),
            ("default_currency", ""),
            ("debounce_delay", -5),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            PricingConfig(**{field: value})
        assert exc_info.value.errors

    def test_validate_valid(self):
        assert validate_pricing_config(PricingConfig()) == []


class TestGetPricingConfig:

    def test_without_setting(self):
        assert get_pricing_config() == DEFAULT_PRICING_CONFIG

    @override_settings(RESERVATIONS_PRICING={"default_currency": "EUR", "max_suggestions": 5})
    def test_setting_overrides_defaults(self):
        config = get_pricing_config()
        assert config.default_currency == "EUR"
        assert config.max_suggestions == 5
        assert config.rounding_strategy == RoundingStrategy.NEAREST_DOLLAR

    @override_settings(RESERVATIONS_PRICING={"default_currency": "EUR"})
    def test_keyword_overrides_win(self):
        assert get_pricing_config(default_currency="GBP").default_currency == "GBP"

    @override_settings(RESERVATIONS_PRICING={"currency": "EUR"})
    def test_unknown_key(self):
        with pytest.raises(InvalidConfigurationError, match="currency"):
            get_pricing_config()

    @override_settings(RESERVATIONS_PRICING=["EUR"])
    def test_setting_must_be_dict(self):
        with pytest.raises(InvalidConfigurationError, match="must be a dictionary"):
            get_pricing_config()

    @override_settings(RESERVATIONS_PRICING={"default_tax_rate": "2"})
    def test_invalid_setting_value(self):
        with pytest.raises(InvalidConfigurationError):
            get_pricing_config()


class TestResolveConfig:

    def test_explicit_config_returned(self):
        config = PricingConfig(max_suggestions=1)
        assert resolve_config(config) is config

    @override_settings(RESERVATIONS_PRICING={"rounding_strategy": "none"})
    def test_calculation_reads_settings_when_no_config(self):
        tiers = [PricingTier(1, Decimal("10.40"))]
        assert calculate_reservation_price(1, tiers).total_price == Decimal("10.40")

    @override_settings(RESERVATIONS_PRICING={"rounding_strategy": "none"})
    def test_explicit_config_ignores_settings(self):
        tiers = [PricingTier(1, Decimal("10.40"))]
        result = calculate_reservation_price(1, tiers, config=PricingConfig())
        assert result.total_price == Decimal("10")

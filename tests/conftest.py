"""Shared fixtures for django-reservations tests."""

from datetime import date
from decimal import Decimal

import pytest

from django_reservations.conf import PricingConfig, RoundingStrategy
from django_reservations.tiers import PricingTier


@pytest.fixture
def standard_tiers():
    """1, 3, 5 and 7 day tiers with falling per-day prices."""
    return [
        PricingTier(number_of_days=1, price=Decimal("75")),
        PricingTier(number_of_days=3, price=Decimal("200")),
        PricingTier(number_of_days=5, price=Decimal("300")),
        PricingTier(number_of_days=7, price=Decimal("400")),
    ]


@pytest.fixture
def unrounded_config():
    """Config that leaves totals exactly as calculated."""
    return PricingConfig(rounding_strategy=RoundingStrategy.NONE)


@pytest.fixture
def event_today():
    """Fixed "today" for selection tests."""
    return date(2025, 7, 1)


@pytest.fixture
def july_window():
    """Event window covering 1-10 July 2025."""
    return date(2025, 7, 1), date(2025, 7, 10)

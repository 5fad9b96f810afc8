"""Calendar day selection for one in-progress booking.

DaySelection owns the set of selected dates and enforces the event window,
disabled dates, the past-date policy, min/max day counts and optionally
that days are consecutive. Dates are compared by calendar day, never by
instant: datetimes are reduced to their (local) date on the way in.

Illegal mutations are silent no-ops. Callers poll ``get_selection_error()``
for a user-facing message.

Usage:
    selection = DaySelection(date(2025, 7, 1), date(2025, 7, 10), max_days=3,
                             require_consecutive=True)
    selection.select_date(date(2025, 7, 1))
    selection.select_date(date(2025, 7, 2))
    selection.select_date(date(2025, 7, 5))  # rejected, not adjacent
    selection.selected_count  # 2
"""

import logging
from datetime import date, datetime
from typing import NamedTuple

from django.utils import timezone

logger = logging.getLogger(__name__)


class ConsecutiveRange(NamedTuple):
    """A maximal run of day-adjacent selected dates."""

    start: date
    end: date
    length: int


def normalize_date(value) -> date:
    """Reduce a date or datetime to its calendar day.

    Aware datetimes are converted to the current Django timezone first.

    Raises:
        TypeError: If value is not a date or datetime
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


class DaySelection:
    """Selection state machine consumed by a calendar view.

    Args:
        event_start_date: First selectable day of the event (inclusive)
        event_end_date: Last selectable day of the event (inclusive)
        max_days: Most days that may be selected
        min_days: Fewest days for a valid selection
        require_consecutive: Single-date selection must stay adjacent
        disabled_dates: Days that can never be selected
        allow_past_dates: Allow days before today
        today: Fixed "today"; defaults to timezone.localdate() per call
    """

    def __init__(
        self,
        event_start_date,
        event_end_date,
        max_days: int = 7,
        min_days: int = 1,
        require_consecutive: bool = False,
        disabled_dates=(),
        allow_past_dates: bool = False,
        today=None,
    ):
        self.event_start_date = normalize_date(event_start_date)
        self.event_end_date = normalize_date(event_end_date)
        self.max_days = max_days
        self.min_days = min_days
        self.require_consecutive = require_consecutive
        self.disabled_dates = frozenset(normalize_date(d) for d in disabled_dates)
        self.allow_past_dates = allow_past_dates
        self._today = normalize_date(today) if today is not None else None
        self._selected: list[date] = []

    def __repr__(self) -> str:
        return (
            f"<DaySelection {self.event_start_date}..{self.event_end_date} "
            f"selected={self.selected_count}/{self.max_days}>"
        )

    @property
    def today(self) -> date:
        if self._today is not None:
            return self._today
        return timezone.localdate()

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def is_date_in_range(self, value) -> bool:
        day = normalize_date(value)
        return self.event_start_date <= day <= self.event_end_date

    def is_date_disabled(self, value) -> bool:
        """Disabled explicitly, or in the past when past dates aren't allowed."""
        day = normalize_date(value)
        if day in self.disabled_dates:
            return True
        if not self.allow_past_dates and day < self.today:
            return True
        return False

    def is_date_available(self, value) -> bool:
        return self.is_date_in_range(value) and not self.is_date_disabled(value)

    def is_date_selected(self, value) -> bool:
        return normalize_date(value) in self._selected

    def can_select_date(self, value) -> bool:
        """Whether clicking ``value`` may add it (or keep it) selected.

        An already-selected available date is always selectable so a
        toggle can deselect it.
        """
        day = normalize_date(value)

        if not self.is_date_available(day):
            return False

        if day in self._selected:
            return True

        if len(self._selected) >= self.max_days:
            return False

        if self.require_consecutive and self._selected:
            return any(abs((day - selected).days) == 1 for selected in self._selected)

        return True

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def select_date(self, value) -> None:
        day = normalize_date(value)
        if not self.can_select_date(day):
            logger.debug(f"Rejected selection of {day}")
            return
        if day not in self._selected:
            self._selected.append(day)

    def deselect_date(self, value) -> None:
        day = normalize_date(value)
        self._selected = [d for d in self._selected if d != day]

    def toggle_date(self, value) -> None:
        if self.is_date_selected(value):
            self.deselect_date(value)
        else:
            self.select_date(value)

    def clear_selection(self) -> None:
        self._selected = []

    def set_selected_dates(self, dates) -> None:
        """Replace the selection in bulk.

        Keeps only currently available dates, in input order, drops
        repeats of the same day and truncates to ``max_days``. Consecutive
        days are NOT enforced here; check ``get_selection_error()``.
        """
        selected: list[date] = []
        for value in dates:
            day = normalize_date(value)
            if day in selected or not self.is_date_available(day):
                continue
            selected.append(day)
        self._selected = selected[: self.max_days]

    # -------------------------------------------------------------------------
    # Derived queries
    # -------------------------------------------------------------------------

    @property
    def selected_dates(self) -> list[date]:
        """Selected dates in the order they were selected (a copy)."""
        return list(self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def is_max_reached(self) -> bool:
        return self.selected_count >= self.max_days

    @property
    def is_valid_selection(self) -> bool:
        return self.min_days <= self.selected_count <= self.max_days

    @property
    def is_consecutive(self) -> bool:
        return len(self.get_consecutive_ranges()) <= 1

    def get_consecutive_ranges(self) -> list[ConsecutiveRange]:
        """Group the sorted selection into runs of adjacent days."""
        if not self._selected:
            return []

        ordered = sorted(self._selected)
        ranges = []
        start = end = ordered[0]

        for day in ordered[1:]:
            if (day - end).days == 1:
                end = day
                continue
            ranges.append(ConsecutiveRange(start, end, (end - start).days + 1))
            start = end = day

        ranges.append(ConsecutiveRange(start, end, (end - start).days + 1))
        return ranges

    def get_selection_error(self) -> str | None:
        """User-facing problem with the current selection, or None."""
        count = self.selected_count

        if count < self.min_days:
            return f"Please select at least {self.min_days} day{'s' if self.min_days > 1 else ''}"

        if count > self.max_days:
            return f"Cannot select more than {self.max_days} days"

        if self.require_consecutive and count > 1 and len(self.get_consecutive_ranges()) > 1:
            return "Selected days must be consecutive"

        return None

    def to_list(self) -> list[date]:
        """Plain sorted list of selected dates for booking submission."""
        return sorted(self._selected)

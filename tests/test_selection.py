"""Tests for the calendar day selection state machine."""

from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest
from django.test import override_settings

from django_reservations.selection import ConsecutiveRange, DaySelection, normalize_date


def july(day: int) -> date:
    return date(2025, 7, day)


@pytest.fixture
def selection(july_window, event_today):
    start, end = july_window
    return DaySelection(start, end, max_days=3, today=event_today)


@pytest.fixture
def consecutive(july_window, event_today):
    start, end = july_window
    return DaySelection(start, end, max_days=3, require_consecutive=True, today=event_today)


class TestNormalizeDate:

    def test_date_passthrough(self):
        assert normalize_date(july(4)) == july(4)

    def test_naive_datetime(self):
        assert normalize_date(datetime(2025, 7, 4, 23, 59)) == july(4)

    @override_settings(TIME_ZONE="America/New_York")
    def test_aware_datetime_uses_local_day(self):
        """02:00 UTC on the 5th is still the 4th in New York."""
        value = datetime(2025, 7, 5, 2, 0, tzinfo=dt_timezone.utc)
        assert normalize_date(value) == july(4)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            normalize_date("2025-07-04")


class TestPredicates:

    def test_in_range_inclusive(self, selection):
        assert selection.is_date_in_range(july(1)) is True
        assert selection.is_date_in_range(july(10)) is True
        assert selection.is_date_in_range(july(11)) is False
        assert selection.is_date_in_range(date(2025, 6, 30)) is False

    def test_in_range_ignores_time_of_day(self, selection):
        assert selection.is_date_in_range(datetime(2025, 7, 10, 18, 30)) is True

    def test_disabled_dates(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(
            start, end, disabled_dates=[datetime(2025, 7, 4, 9, 0)], today=event_today
        )
        assert selection.is_date_disabled(july(4)) is True
        assert selection.is_date_available(july(4)) is False
        assert selection.is_date_available(july(5)) is True

    def test_past_dates_disabled(self, july_window):
        start, end = july_window
        selection = DaySelection(start, end, today=july(5))
        assert selection.is_date_disabled(july(4)) is True
        assert selection.is_date_disabled(july(5)) is False

    def test_past_dates_allowed(self, july_window):
        start, end = july_window
        selection = DaySelection(start, end, allow_past_dates=True, today=july(5))
        assert selection.is_date_disabled(july(4)) is False
        assert selection.is_date_available(july(4)) is True

    def test_today_defaults_to_local_date(self, july_window):
        start, end = july_window
        selection = DaySelection(start, end)
        yesterday = selection.today - timedelta(days=1)
        assert selection.is_date_disabled(yesterday) is True

    def test_can_select_respects_max(self, selection):
        for day in (2, 3, 4):
            selection.select_date(july(day))
        assert selection.can_select_date(july(6)) is False
        assert selection.can_select_date(july(3)) is True

    def test_can_select_unavailable(self, selection):
        assert selection.can_select_date(july(11)) is False


class TestMutators:

    def test_select_and_deselect(self, selection):
        selection.select_date(july(2))
        assert selection.is_date_selected(july(2)) is True
        selection.deselect_date(datetime(2025, 7, 2, 15, 0))
        assert selection.selected_count == 0

    def test_select_is_idempotent(self, selection):
        selection.select_date(july(2))
        selection.select_date(datetime(2025, 7, 2, 8, 0))
        assert selection.selected_dates == [july(2)]

    def test_select_stores_calendar_day(self, selection):
        selection.select_date(datetime(2025, 7, 2, 8, 0))
        assert selection.selected_dates == [july(2)]

    def test_rejected_selection_is_noop(self, selection):
        selection.select_date(july(20))
        assert selection.selected_count == 0

    def test_max_days_enforced(self, selection):
        for day in (2, 3, 4, 5):
            selection.select_date(july(day))
        assert selection.selected_dates == [july(2), july(3), july(4)]
        assert selection.is_max_reached is True

    def test_toggle(self, selection):
        selection.toggle_date(july(3))
        assert selection.is_date_selected(july(3)) is True
        selection.toggle_date(july(3))
        assert selection.is_date_selected(july(3)) is False

    def test_toggle_deselects_at_max(self, selection):
        for day in (2, 3, 4):
            selection.select_date(july(day))
        selection.toggle_date(july(3))
        assert selection.selected_dates == [july(2), july(4)]

    def test_clear_selection(self, selection):
        selection.select_date(july(2))
        selection.clear_selection()
        assert selection.selected_dates == []

    def test_selected_dates_is_a_copy(self, selection):
        selection.select_date(july(2))
        selection.selected_dates.append(july(3))
        assert selection.selected_count == 1


class TestConsecutiveSelection:

    def test_non_adjacent_rejected(self, consecutive):
        consecutive.select_date(july(1))
        consecutive.select_date(july(2))
        consecutive.select_date(july(5))
        assert consecutive.selected_count == 2
        assert consecutive.selected_dates == [july(1), july(2)]

    def test_adjacent_backwards_allowed(self, consecutive):
        consecutive.select_date(july(5))
        consecutive.select_date(july(4))
        assert consecutive.selected_dates == [july(5), july(4)]

    def test_first_date_unrestricted(self, consecutive):
        consecutive.select_date(july(8))
        assert consecutive.selected_count == 1

    def test_deselecting_middle_leaves_gap(self, consecutive):
        for day in (2, 3, 4):
            consecutive.select_date(july(day))
        consecutive.deselect_date(july(3))
        assert consecutive.get_selection_error() == "Selected days must be consecutive"


class TestBulkReplace:

    def test_filters_unavailable_and_truncates(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(
            start, end, max_days=2, disabled_dates=[july(3)], today=event_today
        )
        selection.set_selected_dates([july(3), july(12), july(6), july(2), july(8)])
        assert selection.selected_dates == [july(6), july(2)]

    def test_drops_repeated_days(self, selection):
        selection.set_selected_dates([july(2), datetime(2025, 7, 2, 12, 0), july(3)])
        assert selection.selected_dates == [july(2), july(3)]

    def test_does_not_enforce_consecutive(self, consecutive):
        """Bulk replace skips the adjacency rule; the error surfaces instead."""
        consecutive.set_selected_dates([july(1), july(5)])
        assert consecutive.selected_dates == [july(1), july(5)]
        assert consecutive.get_selection_error() == "Selected days must be consecutive"


class TestDerivedQueries:

    def test_consecutive_ranges(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(start, end, max_days=7, today=event_today)
        selection.set_selected_dates([july(5), july(1), july(2), july(9), july(4)])
        assert selection.get_consecutive_ranges() == [
            ConsecutiveRange(july(1), july(2), 2),
            ConsecutiveRange(july(4), july(5), 2),
            ConsecutiveRange(july(9), july(9), 1),
        ]
        assert selection.is_consecutive is False

    def test_no_ranges_when_empty(self, selection):
        assert selection.get_consecutive_ranges() == []
        assert selection.is_consecutive is True

    def test_is_valid_selection(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(start, end, max_days=3, min_days=2, today=event_today)
        selection.select_date(july(2))
        assert selection.is_valid_selection is False
        selection.select_date(july(3))
        assert selection.is_valid_selection is True

    def test_error_minimum(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(start, end, min_days=2, today=event_today)
        assert selection.get_selection_error() == "Please select at least 2 days"

    def test_error_minimum_singular(self, selection):
        assert selection.get_selection_error() == "Please select at least 1 day"

    def test_error_maximum(self, selection):
        # Only reachable by bypassing the mutators
        selection._selected = [july(2), july(3), july(4), july(5)]
        assert selection.get_selection_error() == "Cannot select more than 3 days"

    def test_no_error_when_valid(self, consecutive):
        consecutive.select_date(july(2))
        consecutive.select_date(july(3))
        assert consecutive.get_selection_error() is None

    def test_to_list_sorted(self, selection):
        for day in (4, 2, 3):
            selection.select_date(july(day))
        assert selection.to_list() == [july(2), july(3), july(4)]


class TestSelectionInvariants:
    """Any click sequence keeps the selection available and within max."""

    def test_random_click_sequence(self, july_window, event_today):
        start, end = july_window
        selection = DaySelection(
            start,
            end,
            max_days=4,
            require_consecutive=True,
            disabled_dates=[july(6)],
            today=july(2),
        )
        clicks = [1, 2, 3, 6, 4, 5, 7, 3, 12, 8, 4, 5, 2, 9, 10, 1, 5, 6, 11, 7]
        for i, day in enumerate(clicks):
            value = july(day)
            if i % 3 == 0:
                selection.toggle_date(value)
            elif i % 3 == 1:
                selection.select_date(value)
            else:
                selection.deselect_date(value)

            assert selection.selected_count <= 4
            assert all(selection.is_date_available(d) for d in selection.selected_dates)

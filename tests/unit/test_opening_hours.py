"""Unit tests for opening-hours parsing and evaluation."""

from collections.abc import Callable
from datetime import datetime, time
from zoneinfo import ZoneInfo

import pytest

from restaurant_discovery.models.restaurant_models import OpenHoursPolicy, Restaurant
from restaurant_discovery.services.opening_hours import (
    OpeningWindow,
    is_always_open,
    is_open_at,
    parse_opening_hours,
)

BOGOTA = ZoneInfo("America/Bogota")


def at(hour: int, minute: int = 0) -> datetime:
    """Local Bogotá datetime on a fixed day."""
    return datetime(2024, 1, 15, hour, minute, tzinfo=BOGOTA)


@pytest.mark.unit
class TestParseOpeningHours:
    """Test suite for parse_opening_hours."""

    @pytest.mark.parametrize(
        "text,start,end",
        [
            ("8:00 AM – 10:00 PM", 8 * 60, 22 * 60),
            ("8:00 AM - 10:00 PM", 8 * 60, 22 * 60),
            ("8:00 AM — 10:00 PM", 8 * 60, 22 * 60),
            ("8:00AM–10:00PM", 8 * 60, 22 * 60),
            ("11 PM–2 AM", 23 * 60, 2 * 60),
            ("12 PM – 12:30 AM", 12 * 60, 30),
            ("7:30 a. m. - 9:00 p. m.", 7 * 60 + 30, 21 * 60),
            ("07:00-19:00", 7 * 60, 19 * 60),
            ("18:00 – 24:00", 18 * 60, 24 * 60),
            ("  9:15 am - 5:45 pm  ", 9 * 60 + 15, 17 * 60 + 45),
        ],
    )
    def test_recognized_formats(self, text: str, start: int, end: int) -> None:
        """Test that supported range formats are parsed."""
        window = parse_opening_hours(text)

        assert window == OpeningWindow(start_minute=start, end_minute=end)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "Lunes a viernes",
            "closed",
            "25:00 - 26:00",
            "13 PM - 2 AM",
            "8:75 AM - 9 PM",
            "24:00 - 06:00",
            "8 AM to 5 PM",
            "Mon-Fri 9-17",
        ],
    )
    def test_unrecognized_formats(self, text: str) -> None:
        """Test that anything else is reported as unparsable."""
        assert parse_opening_hours(text) is None

    @pytest.mark.parametrize("text", ["24 horas", "Abierto 24 Horas", "24/7", "Open 24 hours"])
    def test_always_open_markers(self, text: str) -> None:
        """Test that round-the-clock markers are detected case-insensitively."""
        assert is_always_open(text) is True

    def test_regular_hours_are_not_always_open(self) -> None:
        """Test that a normal range is not an always-open marker."""
        assert is_always_open("8:00 AM – 10:00 PM") is False


@pytest.mark.unit
class TestOpeningWindow:
    """Test suite for OpeningWindow.contains."""

    def test_same_day_window(self) -> None:
        """Test that the start is inclusive and the end exclusive."""
        window = OpeningWindow(start_minute=8 * 60, end_minute=22 * 60)

        assert window.contains(time(8, 0)) is True
        assert window.contains(time(21, 59)) is True
        assert window.contains(time(22, 0)) is False
        assert window.contains(time(7, 59)) is False

    def test_window_crossing_midnight(self) -> None:
        """Test a window that closes on the next day."""
        window = OpeningWindow(start_minute=23 * 60, end_minute=2 * 60)

        assert window.crosses_midnight is True
        assert window.contains(time(23, 30)) is True
        assert window.contains(time(0, 30)) is True
        assert window.contains(time(2, 0)) is False
        assert window.contains(time(10, 0)) is False

    def test_equal_bounds_mean_all_day(self) -> None:
        """Test that a zero-length window is read as open all day."""
        window = OpeningWindow(start_minute=0, end_minute=0)

        assert window.is_all_day is True
        assert window.contains(time(3, 0)) is True

    def test_midnight_to_24_is_all_day(self) -> None:
        """Test that 00:00-24:00 covers the full day."""
        window = OpeningWindow(start_minute=0, end_minute=24 * 60)

        assert window.contains(time(23, 59)) is True


@pytest.mark.unit
class TestIsOpenAt:
    """Test suite for is_open_at."""

    def test_midnight_crossing_scenario(self, restaurant_factory: Callable[..., Restaurant]) -> None:
        """Test a late-night bar is open at 00:30 and closed at 10:00."""
        restaurant = restaurant_factory("bar", opening_hours="11 PM–2 AM", is_open=False)

        assert is_open_at(restaurant, at(0, 30), OpenHoursPolicy.DERIVED_FROM_HOURS) is True
        assert is_open_at(restaurant, at(10, 0), OpenHoursPolicy.DERIVED_FROM_HOURS) is False

    def test_stored_flag_policy_ignores_hours(
        self, restaurant_factory: Callable[..., Restaurant]
    ) -> None:
        """Test that the stored-flag policy trusts is_open."""
        restaurant = restaurant_factory("bar", opening_hours="11 PM–2 AM", is_open=True)

        assert is_open_at(restaurant, at(10, 0), OpenHoursPolicy.STORED_FLAG) is True

    def test_unparsable_hours_fall_back_to_flag(
        self, restaurant_factory: Callable[..., Restaurant]
    ) -> None:
        """Test that unrecognized hours use the stored flag."""
        open_one = restaurant_factory("a", opening_hours="Lunes a sábado", is_open=True)
        closed_one = restaurant_factory("b", opening_hours="", is_open=False)

        assert is_open_at(open_one, at(3, 0), OpenHoursPolicy.DERIVED_FROM_HOURS) is True
        assert is_open_at(closed_one, at(12, 0), OpenHoursPolicy.DERIVED_FROM_HOURS) is False

    def test_always_open_wins_over_flag(
        self, restaurant_factory: Callable[..., Restaurant]
    ) -> None:
        """Test that a 24-hour marker means open even if the flag says closed."""
        restaurant = restaurant_factory("grill", opening_hours="24 horas", is_open=False)

        assert is_open_at(restaurant, at(4, 0), OpenHoursPolicy.DERIVED_FROM_HOURS) is True

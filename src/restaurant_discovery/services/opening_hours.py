"""Opening-hours parsing and open/closed evaluation.

Opening hours are stored as free text written by restaurant staff, for
example ``"8:00 AM – 10:00 PM"``, ``"11 PM–2 AM"``, ``"07:00-19:00"`` or
``"24 horas"``. Only single daily ranges are understood; anything else is
reported as unparsable so callers can fall back to the stored ``is_open``
flag.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time

from restaurant_discovery.models.restaurant_models import OpenHoursPolicy, Restaurant

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_ALWAYS_OPEN_PATTERN = re.compile(r"24\s*horas|24\s*hours|24\s*/\s*7", re.IGNORECASE)

_TIME = r"(?P<{p}_hour>\d{{1,2}})(?:[:.](?P<{p}_minute>\d{{2}}))?\s*(?P<{p}_meridiem>[ap]\.?\s?m\.?)?"

_RANGE_PATTERN = re.compile(
    r"^\s*" + _TIME.format(p="start") + r"\s*[-–—]\s*" + _TIME.format(p="end") + r"\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class OpeningWindow:
    """A daily opening window in minutes after midnight.

    Attributes:
        start_minute: Opening minute, inclusive
        end_minute: Closing minute, exclusive (may be 1440 for 24:00)
    """

    start_minute: int
    end_minute: int

    @property
    def crosses_midnight(self) -> bool:
        """Whether the window closes on the following day."""
        return self.start_minute > self.end_minute

    @property
    def is_all_day(self) -> bool:
        """Whether the window covers the full day."""
        return self.start_minute == self.end_minute or (
            self.start_minute == 0 and self.end_minute == MINUTES_PER_DAY
        )

    def contains(self, moment: time) -> bool:
        """Check whether a wall-clock time falls inside the window.

        Args:
            moment: Local wall-clock time

        Returns:
            bool: True if the restaurant is open at that time
        """
        minute = moment.hour * 60 + moment.minute
        if self.is_all_day:
            return True
        if self.crosses_midnight:
            return minute >= self.start_minute or minute < self.end_minute
        return self.start_minute <= minute < self.end_minute


def _to_minutes(hour: int, minute: int, meridiem: str | None, is_end: bool) -> int | None:
    """Convert a parsed clock reading to minutes after midnight, None if invalid."""
    if minute > 59:
        return None

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        is_pm = meridiem.strip().lower().startswith("p")
        hour = hour % 12 + (12 if is_pm else 0)
        return hour * 60 + minute

    if hour == 24 and minute == 0 and is_end:
        return MINUTES_PER_DAY
    if hour > 23:
        return None
    return hour * 60 + minute


def is_always_open(opening_hours: str) -> bool:
    """Whether the text marks the restaurant as open around the clock."""
    return bool(_ALWAYS_OPEN_PATTERN.search(opening_hours))


def parse_opening_hours(opening_hours: str) -> OpeningWindow | None:
    """Parse a single daily range such as "11 PM–2 AM".

    Accepts en-dash, hyphen and em-dash separators, optional minutes, and
    either 12-hour values with AM/PM markers or 24-hour values.

    Args:
        opening_hours: Free-text opening hours

    Returns:
        OpeningWindow if the text is a recognized range, None otherwise
    """
    match = _RANGE_PATTERN.match(opening_hours)
    if match is None:
        return None

    start = _to_minutes(
        int(match["start_hour"]),
        int(match["start_minute"] or 0),
        match["start_meridiem"],
        is_end=False,
    )
    end = _to_minutes(
        int(match["end_hour"]),
        int(match["end_minute"] or 0),
        match["end_meridiem"],
        is_end=True,
    )
    if start is None or end is None:
        return None

    return OpeningWindow(start_minute=start, end_minute=end)


def is_open_at(restaurant: Restaurant, now: datetime, policy: OpenHoursPolicy) -> bool:
    """Decide whether a restaurant is open at a given local time.

    Args:
        restaurant: Restaurant to evaluate
        now: Current time in the restaurant's local timezone
        policy: Whether to trust the stored flag or derive from opening hours

    Returns:
        bool: True if the restaurant is considered open
    """
    if policy is OpenHoursPolicy.STORED_FLAG:
        return restaurant.is_open

    if is_always_open(restaurant.opening_hours):
        return True

    window = parse_opening_hours(restaurant.opening_hours)
    if window is None:
        if restaurant.opening_hours:
            logger.debug(
                f"Unrecognized opening hours for restaurant {restaurant.id}, using stored flag"
            )
        return restaurant.is_open

    return window.contains(now.time())

"""Date and time helpers for choosing a bookable hour.

Decides which banking hours can still be offered for a calendar date,
relative to the current wall-clock time.
"""
from datetime import date as Date, datetime
from typing import Callable, List, Optional, Tuple

from bank_booking import config

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> Optional[Date]:
    """Parse an ISO calendar date (YYYY-MM-DD), returning None if invalid."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        return None


def parse_hour(value: str) -> Optional[int]:
    """Extract the hour from an HH:mm string, returning None if invalid."""
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except (TypeError, ValueError):
        return None
    return parsed.hour


class DateUtils:
    """
    Calendar calculations relative to "now".

    The (today, current hour) basis is cached and only rebuilt once the
    clock moves into a new calendar day or a new hour, so a long-lived
    instance never works from a previous day's values.
    """

    ALL_AVAILABLE_HOURS: Tuple[int, ...] = config.BANKING_HOURS

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            clock: Returns the current local datetime (injectable for tests)
        """
        self._clock = clock
        self._basis_key: Optional[Tuple[Date, int]] = None
        self._today = ""
        self._current_hour = 0

    def _refresh(self):
        now = self._clock()
        key = (now.date(), now.hour)
        if key != self._basis_key:
            self._basis_key = key
            self._today = now.strftime(DATE_FORMAT)
            self._current_hour = now.hour

    @property
    def today(self) -> str:
        """Today's calendar date as YYYY-MM-DD."""
        self._refresh()
        return self._today

    @property
    def current_hour(self) -> int:
        self._refresh()
        return self._current_hour

    def is_today(self, date: str) -> bool:
        return date == self.today

    def is_valid_future_date(self, date: str) -> bool:
        """True if date is today or later; unparseable dates are not valid."""
        selected = parse_date(date)
        if selected is None:
            return False
        return selected >= parse_date(self.today)

    def format_date_for_display(self, date: str) -> str:
        """
        Render a date the short en-GB way, e.g. "Wed, 27 Aug 2025".

        Returns an empty string for empty input and the input unchanged
        when it is not a valid date.
        """
        if not date:
            return ""
        parsed = parse_date(date)
        if parsed is None:
            return date
        return f"{parsed:%a}, {parsed.day} {parsed:%b} {parsed.year}"

    def get_available_hours(self, selected_date: str) -> List[int]:
        """
        Hours that can still be booked on selected_date, ascending.

        For today, only hours after the current hour are offered; any
        other date gets every banking hour.
        """
        if not selected_date:
            return []

        if self.is_today(selected_date):
            current_hour = self.current_hour
            return [hour for hour in self.ALL_AVAILABLE_HOURS if hour > current_hour]

        return list(self.ALL_AVAILABLE_HOURS)

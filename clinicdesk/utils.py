"""Shared date and time helpers used across the views and screens."""

from datetime import date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"


def to_date_string(value: date) -> str:
    """Format a date as ``YYYY-MM-DD`` using its local calendar fields."""
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def parse_clock(value: str) -> tuple[int, int]:
    """Split an ``HH:MM[:SS]`` string into (hour, minute).

    A missing minute component reads as ``00``.

    Examples:
        >>> parse_clock("09:30")
        (9, 30)
        >>> parse_clock("14")
        (14, 0)
    """
    parts = value.strip().split(":")
    hour = int(parts[0])
    minute = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return hour, minute


def format_12h(value: str) -> str:
    """Convert a 24-hour ``HH:MM`` string to 12-hour display form.

    Examples:
        >>> format_12h("00:15")
        '12:15 AM'
        >>> format_12h("13:30")
        '1:30 PM'
    """
    hours, _, minutes = value.partition(":")
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{(minutes or '00')[:2]} {ampm}"


def datetime_date_part(value: str) -> str:
    """Return the date portion of a ``YYYY-MM-DD HH:MM`` identifier."""
    return value.strip().replace("T", " ").split(" ")[0]


def week_start(value: date) -> date:
    """Return the Sunday on or before ``value``."""
    # date.weekday(): Monday=0 .. Sunday=6
    return value - timedelta(days=(value.weekday() + 1) % 7)


def sunday_first_weekday(value: date) -> int:
    """Column index of ``value`` in a Sunday-first week (Sunday=0)."""
    return (value.weekday() + 1) % 7


def add_months(value: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``value``."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)

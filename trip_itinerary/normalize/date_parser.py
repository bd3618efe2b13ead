"""Strict date and clock-time parsing for reservation lines."""

import re
from datetime import date, time

from dateutil import parser as dateutil_parser

from trip_itinerary.errors import InvalidDate, InvalidHour, InvalidMinute, ParseError

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"([0-9]{2}):([0-9]{2})")


def parse_calendar_date(raw: str) -> date:
    """Parse a YYYY-MM-DD string into a date.

    The layout is checked here as well as by the caller's line pattern;
    dateutil then rejects dates that do not exist (2023-02-30, 2023-13-01).
    """
    if not _DATE_RE.fullmatch(raw):
        raise ParseError(message=f"Invalid date format: {raw}. Must be YYYY-MM-DD")
    try:
        return dateutil_parser.isoparse(raw).date()
    except ValueError:
        raise InvalidDate(value=raw) from None


def parse_clock_time(raw: str) -> time:
    """Parse an HH:MM string. The hour is validated before the minute."""
    m = _TIME_RE.fullmatch(raw)
    if not m:
        raise ParseError(message=f"Invalid time format: {raw}. Must be HH:MM")
    hour, minute = int(m.group(1)), int(m.group(2))
    if not 0 <= hour <= 23:
        raise InvalidHour(value=hour)
    if not 0 <= minute <= 59:
        raise InvalidMinute(value=minute)
    return time(hour, minute)

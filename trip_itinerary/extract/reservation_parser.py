"""Reservation log parsing: raw text lines → Reservations of typed segments.

Input layout:

    RESERVATION
    SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10
    SEGMENT: Hotel BCN 2023-03-02 -> 2023-03-05

Every segment line is validated in a fixed order, so the same bad line
always yields the same error:

  1. loose layout (right number of tokens)     → InvalidSegmentFormat
  2. location code lengths                     → InvalidCodeLength
  3. strict layout (3-char codes, dates, times) → InvalidSegmentFormat
  4. location code characters                  → InvalidCodeFormat
  5. calendar dates, hours, minutes            → InvalidDate / InvalidHour / InvalidMinute
  6. accommodation date range                  → InvalidDateRange

The first failing line aborts the whole parse.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from trip_itinerary.errors import (
    InputFileNotFound,
    InvalidDateRange,
    InvalidEncoding,
    InvalidSegmentFormat,
    ParseError,
    UnknownSegmentKind,
)
from trip_itinerary.models import (
    AccommodationKind,
    AccommodationSegment,
    Reservation,
    Segment,
    TransitSegment,
    TransportKind,
)
from trip_itinerary.normalize.date_parser import parse_calendar_date, parse_clock_time
from trip_itinerary.normalize.location_code import check_code_format, check_code_length

logger = logging.getLogger(__name__)

RESERVATION_HEADER = "RESERVATION"
SEGMENT_TAG = "SEGMENT:"

_KIND_RE = re.compile(r"SEGMENT: (\w+)", re.ASCII)

_DATE = r"([0-9]{4}-[0-9]{2}-[0-9]{2})"
_TIME = r"([0-9]{2}:[0-9]{2})"


def _transit_patterns(kind: TransportKind) -> Tuple[re.Pattern, re.Pattern]:
    prefix = f"SEGMENT: {re.escape(kind.value)} "
    loose = re.compile(prefix + r"(\S+) (\S+) (\S+) -> (\S+) (\S+)")
    strict = re.compile(prefix + rf"(\S{{3}}) {_DATE} {_TIME} -> (\S{{3}}) {_TIME}")
    return loose, strict


def _accommodation_patterns(kind: AccommodationKind) -> Tuple[re.Pattern, re.Pattern]:
    prefix = f"SEGMENT: {re.escape(kind.value)} "
    loose = re.compile(prefix + r"(\S+) (\S+) -> (\S+)")
    strict = re.compile(prefix + rf"(\S{{3}}) {_DATE} -> {_DATE}")
    return loose, strict


_TRANSIT_PATTERNS = {kind: _transit_patterns(kind) for kind in TransportKind}
_ACCOMMODATION_PATTERNS = {kind: _accommodation_patterns(kind) for kind in AccommodationKind}


# ---------------------------------------------------------------------------
# Segment lines
# ---------------------------------------------------------------------------

def parse_transit_segment(line: str, kind: TransportKind) -> TransitSegment:
    loose, strict = _TRANSIT_PATTERNS[kind]

    m = loose.fullmatch(line)
    if not m:
        raise InvalidSegmentFormat(kind=kind.value)
    origin, raw_date, raw_start, destination, raw_end = m.groups()

    check_code_length(origin, "origin")
    check_code_length(destination, "destination")

    if not strict.fullmatch(line):
        raise InvalidSegmentFormat(kind=kind.value)

    check_code_format(origin, "origin")
    check_code_format(destination, "destination")
    day = parse_calendar_date(raw_date)
    start_time = parse_clock_time(raw_start)
    end_time = parse_clock_time(raw_end)

    return TransitSegment(
        kind=kind,
        origin=origin,
        destination=destination,
        date=day,
        start_time=start_time,
        end_time=end_time,
    )


def parse_accommodation_segment(line: str, kind: AccommodationKind) -> AccommodationSegment:
    loose, strict = _ACCOMMODATION_PATTERNS[kind]

    m = loose.fullmatch(line)
    if not m:
        raise InvalidSegmentFormat(kind=kind.value)
    city, raw_start, raw_end = m.groups()

    check_code_length(city, "city")

    if not strict.fullmatch(line):
        raise InvalidSegmentFormat(kind=kind.value)

    check_code_format(city, "city")
    start_date = parse_calendar_date(raw_start)
    end_date = parse_calendar_date(raw_end)
    if end_date <= start_date:
        raise InvalidDateRange(start_date=raw_start, end_date=raw_end)

    return AccommodationSegment(
        kind=kind,
        location=city,
        start_date=start_date,
        end_date=end_date,
    )


# Segment keyword → (line parser, kind). The kind set is closed.
_SEGMENT_PARSERS: Dict[str, Tuple[Callable[..., Segment], Union[TransportKind, AccommodationKind]]] = {
    **{kind.value: (parse_transit_segment, kind) for kind in TransportKind},
    **{kind.value: (parse_accommodation_segment, kind) for kind in AccommodationKind},
}


def parse_segment(line: str) -> Segment:
    """Parse one stripped `SEGMENT:` line into a typed segment."""
    m = _KIND_RE.match(line)
    if not m:
        raise InvalidSegmentFormat()

    keyword = m.group(1)
    entry = _SEGMENT_PARSERS.get(keyword)
    if entry is None:
        raise UnknownSegmentKind(kind=keyword)

    parse_line, kind = entry
    return parse_line(line, kind)


# ---------------------------------------------------------------------------
# Whole input
# ---------------------------------------------------------------------------

def parse_reservations(text: str) -> List[Reservation]:
    """Parse a reservation log into Reservations, in input order.

    Blank lines are ignored. Lines that are neither a RESERVATION header nor
    a segment are skipped with a warning. A RESERVATION header closes the
    previous reservation, even an empty one.

    Raises:
        ParseError: on the first invalid segment line, with `line` and
            `line_number` set.
    """
    reservations: List[Reservation] = []
    current: Optional[Reservation] = None

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if line == RESERVATION_HEADER:
            if current is not None:
                reservations.append(current)
            current = Reservation()
        elif line.startswith(SEGMENT_TAG):
            try:
                segment = parse_segment(line)
            except ParseError as e:
                e.line = line
                e.line_number = number
                raise
            if current is None:
                logger.warning("Skipping segment outside of a reservation: %s", line)
            else:
                current.add_segment(segment)
        else:
            logger.warning("Skipping invalid line: %s", line)

    if current is not None:
        reservations.append(current)
    return reservations


def parse_reservation_file(path: Union[str, Path]) -> List[Reservation]:
    """Read a UTF-8 reservation log and parse it.

    Raises:
        InputFileNotFound: if `path` is not a file.
        InvalidEncoding: if the file is not valid UTF-8.
        ParseError: on the first invalid segment line.
    """
    path = Path(path)
    if not path.is_file():
        raise InputFileNotFound(path=str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncoding(path=str(path), position=e.start) from e
    return parse_reservations(text)

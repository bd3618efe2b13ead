"""Typed errors for the trip itinerary builder.

Parse errors are terminal for the whole input: the first offending line
aborts the parse. Each error keeps the offending value(s) as attributes so
the command line can show them in debug mode, and composes the
human-readable message from them when none is given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ItineraryError(Exception):
    """Base error for the itinerary domain."""

    message: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return "Itinerary error"

    def __str__(self) -> str:
        return self.message


@dataclass
class InputFileNotFound(ItineraryError):
    path: str = ""

    def default_message(self) -> str:
        return f"File not found {self.path}"


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------

@dataclass
class ParseError(ItineraryError):
    """A reservation line could not be turned into a segment.

    Attributes:
        line: Raw text of the offending line (filled in by the parser)
        line_number: 1-based position of the line in the input
    """

    line: str = ""
    line_number: int = 0

    def default_message(self) -> str:
        return "Invalid reservation line"


@dataclass
class UnknownSegmentKind(ParseError):
    kind: str = ""

    def default_message(self) -> str:
        return f"Unknown segment type: {self.kind}"


@dataclass
class InvalidSegmentFormat(ParseError):
    """The line does not have the layout its segment kind requires."""

    kind: Optional[str] = None

    def default_message(self) -> str:
        if not self.kind:
            return "Invalid segment format"
        return f"Invalid {self.kind.lower()} segment format"


@dataclass
class InvalidCodeLength(ParseError):
    field_name: str = ""
    value: str = ""

    def default_message(self) -> str:
        return f"Invalid IATA {self.field_name} code: {self.value}. Must be exactly 3 characters"


@dataclass
class InvalidCodeFormat(ParseError):
    field_name: str = ""
    value: str = ""

    def default_message(self) -> str:
        return f"Invalid IATA {self.field_name} format: {self.value}. Must be 3 uppercase letters"


@dataclass
class InvalidDate(ParseError):
    value: str = ""

    def default_message(self) -> str:
        return f"Invalid date: {self.value}"


@dataclass
class InvalidHour(ParseError):
    value: int = 0

    def default_message(self) -> str:
        return f"Invalid hour: {self.value}"


@dataclass
class InvalidMinute(ParseError):
    value: int = 0

    def default_message(self) -> str:
        return f"Invalid minute: {self.value}"


@dataclass
class InvalidDateRange(ParseError):
    """Accommodation end date is not strictly after its start date."""

    start_date: str = ""
    end_date: str = ""

    def default_message(self) -> str:
        return f"End date ({self.end_date}) must be after start date ({self.start_date})"


@dataclass
class InvalidEncoding(ParseError):
    """The input file is not valid UTF-8."""

    path: str = ""
    position: int = 0

    def default_message(self) -> str:
        return f"Cannot decode {self.path} as UTF-8: invalid byte at offset {self.position}"


# ---------------------------------------------------------------------------
# Assembly errors
# ---------------------------------------------------------------------------

@dataclass
class NoBaseReservations(ItineraryError):
    """No transit segment departs from the base location."""

    base_location: str = ""

    def default_message(self) -> str:
        return f"There are not reservations from {self.base_location}"

import logging
from datetime import date, time

import pytest

from trip_itinerary.errors import (
    InputFileNotFound,
    InvalidCodeFormat,
    InvalidCodeLength,
    InvalidDate,
    InvalidDateRange,
    InvalidEncoding,
    InvalidHour,
    InvalidMinute,
    InvalidSegmentFormat,
    ParseError,
    UnknownSegmentKind,
)
from trip_itinerary.extract.reservation_parser import (
    parse_reservation_file,
    parse_reservations,
    parse_segment,
)
from trip_itinerary.models import (
    AccommodationKind,
    AccommodationSegment,
    TransitSegment,
    TransportKind,
)


SAMPLE = """\
RESERVATION
SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10
SEGMENT: Hotel BCN 2023-03-02 -> 2023-03-05

RESERVATION
SEGMENT: Flight BCN 2023-03-05 15:00 -> SVQ 16:30
"""


def _parse_one(line: str):
    return parse_reservations(f"RESERVATION\n{line}\n")


def test_parses_reservations_in_order():
    reservations = parse_reservations(SAMPLE)

    assert len(reservations) == 2
    assert len(reservations[0].segments) == 2
    assert len(reservations[1].segments) == 1

    flight = reservations[0].segments[0]
    assert isinstance(flight, TransitSegment)
    assert flight.kind == TransportKind.FLIGHT
    assert flight.origin == "SVQ"
    assert flight.destination == "BCN"
    assert flight.date == date(2023, 3, 2)
    assert flight.start_time == time(6, 40)
    assert flight.end_time == time(9, 10)

    hotel = reservations[0].segments[1]
    assert isinstance(hotel, AccommodationSegment)
    assert hotel.kind == AccommodationKind.HOTEL
    assert hotel.location == "BCN"
    assert hotel.start_date == date(2023, 3, 2)
    assert hotel.end_date == date(2023, 3, 5)


def test_every_kind_keyword_builds_its_segment():
    text = "\n".join([
        "RESERVATION",
        "SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10",
        "SEGMENT: Train SVQ 2023-02-15 09:30 -> MAD 11:00",
        "SEGMENT: Bus MAD 2023-04-20 17:00 -> BCN 19:30",
        "SEGMENT: Hotel BCN 2023-01-05 -> 2023-01-10",
        "SEGMENT: Apartment MAD 2023-02-15 -> 2023-02-17",
    ])
    segments = parse_reservations(text)[0].segments

    assert [s.kind for s in segments] == [
        TransportKind.FLIGHT,
        TransportKind.TRAIN,
        TransportKind.BUS,
        AccommodationKind.HOTEL,
        AccommodationKind.APARTMENT,
    ]
    assert len(parse_reservations(text)[0].transit_segments()) == 3
    assert len(parse_reservations(text)[0].accommodation_segments()) == 2


def test_parsing_is_idempotent():
    assert parse_reservations(SAMPLE) == parse_reservations(SAMPLE)


def test_empty_input_gives_no_reservations():
    assert parse_reservations("") == []
    assert parse_reservations("\n   \n\n") == []


def test_empty_reservation_is_kept():
    reservations = parse_reservations("RESERVATION\nRESERVATION\nSEGMENT: Bus MAD 2023-04-20 17:00 -> BCN 19:30\n")

    assert len(reservations) == 2
    assert reservations[0].segments == []
    assert len(reservations[1].segments) == 1


def test_surrounding_whitespace_is_ignored():
    text = "   RESERVATION   \n\t SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10  \n"
    reservations = parse_reservations(text)

    assert len(reservations) == 1
    assert reservations[0].segments[0].origin == "SVQ"


def test_unrecognized_lines_are_skipped_with_warning(caplog):
    text = "RESERVATION\nsome random notes\nSEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10\n"

    with caplog.at_level(logging.WARNING):
        reservations = parse_reservations(text)

    assert len(reservations[0].segments) == 1
    assert "Skipping invalid line: some random notes" in caplog.text


def test_segment_before_any_reservation_is_dropped(caplog):
    text = "SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10\nRESERVATION\n"

    with caplog.at_level(logging.WARNING):
        reservations = parse_reservations(text)

    assert len(reservations) == 1
    assert reservations[0].segments == []
    assert "outside of a reservation" in caplog.text


def test_segment_before_any_reservation_is_still_validated():
    with pytest.raises(InvalidCodeLength):
        parse_reservations("SEGMENT: Flight SV 2023-03-02 06:40 -> BCN 09:10\n")


@pytest.mark.parametrize(
    "line, field_name, value",
    [
        ("SEGMENT: Flight SV 2023-03-02 06:40 -> BCN 09:10", "origin", "SV"),
        ("SEGMENT: Train SVQX 2023-02-15 09:30 -> MAD 11:00", "origin", "SVQX"),
        ("SEGMENT: Bus MAD 2023-04-20 17:00 -> BC 19:30", "destination", "BC"),
        ("SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCNX 09:10", "destination", "BCNX"),
        ("SEGMENT: Hotel BC 2023-01-05 -> 2023-01-10", "city", "BC"),
        ("SEGMENT: Apartment MADRID 2023-02-15 -> 2023-02-17", "city", "MADRID"),
        ("SEGMENT: Apartment M 2023-02-15 -> 2023-02-17", "city", "M"),
    ],
)
def test_code_length_errors(line, field_name, value):
    with pytest.raises(InvalidCodeLength) as excinfo:
        _parse_one(line)

    assert excinfo.value.field_name == field_name
    assert excinfo.value.value == value
    assert str(excinfo.value) == f"Invalid IATA {field_name} code: {value}. Must be exactly 3 characters"


@pytest.mark.parametrize(
    "line, value",
    [
        # Wrong length and wrong characters: length wins.
        ("SEGMENT: Flight sv 2023-03-02 06:40 -> BCN 09:10", "sv"),
        ("SEGMENT: Flight s1 2023-03-02 06:40 -> BCN 09:10", "s1"),
        # Wrong length and a bad date: length wins over the strict layout.
        ("SEGMENT: Flight SV 2023/03/02 06:40 -> BCN 09:10", "SV"),
        ("SEGMENT: Flight INVALID 2023-03-02 06:40 -> BCN 09:10", "INVALID"),
    ],
)
def test_code_length_is_checked_before_format(line, value):
    with pytest.raises(InvalidCodeLength, match=f"Invalid IATA origin code: {value}. Must be exactly 3 characters"):
        _parse_one(line)


@pytest.mark.parametrize(
    "line, field_name, value",
    [
        ("SEGMENT: Flight svq 2023-03-02 06:40 -> BCN 09:10", "origin", "svq"),
        ("SEGMENT: Train SV1 2023-02-15 09:30 -> MAD 11:00", "origin", "SV1"),
        ("SEGMENT: Bus MAD 2023-04-20 17:00 -> bcn 19:30", "destination", "bcn"),
        ("SEGMENT: Flight SVQ 2023-03-02 06:40 -> BC@ 09:10", "destination", "BC@"),
        ("SEGMENT: Hotel BC@ 2023-01-05 -> 2023-01-10", "city", "BC@"),
        ("SEGMENT: Hotel bcn 2023-01-05 -> 2023-01-10", "city", "bcn"),
    ],
)
def test_code_format_errors(line, field_name, value):
    with pytest.raises(InvalidCodeFormat) as excinfo:
        _parse_one(line)

    assert excinfo.value.field_name == field_name
    assert str(excinfo.value) == f"Invalid IATA {field_name} format: {value}. Must be 3 uppercase letters"


@pytest.mark.parametrize(
    "line, message",
    [
        ("SEGMENT: Flight SVQ 2023/03/02 06:40 -> BCN 09:10", "Invalid flight segment format"),
        ("SEGMENT: Train SVQ 2023-02-15 9:30 -> MAD 11:00", "Invalid train segment format"),
        ("SEGMENT: Bus MAD 2023-04-20 17:00 -> BCN 19:3", "Invalid bus segment format"),
        ("SEGMENT: Hotel BCN 2023/01/05 -> 2023-01-10", "Invalid hotel segment format"),
        ("SEGMENT: Apartment MAD 2023-02-15 -> 2023/02/17", "Invalid apartment segment format"),
        # Loose layout failures: missing tokens or arrow.
        ("SEGMENT: Flight SVQ 2023-03-02 06:40 BCN 09:10", "Invalid flight segment format"),
        ("SEGMENT: Hotel BCN 2023-01-05", "Invalid hotel segment format"),
        ("SEGMENT: Train SVQ 2023-02-15 09:30 -> MAD", "Invalid train segment format"),
    ],
)
def test_segment_format_errors(line, message):
    with pytest.raises(InvalidSegmentFormat) as excinfo:
        _parse_one(line)

    assert str(excinfo.value) == message


def test_segment_tag_without_kind():
    with pytest.raises(InvalidSegmentFormat, match="^Invalid segment format$"):
        _parse_one("SEGMENT:")


@pytest.mark.parametrize("kind", ["Car", "Cruise", "Helicopter", "flight"])
def test_unknown_segment_kind(kind):
    with pytest.raises(UnknownSegmentKind, match=f"Unknown segment type: {kind}") as excinfo:
        _parse_one(f"SEGMENT: {kind} SVQ 2023-03-02 06:40 -> BCN 09:10")

    assert excinfo.value.kind == kind


def test_first_error_aborts_whole_parse():
    text = (
        "RESERVATION\n"
        "SEGMENT: Car SVQ 2023-03-02 06:40 -> BCN 09:10\n"
        "\n"
        "RESERVATION\n"
        "SEGMENT: Cruise BCN 2023-01-05 -> 2023-01-10\n"
    )
    with pytest.raises(UnknownSegmentKind, match="Car"):
        parse_reservations(text)


@pytest.mark.parametrize("value", ["2023-13-01", "2023-02-30", "2023-04-31", "2023-02-29"])
def test_invalid_calendar_dates(value):
    with pytest.raises(InvalidDate, match=f"Invalid date: {value}"):
        _parse_one(f"SEGMENT: Flight SVQ {value} 06:40 -> BCN 09:10")


def test_leap_day_is_a_real_date():
    segment = _parse_one("SEGMENT: Hotel BCN 2024-02-29 -> 2024-03-01")[0].segments[0]
    assert segment.start_date == date(2024, 2, 29)


@pytest.mark.parametrize(
    "line, error, message",
    [
        ("SEGMENT: Flight SVQ 2023-03-02 25:40 -> BCN 09:10", InvalidHour, "Invalid hour: 25"),
        ("SEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 24:00", InvalidHour, "Invalid hour: 24"),
        ("SEGMENT: Train SVQ 2023-02-15 09:60 -> MAD 11:00", InvalidMinute, "Invalid minute: 60"),
        ("SEGMENT: Train SVQ 2023-02-15 99:99 -> MAD 11:00", InvalidHour, "Invalid hour: 99"),
    ],
)
def test_invalid_clock_times(line, error, message):
    with pytest.raises(error) as excinfo:
        _parse_one(line)

    assert str(excinfo.value) == message


@pytest.mark.parametrize(
    "line, message",
    [
        ("SEGMENT: Hotel BCN 2023-01-10 -> 2023-01-05", "End date (2023-01-05) must be after start date (2023-01-10)"),
        ("SEGMENT: Apartment MAD 2023-02-15 -> 2023-02-15", "End date (2023-02-15) must be after start date (2023-02-15)"),
    ],
)
def test_accommodation_end_must_be_strictly_after_start(line, message):
    with pytest.raises(InvalidDateRange) as excinfo:
        _parse_one(line)

    assert str(excinfo.value) == message


def test_accommodation_spanning_new_year_is_valid():
    segment = _parse_one("SEGMENT: Hotel BCN 2023-12-31 -> 2024-01-01")[0].segments[0]
    assert segment.end_date == date(2024, 1, 1)


def test_parse_error_carries_line_context():
    text = "RESERVATION\nSEGMENT: Flight SVQ 2023-03-02 06:40 -> BCN 09:10\n\nSEGMENT: Flight SV 2023-03-02 06:40 -> BCN 09:10\n"

    with pytest.raises(ParseError) as excinfo:
        parse_reservations(text)

    assert excinfo.value.line_number == 4
    assert excinfo.value.line == "SEGMENT: Flight SV 2023-03-02 06:40 -> BCN 09:10"


def test_parse_segment_directly():
    segment = parse_segment("SEGMENT: Bus MAD 2023-04-20 17:00 -> BCN 19:30")

    assert isinstance(segment, TransitSegment)
    assert segment.kind == TransportKind.BUS


def test_parse_reservation_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(SAMPLE, encoding="utf-8")

    assert parse_reservation_file(path) == parse_reservations(SAMPLE)


def test_parse_reservation_file_missing(tmp_path):
    missing = tmp_path / "nope.txt"

    with pytest.raises(InputFileNotFound, match=f"File not found {missing}"):
        parse_reservation_file(missing)


def test_parse_reservation_file_not_utf8(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"RESERVATION\nSEGMENT: Hotel BCN 2023-03-02 -> 2023-03-05 \xff\n")

    with pytest.raises(InvalidEncoding) as excinfo:
        parse_reservation_file(path)

    error = excinfo.value
    assert isinstance(error, ParseError)
    assert error.path == str(path)
    assert error.position == 56
    assert str(error) == f"Cannot decode {path} as UTF-8: invalid byte at offset 56"
    assert isinstance(error.__cause__, UnicodeDecodeError)

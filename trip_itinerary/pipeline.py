"""Orchestrates the full pipeline: read → parse → chain → report counts."""

import sys
from pathlib import Path
from typing import Optional, Union

from trip_itinerary.config import BASE_LOCATION, INPUT_PATH
from trip_itinerary.models import BuildResult
from trip_itinerary.extract.reservation_parser import parse_reservation_file
from trip_itinerary.assemble.trip_builder import build_trips


def run_pipeline(
    input_path: Optional[Union[str, Path]] = None,
    base_location: Optional[str] = None,
    verbose: bool = True,
) -> BuildResult:
    """Run the full pipeline end to end.

    Args:
        input_path: Path to the reservation log. Defaults to config.
        base_location: Location code trips start from. Defaults to config.
        verbose: Print progress to stderr.

    Returns:
        BuildResult with the trips and orphaned segments.

    Raises:
        InputFileNotFound: the input file does not exist.
        ParseError: the input contains an invalid segment line.
        NoBaseReservations: nothing departs from the base location.
    """
    input_path = input_path or INPUT_PATH
    base_location = base_location or BASE_LOCATION

    def log(msg):
        if verbose:
            print(msg, file=sys.stderr)

    # Step 1: Parse
    log(f"Loading reservations: {input_path}")
    reservations = parse_reservation_file(input_path)
    segment_count = sum(len(r.segments) for r in reservations)
    log(f"  Reservations: {len(reservations)} ({segment_count} segments)")

    # Step 2: Chain into trips
    result = build_trips(reservations, base_location)
    log(f"  Built {len(result.trips)} trips from {base_location}")
    if result.has_orphans:
        log(f"  {result.orphan_count} segments not connected to any trip")

    return result

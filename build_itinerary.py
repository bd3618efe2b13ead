#!/usr/bin/env python3
"""CLI entry point for the Trip Itinerary Builder.

Usage:
    python build_itinerary.py input.txt [--base SVQ] [--format text] [--output-dir output/]

Options:
    input             Reservation log to process (or ITINERARY_INPUT)
    --base CODE       Base location trips start from (default: $BASED or SVQ)
    --format FMT      Output format: text, csv, json, all (default: text)
    --output-dir DIR  Directory for csv/json files (default: output/)
    --debug           Show tracebacks and debug diagnostics (or DEBUG=1)
"""

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path

from trip_itinerary.config import BASE_LOCATION, DEBUG, INPUT_PATH, OUTPUT_DIR
from trip_itinerary.errors import InputFileNotFound, ItineraryError, ParseError
from trip_itinerary.pipeline import run_pipeline
from trip_itinerary.output import format_report, to_json, trips_to_csv


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Group travel reservations into trips from a base location.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=INPUT_PATH,
        help="Path to the reservation log",
    )
    parser.add_argument(
        "--base",
        default=BASE_LOCATION,
        help=f"Base location code (default: {BASE_LOCATION})",
    )
    parser.add_argument(
        "--format",
        choices=["text", "csv", "json", "all"],
        default="text",
        help="Output format (text, csv, json, all)",
    )
    parser.add_argument(
        "--output-dir",
        default=str(OUTPUT_DIR),
        help="Output directory for csv/json",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=DEBUG,
        help="Print tracebacks on errors",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Don't print progress to stderr",
    )
    args = parser.parse_args(argv)

    if not args.input:
        parser.print_usage()
        print("Set BASED=<code> to change the base location, DEBUG=1 for tracebacks.")
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    started = time.perf_counter()
    try:
        result = run_pipeline(
            input_path=args.input,
            base_location=args.base,
            verbose=not args.quiet,
        )
    except (ParseError, InputFileNotFound) as e:
        print(f"Error processing file: {e}")
        if args.debug:
            traceback.print_exc(file=sys.stdout)
        return 1
    except ItineraryError as e:
        print(f"Error: {e}")
        if args.debug:
            traceback.print_exc(file=sys.stdout)
        return 1

    output_dir = Path(args.output_dir)

    if args.format in ("text", "all"):
        print(format_report(result, args.base), end="")

    if args.format in ("csv", "all"):
        csv_path = output_dir / "trips.csv"
        trips_to_csv(result, csv_path)
        print(f"CSV written to: {csv_path}")

    if args.format in ("json", "all"):
        json_path = output_dir / "itinerary.json"
        to_json(result, args.base, json_path)
        print(f"JSON written to: {json_path}")

    if not args.quiet:
        print(f"execution time: {time.perf_counter() - started:.4f} seconds", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())

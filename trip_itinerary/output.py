"""Output formatters: human-readable report, CSV, and JSON."""

import csv
import json
from pathlib import Path
from typing import List

from trip_itinerary.models import (
    AccommodationSegment,
    BuildResult,
    Segment,
    SegmentCategory,
    TransitSegment,
    Trip,
)

DIVIDER = "=" * 50


def _time_str(t) -> str:
    return t.strftime("%H:%M")


# ---------------------------------------------------------------------------
# Human-readable report
# ---------------------------------------------------------------------------

def format_trips(trips: List[Trip]) -> str:
    """Each trip block followed by a blank line."""
    return "".join(f"{trip.render()}\n\n" for trip in trips)


def format_orphans(result: BuildResult, base_location: str) -> str:
    """List segments not connected to any trip, numbered per category."""
    lines = [
        DIVIDER,
        f"ORPHANED RESERVATIONS (Not connected to trips from {base_location}):",
        DIVIDER,
    ]

    by_category = result.orphans_by_category()
    sections = [
        ("TRANSPORTS:", by_category[SegmentCategory.TRANSIT]),
        ("ACCOMMODATIONS:", by_category[SegmentCategory.ACCOMMODATION]),
    ]
    for title, segments in sections:
        if not segments:
            continue
        lines.append("")
        lines.append(title)
        for i, segment in enumerate(segments, start=1):
            lines.append(f"  {i}. {segment.render()}")

    lines.append("")
    lines.append(f"Total orphaned reservations: {result.orphan_count}")
    return "\n".join(lines) + "\n"


def format_report(result: BuildResult, base_location: str) -> str:
    """Trips, then the orphan block when anything was left unconnected."""
    report = format_trips(result.trips)
    if result.has_orphans:
        report += format_orphans(result, base_location)
    return report


# ---------------------------------------------------------------------------
# CSV output
# ---------------------------------------------------------------------------

def _segment_row(trip_index, destination, segment: Segment) -> list:
    if isinstance(segment, TransitSegment):
        return [
            trip_index, destination, segment.category.value, segment.kind.value,
            segment.origin, segment.destination,
            segment.date.isoformat(), _time_str(segment.start_time),
            segment.date.isoformat(), _time_str(segment.end_time),
        ]
    return [
        trip_index, destination, segment.category.value, segment.kind.value,
        segment.location, segment.location,
        segment.start_date.isoformat(), "",
        segment.end_date.isoformat(), "",
    ]


def trips_to_csv(result: BuildResult, path: Path):
    """Write one row per segment. Orphans get an empty trip number."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([
            "trip", "trip_destination", "category", "kind", "from", "to",
            "start_date", "start_time", "end_date", "end_time",
        ])
        for i, trip in enumerate(result.trips, start=1):
            for segment in trip.segments:
                writer.writerow(_segment_row(i, trip.destination or "", segment))
        for segment in result.orphans:
            writer.writerow(_segment_row("", "", segment))


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------

def _segment_dict(segment: Segment) -> dict:
    if isinstance(segment, AccommodationSegment):
        return {
            "category": segment.category.value,
            "kind": segment.kind.value,
            "location": segment.location,
            "start_date": segment.start_date.isoformat(),
            "end_date": segment.end_date.isoformat(),
        }
    return {
        "category": segment.category.value,
        "kind": segment.kind.value,
        "origin": segment.origin,
        "destination": segment.destination,
        "date": segment.date.isoformat(),
        "start_time": _time_str(segment.start_time),
        "end_time": _time_str(segment.end_time),
    }


def result_to_dict(result: BuildResult, base_location: str) -> dict:
    return {
        "base_location": base_location,
        "trips": [
            {
                "destination": trip.destination,
                "segments": [_segment_dict(s) for s in trip.segments],
            }
            for trip in result.trips
        ],
        "orphans": [_segment_dict(s) for s in result.orphans],
        "orphan_count": result.orphan_count,
    }


def to_json(result: BuildResult, base_location: str, path: Path):
    """Write trips and orphans to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(result_to_dict(result, base_location), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )

"""Chain segments into trips that start at the base location."""

from bisect import bisect_left, bisect_right
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from trip_itinerary.config import CONNECTION_WINDOW_HOURS
from trip_itinerary.errors import NoBaseReservations
from trip_itinerary.models import (
    AccommodationSegment,
    BuildResult,
    Reservation,
    Segment,
    TransitSegment,
    Trip,
)


# ---------------------------------------------------------------------------
# Step 1: Flatten and sort
# ---------------------------------------------------------------------------

def extract_all_segments(reservations: Sequence[Reservation]) -> List[Segment]:
    return [segment for reservation in reservations for segment in reservation.segments]


def sort_segments(segments: Sequence[Segment]) -> List[Segment]:
    """Stable sort by start instant: ties keep input order."""
    return sorted(segments, key=lambda s: s.start_instant)


# ---------------------------------------------------------------------------
# Step 2: Adjacency
# ---------------------------------------------------------------------------

def segments_connect(
    current: Segment,
    following: Segment,
    window_hours: float = CONNECTION_WINDOW_HOURS,
) -> bool:
    """True if `following` leaves from where `current` ends, within the window.

    The gap is measured between current's end and following's start and is
    absolute, so a stay that starts at midnight connects with the flight that
    lands the same morning. A gap of exactly `window_hours` does not connect.
    """
    if current.exit_point != following.entry_point:
        return False
    gap_hours = abs((following.start_instant - current.end_instant).total_seconds()) / 3600
    return gap_hours < window_hours


# ---------------------------------------------------------------------------
# Step 3: Depth-first chain growth
# ---------------------------------------------------------------------------

def _by_entry_point(segments: Sequence[Segment]) -> Dict[str, Tuple[List[datetime], List[Segment]]]:
    """Group segments by where they start, each group ordered by start instant."""
    grouped: Dict[str, List[Segment]] = defaultdict(list)
    for segment in segments:
        grouped[segment.entry_point].append(segment)
    index = {}
    for point, group in grouped.items():
        group = sort_segments(group)
        index[point] = ([s.start_instant for s in group], group)
    return index


def _within_window(
    index: Dict[str, Tuple[List[datetime], List[Segment]]],
    current: Segment,
    window_hours: float,
) -> List[Segment]:
    if current.exit_point not in index:
        return []
    starts, group = index[current.exit_point]
    window = timedelta(hours=window_hours)
    lo = bisect_right(starts, current.end_instant - window)
    hi = bisect_left(starts, current.end_instant + window)
    return group[lo:hi]


def grow_chain(
    current: Segment,
    transits: Sequence[TransitSegment],
    accommodations: Sequence[AccommodationSegment],
    window_hours: float = CONNECTION_WINDOW_HOURS,
) -> List[Segment]:
    """Collect `current` and everything reachable from it, in pre-order.

    Every connecting transit is followed; accommodations are only considered
    when no transit connects. A segment's candidates exclude the segments on
    the path from the seed to it, and nothing else, so sibling branches each
    see only their own path. A segment reached along several paths is listed
    once, at its first occurrence.
    """
    transits_from = _by_entry_point(transits)
    stays_at = _by_entry_point(accommodations)
    on_path: Set[int] = set()

    def following(segment: Segment) -> Iterator[Segment]:
        found = [
            t for t in _within_window(transits_from, segment, window_hours)
            if id(t) not in on_path and segments_connect(segment, t, window_hours)
        ]
        if not found:
            found = [
                a for a in _within_window(stays_at, segment, window_hours)
                if id(a) not in on_path and segments_connect(segment, a, window_hours)
            ]
        return iter(found)

    chain = [current]
    seen = {id(current)}
    on_path.add(id(current))
    stack = [(current, following(current))]

    while stack:
        segment, pending = stack[-1]
        nxt = next(pending, None)
        if nxt is None:
            stack.pop()
            on_path.discard(id(segment))
            continue
        if id(nxt) not in seen:
            seen.add(id(nxt))
            chain.append(nxt)
        on_path.add(id(nxt))
        stack.append((nxt, following(nxt)))

    return chain


def build_chains(
    transits: Sequence[TransitSegment],
    accommodations: Sequence[AccommodationSegment],
    base_location: str,
    window_hours: float = CONNECTION_WINDOW_HOURS,
) -> List[List[Segment]]:
    """Grow one chain per base departure not already absorbed by an earlier chain."""
    seeds = [t for t in transits if t.origin == base_location]
    if not seeds:
        raise NoBaseReservations(base_location=base_location)

    chains: List[List[Segment]] = []
    chained: set = set()
    for seed in seeds:
        if id(seed) in chained:
            continue
        chain = grow_chain(seed, transits, accommodations, window_hours=window_hours)
        if chain:
            chains.append(chain)
            chained.update(id(s) for s in chain)
    return chains


# ---------------------------------------------------------------------------
# Step 4: Trips
# ---------------------------------------------------------------------------

def determine_destination(chain: Sequence[Segment], base_location: str) -> Optional[str]:
    """Where the chain was headed.

    The last stay wins; without stays, the last arrival away from the base.
    If every arrival is the base itself, the final arrival is used.
    """
    stays = [s for s in chain if isinstance(s, AccommodationSegment)]
    if stays:
        return stays[-1].location

    transits = [s for s in chain if isinstance(s, TransitSegment)]
    if not transits:
        return None
    away = [t for t in transits if t.destination != base_location]
    if away:
        return away[-1].destination
    # Every arrival is the base: report the base.
    return transits[-1].destination


def chain_to_trip(chain: Sequence[Segment], base_location: str) -> Trip:
    return Trip(
        destination=determine_destination(chain, base_location),
        segments=sort_segments(chain),
    )


def build_trips(
    reservations: Sequence[Reservation],
    base_location: str,
    window_hours: float = CONNECTION_WINDOW_HOURS,
) -> BuildResult:
    """Full assembly: reservations → sorted segments → chains → trips + orphans.

    Args:
        reservations: Parsed reservations, in any order.
        base_location: 3-letter code every trip starts from.
        window_hours: Maximum gap between connected segments (exclusive).

    Returns:
        BuildResult with trips ordered by their first segment's start and
        the segments no trip absorbed, in sorted-population order.

    Raises:
        NoBaseReservations: if no transit segment departs from base_location.
    """
    segments = sort_segments(extract_all_segments(reservations))
    transits = [s for s in segments if isinstance(s, TransitSegment)]
    accommodations = [s for s in segments if isinstance(s, AccommodationSegment)]

    chains = build_chains(transits, accommodations, base_location, window_hours)

    trips = [chain_to_trip(chain, base_location) for chain in chains]
    trips.sort(key=lambda trip: trip.start_instant)

    chained = {id(s) for chain in chains for s in chain}
    orphans = [s for s in segments if id(s) not in chained]

    return BuildResult(trips=trips, orphans=orphans)

"""Data models for the trip itinerary builder."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Union


class TransportKind(str, Enum):
    FLIGHT = "Flight"
    TRAIN = "Train"
    BUS = "Bus"


class AccommodationKind(str, Enum):
    HOTEL = "Hotel"
    APARTMENT = "Apartment"


class SegmentCategory(str, Enum):
    TRANSIT = "transit"
    ACCOMMODATION = "accommodation"


@dataclass(frozen=True)
class TransitSegment:
    """A flight, train or bus ride. Departs and arrives on the same date."""
    kind: TransportKind
    origin: str  # 3-letter location code
    destination: str
    date: date
    start_time: time
    end_time: time

    category = SegmentCategory.TRANSIT

    @property
    def start_instant(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_instant(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    @property
    def entry_point(self) -> str:
        return self.origin

    @property
    def exit_point(self) -> str:
        return self.destination

    def render(self) -> str:
        return (
            f"{self.kind.value} from {self.origin} to {self.destination} "
            f"at {self.date.isoformat()} {self.start_time:%H:%M} to {self.end_time:%H:%M}"
        )

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class AccommodationSegment:
    """A hotel or apartment stay, occupying whole days from check-in to check-out."""
    kind: AccommodationKind
    location: str  # 3-letter city code
    start_date: date
    end_date: date

    category = SegmentCategory.ACCOMMODATION

    @property
    def start_instant(self) -> datetime:
        return datetime.combine(self.start_date, time(0, 0))

    @property
    def end_instant(self) -> datetime:
        return datetime.combine(self.end_date, time(23, 59))

    @property
    def entry_point(self) -> str:
        return self.location

    @property
    def exit_point(self) -> str:
        return self.location

    def render(self) -> str:
        return (
            f"{self.kind.value} at {self.location} "
            f"on {self.start_date.isoformat()} to {self.end_date.isoformat()}"
        )

    def __str__(self) -> str:
        return self.render()


Segment = Union[TransitSegment, AccommodationSegment]


@dataclass
class Reservation:
    """Segments read from one RESERVATION block, in input order."""
    segments: list[Segment] = field(default_factory=list)

    def add_segment(self, segment: Segment):
        self.segments.append(segment)

    def transit_segments(self) -> list[TransitSegment]:
        return [s for s in self.segments if isinstance(s, TransitSegment)]

    def accommodation_segments(self) -> list[AccommodationSegment]:
        return [s for s in self.segments if isinstance(s, AccommodationSegment)]


@dataclass
class Trip:
    destination: Optional[str]
    segments: list[Segment] = field(default_factory=list)  # ascending by start instant

    def transit_segments(self) -> list[TransitSegment]:
        return [s for s in self.segments if isinstance(s, TransitSegment)]

    def accommodation_segments(self) -> list[AccommodationSegment]:
        return [s for s in self.segments if isinstance(s, AccommodationSegment)]

    @property
    def start_instant(self) -> Optional[datetime]:
        return self.segments[0].start_instant if self.segments else None

    def render(self) -> str:
        lines = [f"TRIP to {self.destination}"]
        lines.extend(segment.render() for segment in self.segments)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


@dataclass
class BuildResult:
    """Trips built from one reservation set plus the segments left over."""
    trips: list[Trip] = field(default_factory=list)
    orphans: list[Segment] = field(default_factory=list)  # encounter order

    @property
    def orphan_count(self) -> int:
        return len(self.orphans)

    @property
    def has_orphans(self) -> bool:
        return bool(self.orphans)

    def orphans_by_category(self) -> dict[SegmentCategory, list[Segment]]:
        grouped: dict[SegmentCategory, list[Segment]] = {
            SegmentCategory.TRANSIT: [],
            SegmentCategory.ACCOMMODATION: [],
        }
        for segment in self.orphans:
            grouped[segment.category].append(segment)
        return grouped

"""Data models for visit records and derived itineraries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final


DEFAULT_TZ: Final[str] = "Asia/Kolkata"
UNKNOWN_LOCATION: Final[str] = "Unknown"


def format_duration(minutes: int) -> str:
    """Render minutes as "1 hr 5 min", or "45 min" when under an hour."""

    total = max(0, int(minutes))
    hours, mins = divmod(total, 60)
    if hours > 0:
        return f"{hours} hr {mins} min"
    return f"{mins} min"


def format_km(km: float) -> str:
    return f"{km:.2f} km"


class Purpose(str, Enum):
    """Visit reasons offered by the check-in screen."""

    CHECK_IN = "Check In"
    SITE_VISIT = "Site Visit"
    BSNL_OFFICE_VISIT = "BSNL Office Visit"
    BT_OFFICE_VISIT = "BT Office Visit"
    NEW_SITE_SURVEY = "New Site Survey"
    OFFICIAL_TOUR = "Official Tour - Out of Station"
    NEW_BUSINESS_FIRST_MEETING = "NEW BUSINESS OPPORTUNITY - FIRST MEETING"
    BUSINESS_DEVELOPMENT_FOLLOW_UP = "BUSINESS DEVELOPMENT- FOLLOW UP MEETING"
    EXISTING_CLIENT_MEETING = "Existing Client Meeting"
    PREVENTIVE_MEASURES = "Preventive Measures"
    ON_LEAVE = "On Leave"
    OTHERS = "Others"
    CHECK_OUT = "Check Out"

    @classmethod
    def lookup(cls, text: str) -> Purpose | None:
        """Return the matching member, or None for free-form purposes."""

        try:
            return cls(text.strip())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class VisitRecord:
    """A single geotagged check-in as returned by the attendance backend.

    Attributes:
        record_id: Opaque identifier, unique within one record set.
        timestamp: Timezone-aware instant of the check-in.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        location_name: Place name, or None when the backend has none.
        purpose: Visit reason text. Usually a Purpose value but kept verbatim.
        distance_from_previous: Backend distance text such as "350 m" or "1.2 km".
            Left unparsed here; see worktrack.distance.
        sub_purpose: Optional refinement of the purpose (site visits).
        image_url: Photo reference. Carried through, never interpreted.
    """

    record_id: str
    timestamp: datetime
    latitude: float
    longitude: float
    location_name: str | None = None
    purpose: str = ""
    distance_from_previous: str | None = None
    sub_purpose: str | None = None
    image_url: str | None = None

    @property
    def display_location(self) -> str:
        return self.location_name or UNKNOWN_LOCATION

    @property
    def purpose_kind(self) -> Purpose | None:
        return Purpose.lookup(self.purpose)


@dataclass(frozen=True, slots=True)
class TransitSegment:
    """Movement between two consecutive records of one itinerary."""

    from_index: int
    to_index: int
    distance_km: float
    duration_minutes: int
    from_label: str
    to_label: str
    from_name: str = UNKNOWN_LOCATION
    to_name: str = UNKNOWN_LOCATION
    # Great-circle distance between the two coordinates. Informational only.
    straight_line_km: float = 0.0

    @property
    def duration_text(self) -> str:
        return format_duration(self.duration_minutes)

    @property
    def distance_text(self) -> str:
        return format_km(self.distance_km)


@dataclass(frozen=True, slots=True)
class ItinerarySummary:
    """Segments and total distance of one user's day."""

    total_distance_km: float
    segments: tuple[TransitSegment, ...]
    labels: tuple[str, ...]

    @property
    def record_count(self) -> int:
        return len(self.labels)

    @property
    def total_distance_text(self) -> str:
        return format_km(self.total_distance_km)

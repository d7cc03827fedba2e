"""Itinerary segmentation: transit legs, waypoint labels and day totals."""

from __future__ import annotations

import logging
import string
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Final

from worktrack.distance import meters_to_km, parse_distance_m
from worktrack.geo import straight_line_km
from worktrack.models import ItinerarySummary, TransitSegment, VisitRecord, format_duration, format_km
from worktrack.timeutils import minutes_between

logger = logging.getLogger(__name__)

_LETTERS: Final[str] = string.ascii_uppercase


def waypoint_label(index: int) -> str:
    """Label for a position in an itinerary.

    Positions 0..25 get "A".."Z". Later positions fall back to their 1-based
    number ("27", "28", ...) rather than multi-letter labels, which could be
    mistaken for place abbreviations.
    """

    if index < 0:
        raise ValueError(f"waypoint index must be >= 0, got {index}")
    if index < len(_LETTERS):
        return _LETTERS[index]
    return str(index + 1)


def waypoint_labels(count: int) -> list[str]:
    """Labels for an itinerary of `count` records."""

    if count < 0:
        raise ValueError(f"itinerary length must be >= 0, got {count}")
    return [waypoint_label(i) for i in range(count)]


def _as_record_list(records: Iterable[VisitRecord]) -> list[VisitRecord]:
    if isinstance(records, (str, bytes, Mapping)):
        raise TypeError(f"records must be a sequence of VisitRecord, got {type(records).__name__}")
    try:
        items = list(records)
    except TypeError as exc:
        raise TypeError(f"records must be iterable, got {type(records).__name__}") from exc

    for i, rec in enumerate(items):
        if not isinstance(rec, VisitRecord):
            raise TypeError(f"records[{i}] is {type(rec).__name__}, expected VisitRecord")
    return items


def compute_itinerary_summary(records: Iterable[VisitRecord], *, sort: bool = True) -> ItinerarySummary:
    """Build the transit legs and total distance for one day.

    Args:
        records: Check-ins of a single user on a single day.
        sort: Order records by timestamp first (stable). With sort=False the
            caller's order is trusted and out-of-order pairs get a zero duration.

    Returns:
        ItinerarySummary. Its total is the sum of the leg distances.

    Raises:
        TypeError: If records is not a sequence of VisitRecord.
    """

    items = _as_record_list(records)
    if sort:
        items = sorted(items, key=lambda r: r.timestamp)

    labels = waypoint_labels(len(items))
    segments: list[TransitSegment] = []
    total_km = 0.0
    for i in range(1, len(items)):
        prev = items[i - 1]
        cur = items[i]
        distance_km = meters_to_km(parse_distance_m(cur.distance_from_previous))
        segments.append(
            TransitSegment(
                from_index=i - 1,
                to_index=i,
                distance_km=distance_km,
                duration_minutes=minutes_between(prev.timestamp, cur.timestamp),
                from_label=labels[i - 1],
                to_label=labels[i],
                from_name=prev.display_location,
                to_name=cur.display_location,
                straight_line_km=straight_line_km(prev, cur),
            )
        )
        total_km += distance_km

    return ItinerarySummary(total_distance_km=total_km, segments=tuple(segments), labels=tuple(labels))


def transit_narrative(segment: TransitSegment) -> str:
    """One-line description of a leg, e.g. "Transit Time: A → B (45 min, 2.30 km)"."""

    return (
        f"Transit Time: {segment.from_label} → {segment.to_label} "
        f"({segment.duration_text}, {segment.distance_text})"
    )


def cross_check_total(summary: ItinerarySummary, backend_total_km: float | None, tolerance_km: float = 0.01) -> float:
    """Compare the summed legs with a total precomputed by the backend.

    The summed legs stay authoritative for display; the backend value is only
    checked. A drift above tolerance is logged.

    Returns:
        summary total minus backend total (0.0 if the backend sent none).
    """

    if backend_total_km is None:
        return 0.0
    diff = summary.total_distance_km - float(backend_total_km)
    if abs(diff) > tolerance_km:
        logger.warning(
            "backend total %.3f km differs from summed legs %.3f km by %.3f km",
            backend_total_km,
            summary.total_distance_km,
            diff,
        )
    return diff


def persistence_payload(day: date, summary: ItinerarySummary) -> dict[str, Any]:
    """Body for the save-total-distance call: {date, totalDistanceKm, segments}."""

    return {
        "date": day.isoformat(),
        "totalDistanceKm": round(summary.total_distance_km, 3),
        "segments": [
            {
                "from": seg.from_label,
                "to": seg.to_label,
                "fromName": seg.from_name,
                "toName": seg.to_name,
                "distanceKm": round(seg.distance_km, 3),
                "durationMinutes": seg.duration_minutes,
                "transitTime": seg.duration_text,
            }
            for seg in summary.segments
        ],
    }

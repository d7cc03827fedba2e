"""Per-day grouping of check-ins and the day summaries shown to admins."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Sequence

from worktrack.itinerary import compute_itinerary_summary
from worktrack.models import ItinerarySummary, Purpose, VisitRecord
from worktrack.timeutils import format_clock, local_date


@dataclass(frozen=True, slots=True)
class DaySummary:
    """One user's movements on one local calendar date."""

    day: date
    records: tuple[VisitRecord, ...]
    itinerary: ItinerarySummary
    check_in_time: datetime | None
    check_out_time: datetime | None
    site_visits: int

    @property
    def movements(self) -> int:
        return len(self.records)


def group_by_day(records: Iterable[VisitRecord], tz_name: str) -> dict[date, list[VisitRecord]]:
    """Bucket records by local date, each bucket ordered by timestamp.

    Args:
        records: Check-ins, any order, possibly spanning many days.
        tz_name: Display timezone deciding where a day starts.

    Returns:
        Mapping of date -> records, in ascending date order.
    """

    buckets: dict[date, list[VisitRecord]] = {}
    for rec in records:
        buckets.setdefault(local_date(rec.timestamp, tz_name), []).append(rec)
    return {d: sorted(buckets[d], key=lambda r: r.timestamp) for d in sorted(buckets)}


def summarize_day(day: date, records: Sequence[VisitRecord]) -> DaySummary:
    """Build the summary card for one day (records already limited to that day)."""

    ordered = sorted(records, key=lambda r: r.timestamp)
    check_ins = [r.timestamp for r in ordered if r.purpose_kind is Purpose.CHECK_IN]
    check_outs = [r.timestamp for r in ordered if r.purpose_kind is Purpose.CHECK_OUT]
    return DaySummary(
        day=day,
        records=tuple(ordered),
        itinerary=compute_itinerary_summary(ordered, sort=False),
        check_in_time=check_ins[0] if check_ins else None,
        check_out_time=check_outs[-1] if check_outs else None,
        site_visits=sum(1 for r in ordered if r.purpose_kind is Purpose.SITE_VISIT),
    )


def summarize_days(records: Iterable[VisitRecord], tz_name: str) -> list[DaySummary]:
    return [summarize_day(d, recs) for d, recs in group_by_day(records, tz_name).items()]


def write_segments_csv(summaries: Sequence[DaySummary], out_path: str | Path, tz_name: str) -> None:
    """Write one row per transit leg, for all given days."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(
            f,
            fieldnames=[
                "date",
                "from",
                "to",
                "from_location",
                "to_location",
                "departed",
                "arrived",
                "distance_km",
                "duration_minutes",
                "transit_time",
                "straight_line_km",
            ],
        )
        w.writeheader()
        for s in summaries:
            for seg in s.itinerary.segments:
                w.writerow(
                    {
                        "date": s.day.isoformat(),
                        "from": seg.from_label,
                        "to": seg.to_label,
                        "from_location": seg.from_name,
                        "to_location": seg.to_name,
                        "departed": format_clock(s.records[seg.from_index].timestamp, tz_name),
                        "arrived": format_clock(s.records[seg.to_index].timestamp, tz_name),
                        "distance_km": f"{seg.distance_km:.2f}",
                        "duration_minutes": seg.duration_minutes,
                        "transit_time": seg.duration_text,
                        "straight_line_km": f"{seg.straight_line_km:.2f}",
                    }
                )

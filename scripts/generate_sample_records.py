from __future__ import annotations

import argparse
import json
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo

from worktrack.geo import haversine_m

TZ: Final[str] = "Asia/Kolkata"

SITE_PURPOSES: Final[list[str]] = [
    "Site Visit",
    "BSNL Office Visit",
    "BT Office Visit",
    "New Site Survey",
    "Existing Client Meeting",
    "Preventive Measures",
]
SUB_PURPOSES: Final[list[str]] = ["Router Faulty", "Radio Faulty", "Media Issue", "Adapter Faulty", "Others"]


@dataclass(frozen=True, slots=True)
class Site:
    name: str
    lat: float
    lon: float


def _distance_text(meters: float) -> str:
    """Backend-style distance text: meters under 1 km, else km with 2 decimals."""

    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters / 1000.0:.2f} km"


def generate_day(*, rng: random.Random, day: date, sites: list[Site], office: Site, bad_ratio: float) -> list[dict]:
    """One field engineer's day: Check In at office, a few site visits, Check Out."""

    tz = ZoneInfo(TZ)
    cur = datetime.combine(day, time(9, 0), tzinfo=tz) + timedelta(minutes=rng.uniform(-20, 40))
    stops = [office] + rng.sample(sites, k=rng.randint(1, min(4, len(sites)))) + [office]

    rows: list[dict] = []
    prev: Site | None = None
    for i, site in enumerate(stops):
        if i == 0:
            purpose, sub = "Check In", None
        elif i == len(stops) - 1:
            purpose, sub = "Check Out", None
        else:
            purpose = rng.choice(SITE_PURPOSES)
            sub = rng.choice(SUB_PURPOSES) if purpose == "Site Visit" else None

        lat = site.lat + rng.uniform(-0.0005, 0.0005)
        lon = site.lon + rng.uniform(-0.0005, 0.0005)
        distance: str | None = None
        if prev is not None:
            # road distance is longer than the straight line
            road_m = haversine_m(prev.lat, prev.lon, lat, lon) * rng.uniform(1.2, 1.6)
            cur = cur + timedelta(minutes=road_m / 1000.0 * rng.uniform(2.0, 4.0) + rng.uniform(30, 120))
            distance = "N/A" if rng.random() < bad_ratio else _distance_text(road_m)

        rows.append(
            {
                "_id": f"{day.isoformat()}-{i}",
                "timestamp": cur.astimezone(ZoneInfo("UTC")).isoformat().replace("+00:00", "Z"),
                "location": {"lat": round(lat, 7), "lng": round(lon, 7)},
                "locationName": site.name if rng.random() > 0.1 else None,
                "purpose": purpose,
                "subPurpose": sub,
                "distanceFromPrevious": distance,
            }
        )
        prev = Site(site.name, lat, lon)
    return rows


def main() -> int:
    p = argparse.ArgumentParser(description="Generate fake attendance records for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/records.json", help="Output JSON path")
    p.add_argument("--days", type=int, default=5, help="Number of consecutive days")
    p.add_argument("--start", type=str, default="2025-01-06", help="First day, YYYY-MM-DD")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--bad-ratio", type=float, default=0.05, help="Share of legs with an unusable distance")
    args = p.parse_args()

    rng = random.Random(args.seed)
    office = Site("Regional Office, MG Road", 12.9756, 77.6050)
    sites = [
        Site("BSNL Exchange, Indiranagar", 12.9784, 77.6408),
        Site("Tower Site, Whitefield", 12.9698, 77.7500),
        Site("Customer Premises, Koramangala", 12.9352, 77.6245),
        Site("BT Office, Jayanagar", 12.9250, 77.5938),
        Site("Tower Site, Hebbal", 13.0358, 77.5970),
    ]

    start = date.fromisoformat(args.start)
    rows: list[dict] = []
    for n in range(args.days):
        rows.extend(generate_day(rng=rng, day=start + timedelta(days=n), sites=sites, office=office, bad_ratio=args.bad_ratio))

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps({"data": rows}, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Generated: {out_path} (records={len(rows)}, days={args.days}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from worktrack.models import VisitRecord

DAY_START = datetime(2024, 3, 5, 9, 0, tzinfo=UTC)


def make_record(
    minutes: float,
    distance: str | None = None,
    *,
    purpose: str = "Site Visit",
    name: str | None = None,
    lat: float = 12.97,
    lon: float = 77.59,
    record_id: str | None = None,
) -> VisitRecord:
    """Record `minutes` after 09:00 UTC on 2024-03-05."""

    return VisitRecord(
        record_id=record_id or f"r{minutes}",
        timestamp=DAY_START + timedelta(minutes=minutes),
        latitude=lat,
        longitude=lon,
        location_name=name,
        purpose=purpose,
        distance_from_previous=distance,
    )


@pytest.fixture
def record():
    return make_record

"""Decoding of backend attendance rows (JSON or CSV) into VisitRecord.

This is the one place where raw wire data is checked. Fields the itinerary
math can live without are defaulted here; a row without a usable timestamp is
rejected.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from worktrack.models import VisitRecord
from worktrack.timeutils import dt_from_epoch_ms, parse_timestamp

logger = logging.getLogger(__name__)


class RecordError(ValueError):
    """A raw row cannot be turned into a VisitRecord."""


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Quick summary of record decoding."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _coordinate(value: Any, field: str, record_id: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        logger.warning("record %s: %s=%r is not a number, using 0.0", record_id, field, value)
        return 0.0
    if not math.isfinite(v):
        logger.warning("record %s: %s=%r is not finite, using 0.0", record_id, field, value)
        return 0.0
    return v


def _timestamp(value: Any, record_id: str) -> datetime:
    if value is None or value == "":
        raise RecordError(f"record {record_id}: missing timestamp")
    if isinstance(value, bool):
        raise RecordError(f"record {record_id}: invalid timestamp {value!r}")
    try:
        if isinstance(value, (int, float)):
            return dt_from_epoch_ms(value)
        if isinstance(value, str) and value.strip().isdigit():
            return dt_from_epoch_ms(int(value.strip()))
        return parse_timestamp(str(value))
    except (ValueError, OverflowError, OSError) as exc:
        # NaN, out-of-range epochs and dates
        raise RecordError(f"record {record_id}: {exc}") from exc


def visit_record_from_dict(row: Mapping[str, Any], position: int = 0) -> VisitRecord:
    """Decode one backend row.

    Understands the attendance API shape::

        {"_id": "...", "timestamp": "2024-03-05T03:30:00.000Z",
         "location": {"lat": 12.97, "lng": 77.59}, "locationName": "...",
         "purpose": "Site Visit", "subPurpose": "...",
         "distanceFromPrevious": "1.2 km", "image": "https://..."}

    and the flat variant with latitude/longitude columns.

    Args:
        row: Raw mapping.
        position: Index of the row in its batch; used for a fallback id.

    Raises:
        RecordError: If the row is not a mapping or has no usable timestamp.
    """

    if not isinstance(row, Mapping):
        raise RecordError(f"row {position}: expected an object, got {type(row).__name__}")

    record_id = _text_or_none(row.get("_id")) or _text_or_none(row.get("id")) or f"row-{position}"
    timestamp = _timestamp(row.get("timestamp"), record_id)

    location = row.get("location")
    if isinstance(location, Mapping):
        lat_raw = location.get("lat", location.get("latitude"))
        lon_raw = location.get("lng", location.get("longitude"))
    else:
        lat_raw = row.get("latitude", row.get("lat"))
        lon_raw = row.get("longitude", row.get("lng"))

    return VisitRecord(
        record_id=record_id,
        timestamp=timestamp,
        latitude=_coordinate(lat_raw, "latitude", record_id),
        longitude=_coordinate(lon_raw, "longitude", record_id),
        location_name=_text_or_none(row.get("locationName")),
        purpose=_text_or_none(row.get("purpose")) or "",
        distance_from_previous=_text_or_none(row.get("distanceFromPrevious")),
        sub_purpose=_text_or_none(row.get("subPurpose")),
        image_url=_text_or_none(row.get("image")),
    )


def _rows_from_payload(payload: Any) -> Sequence[Any]:
    if isinstance(payload, Mapping):
        payload = payload.get("data", payload.get("records"))
    if not isinstance(payload, list):
        raise RecordError("expected a JSON list of records or an object with a 'data' list")
    return payload


def records_from_rows(rows: Iterable[Any], *, strict: bool = False) -> tuple[list[VisitRecord], LoadSummary]:
    """Decode many rows.

    Args:
        rows: Raw rows.
        strict: Raise on the first bad row instead of skipping it.

    Returns:
        (records, summary)
    """

    total = 0
    parsed: list[VisitRecord] = []
    for i, row in enumerate(rows):
        total += 1
        try:
            parsed.append(visit_record_from_dict(row, i))
        except RecordError as exc:
            if strict:
                raise
            logger.warning("skipping row: %s", exc)

    summary = LoadSummary(rows_total=total, rows_parsed=len(parsed), rows_skipped=total - len(parsed))
    if summary.rows_skipped > 0:
        logger.warning("%s of %s rows could not be decoded and were skipped", summary.rows_skipped, total)
    return parsed, summary


def records_from_payload(payload: Any, *, strict: bool = False) -> tuple[list[VisitRecord], LoadSummary]:
    """Decode an API response body (list, or {"data": [...]})."""

    return records_from_rows(_rows_from_payload(payload), strict=strict)


def load_records_json(path: str | Path, *, strict: bool = False) -> tuple[list[VisitRecord], LoadSummary]:
    """Load records from a JSON file saved from the attendance API."""

    p = Path(path)
    text = p.read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordError(f"{p}: not valid JSON ({exc.msg} at line {exc.lineno})") from exc
    return records_from_payload(payload, strict=strict)


def load_records_csv(path: str | Path, *, strict: bool = False) -> tuple[list[VisitRecord], LoadSummary]:
    """Load records from a flat CSV export.

    Columns: _id, timestamp, latitude, longitude, locationName, purpose,
    subPurpose, distanceFromPrevious, image. Only timestamp is required.
    """

    p = Path(path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or "timestamp" not in reader.fieldnames:
            raise RecordError(f"{p}: CSV has no 'timestamp' column. Columns: {reader.fieldnames}")
        return records_from_rows(list(reader), strict=strict)


def load_records(path: str | Path, *, strict: bool = False) -> tuple[list[VisitRecord], LoadSummary]:
    """Load records from .json or .csv depending on the file suffix."""

    p = Path(path)
    if p.suffix.lower() == ".csv":
        return load_records_csv(p, strict=strict)
    return load_records_json(p, strict=strict)


def visit_record_to_dict(rec: VisitRecord) -> dict[str, Any]:
    """Inverse of visit_record_from_dict, in the attendance API shape."""

    return {
        "_id": rec.record_id,
        "timestamp": rec.timestamp.isoformat(),
        "location": {"lat": rec.latitude, "lng": rec.longitude},
        "locationName": rec.location_name,
        "purpose": rec.purpose,
        "subPurpose": rec.sub_purpose,
        "distanceFromPrevious": rec.distance_from_previous,
        "image": rec.image_url,
    }

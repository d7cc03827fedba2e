from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import streamlit as st

from worktrack.client import ApiConfig, ApiError, Session, fetch_records_by_date
from worktrack.daily import DaySummary, summarize_day, summarize_days
from worktrack.itinerary import format_duration, format_km
from worktrack.models import DEFAULT_TZ, VisitRecord
from worktrack.records import load_records
from worktrack.timeutils import format_clock, tzinfo_from_name


@st.cache_data(show_spinner=False)
def _load_file(records_path: str, mtime: float) -> list[VisitRecord]:
    _ = mtime  # part of cache key so updated files reload automatically
    records, _ = load_records(records_path)
    return records


def _timeline_rows(s: DaySummary, tz_name: str) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for label, rec in zip(s.itinerary.labels, s.records):
        rows.append(
            {
                "point": label,
                "time": format_clock(rec.timestamp, tz_name),
                "purpose": rec.purpose,
                "sub_purpose": rec.sub_purpose or "",
                "location": rec.display_location,
                "latitude": rec.latitude,
                "longitude": rec.longitude,
            }
        )
    return rows


def _segment_rows(s: DaySummary) -> list[dict[str, object]]:
    return [
        {
            "leg": f"{seg.from_label} → {seg.to_label}",
            "from": seg.from_name,
            "to": seg.to_name,
            "transit_time": seg.duration_text,
            "distance": seg.distance_text,
            "straight_line": format_km(seg.straight_line_km),
        }
        for seg in s.itinerary.segments
    ]


def main() -> None:
    st.set_page_config(page_title="WorkTrack: daily itinerary", layout="wide")
    st.title("WorkTrack: movements and distance by day")

    with st.sidebar:
        st.subheader("Source")
        tz_name = st.text_input("Timezone (IANA)", value=DEFAULT_TZ)
        source = st.radio("Records from", ["File", "Attendance API"], horizontal=True)
        today = datetime.now(tzinfo_from_name(tz_name)).date()
        selected: date = st.date_input("Date", value=today)

        if source == "File":
            records_path = st.text_input("records.json / records.csv", value="sample_data/records.json")
        else:
            api_url = st.text_input("API URL", value=ApiConfig.from_env().base_url)
            email = st.text_input("User email", value="")
            token = st.text_input("Bearer token", value="", type="password")

    if source == "File":
        p = Path(records_path)
        if not p.exists():
            st.error(f"File not found: {records_path!r}")
            return
        try:
            records = _load_file(records_path, p.stat().st_mtime)
        except Exception as exc:
            st.exception(exc)
            return
        by_day = {s.day: s for s in summarize_days(records, tz_name)}
        summary = by_day.get(selected)
    else:
        if not token:
            st.info("Enter a token to load records from the API.")
            return
        try:
            with st.spinner("Fetching worktrack ..."):
                fetched = fetch_records_by_date(Session(token=token, email=email or None), selected, ApiConfig(base_url=api_url))
        except ApiError as exc:
            st.error(f"Failed to fetch worktrack: {exc}")
            return
        summary = summarize_day(selected, fetched) if fetched else None

    st.subheader(f"WorkTrack for {selected.isoformat()}")
    if summary is None:
        st.write("No worktrack for this date.")
        return

    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Check-In", format_clock(summary.check_in_time, tz_name) if summary.check_in_time else "N/A")
    c2.metric("Check-Out", format_clock(summary.check_out_time, tz_name) if summary.check_out_time else "N/A")
    c3.metric("Site Visits", str(summary.site_visits))
    c4.metric("Movements", str(summary.movements))
    c5.metric("Total Distance", summary.itinerary.total_distance_text)

    st.subheader("Timeline")
    st.dataframe(_timeline_rows(summary, tz_name), use_container_width=True)

    st.subheader("Point-to-point")
    if summary.itinerary.segments:
        st.dataframe(_segment_rows(summary), use_container_width=True)
        travel = sum(seg.duration_minutes for seg in summary.itinerary.segments)
        st.caption(f"Time in transit: {format_duration(travel)}")
    else:
        st.write("Only one check-in on this day, no transit.")

    st.map(
        [{"lat": r.latitude, "lon": r.longitude} for r in summary.records],
        latitude="lat",
        longitude="lon",
    )
    st.caption(
        "Distances are the sum of the per-leg road distances reported with each check-in. "
        "Legs with a missing or unreadable distance count as 0.00 km."
    )


if __name__ == "__main__":
    main()

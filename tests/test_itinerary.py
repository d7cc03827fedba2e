from __future__ import annotations

import math
from datetime import date

import pytest

from worktrack.itinerary import (
    compute_itinerary_summary,
    cross_check_total,
    format_duration,
    format_km,
    persistence_payload,
    transit_narrative,
    waypoint_label,
    waypoint_labels,
)


def test_empty_and_single_record_have_no_segments(record):
    for records in ([], [record(0, "5 km")]):
        summary = compute_itinerary_summary(records)
        assert summary.segments == ()
        assert summary.total_distance_km == 0
    assert compute_itinerary_summary([record(0)]).labels == ("A",)


def test_two_stop_day(record):
    summary = compute_itinerary_summary([record(0, None), record(45, "2.3 km")])

    assert len(summary.segments) == 1
    seg = summary.segments[0]
    assert seg.distance_km == pytest.approx(2.3)
    assert seg.duration_minutes == 45
    assert seg.duration_text == "45 min"
    assert (seg.from_label, seg.to_label) == ("A", "B")
    assert summary.total_distance_km == pytest.approx(2.3)
    assert summary.labels == ("A", "B")
    assert summary.total_distance_text == "2.30 km"


def test_mixed_malformed_data(record):
    summary = compute_itinerary_summary([record(0, None), record(65, "bad-data"), record(160, "500 m")])

    first, second = summary.segments
    assert first.distance_km == 0
    assert first.duration_minutes == 65
    assert first.duration_text == "1 hr 5 min"
    assert second.distance_km == pytest.approx(0.5)
    assert second.duration_minutes == 95
    assert second.duration_text == "1 hr 35 min"
    assert summary.total_distance_km == pytest.approx(0.5)


def test_total_is_sum_of_segments(record):
    distances = [None, "1.25 km", "380 m", "N/A", "0.07 km", "12", "3.333 km"]
    records = [record(i * 17, d) for i, d in enumerate(distances)]
    summary = compute_itinerary_summary(records)

    assert math.isclose(summary.total_distance_km, sum(s.distance_km for s in summary.segments), abs_tol=1e-9)
    assert summary.total_distance_km == pytest.approx(1.25 + 0.38 + 0.07 + 0.012 + 3.333)


def test_same_input_gives_same_output(record):
    records = [record(0), record(30, "1 km"), record(95, "250 m")]
    assert compute_itinerary_summary(records) == compute_itinerary_summary(records)
    assert [r.record_id for r in records] == ["r0", "r30", "r95"]


def test_unsorted_input_is_ordered_by_timestamp(record):
    records = [record(90, "2 km", record_id="c"), record(0, record_id="a"), record(30, "1 km", record_id="b")]
    summary = compute_itinerary_summary(records)

    assert [s.duration_minutes for s in summary.segments] == [30, 60]
    assert [s.distance_km for s in summary.segments] == [pytest.approx(1.0), pytest.approx(2.0)]


def test_out_of_order_duration_clamps_to_zero(record):
    summary = compute_itinerary_summary([record(60), record(10, "1 km")], sort=False)
    assert summary.segments[0].duration_minutes == 0
    assert summary.segments[0].duration_text == "0 min"


def test_duration_floors_partial_minutes(record):
    summary = compute_itinerary_summary([record(0), record(44.9)])
    assert summary.segments[0].duration_minutes == 44


def test_labels_are_positional(record):
    records = [record(i, "1 km", purpose="Check Out") for i in range(5)]
    assert list(compute_itinerary_summary(records).labels) == ["A", "B", "C", "D", "E"]
    assert waypoint_labels(5) == ["A", "B", "C", "D", "E"]


def test_labels_beyond_alphabet_are_numeric():
    labels = waypoint_labels(30)
    assert labels[25] == "Z"
    assert labels[26:] == ["27", "28", "29", "30"]
    assert waypoint_label(0) == "A"
    with pytest.raises(ValueError):
        waypoint_label(-1)


def test_location_names_default_to_unknown(record):
    summary = compute_itinerary_summary([record(0, name="Office"), record(20, "1 km")])
    seg = summary.segments[0]
    assert (seg.from_name, seg.to_name) == ("Office", "Unknown")


def test_straight_line_distance_is_informational(record):
    records = [record(0, lat=12.9756, lon=77.6050), record(20, "9 km", lat=12.9352, lon=77.6245)]
    summary = compute_itinerary_summary(records)
    seg = summary.segments[0]
    assert seg.straight_line_km == pytest.approx(4.96, abs=0.05)
    assert summary.total_distance_km == pytest.approx(9.0)


@pytest.mark.parametrize("bad", [None, 42, "AB", {"a": 1}])
def test_non_sequence_input_is_rejected(bad):
    with pytest.raises(TypeError):
        compute_itinerary_summary(bad)


def test_non_record_elements_are_rejected(record):
    with pytest.raises(TypeError):
        compute_itinerary_summary([record(0), {"timestamp": "2024-03-05T09:00:00Z"}])


@pytest.mark.parametrize(
    ("minutes", "text"),
    [(0, "0 min"), (45, "45 min"), (60, "1 hr 0 min"), (65, "1 hr 5 min"), (125, "2 hr 5 min"), (-3, "0 min")],
)
def test_format_duration(minutes, text):
    assert format_duration(minutes) == text


def test_format_km():
    assert format_km(4.8349) == "4.83 km"
    assert format_km(0) == "0.00 km"


def test_transit_narrative(record):
    summary = compute_itinerary_summary([record(0), record(45, "2.3 km")])
    assert transit_narrative(summary.segments[0]) == "Transit Time: A → B (45 min, 2.30 km)"


def test_cross_check_total_logs_drift(record, caplog):
    summary = compute_itinerary_summary([record(0), record(45, "2.3 km")])

    assert cross_check_total(summary, None) == 0.0
    assert cross_check_total(summary, 2.3) == pytest.approx(0.0)
    assert not caplog.records

    assert cross_check_total(summary, 3.0) == pytest.approx(-0.7)
    assert "differs from summed legs" in caplog.text


def test_persistence_payload(record):
    summary = compute_itinerary_summary([record(0, name="Office"), record(65, "1.2 km", name="Tower")])
    payload = persistence_payload(date(2024, 3, 5), summary)

    assert payload["date"] == "2024-03-05"
    assert payload["totalDistanceKm"] == pytest.approx(1.2)
    assert payload["segments"] == [
        {
            "from": "A",
            "to": "B",
            "fromName": "Office",
            "toName": "Tower",
            "distanceKm": pytest.approx(1.2),
            "durationMinutes": 65,
            "transitTime": "1 hr 5 min",
        }
    ]


def test_segment_display_text_comes_from_models():
    from worktrack import itinerary, models

    seg = models.TransitSegment(
        from_index=0, to_index=1, distance_km=4.8349, duration_minutes=65, from_label="A", to_label="B"
    )
    assert (seg.duration_text, seg.distance_text) == ("1 hr 5 min", "4.83 km")
    assert itinerary.format_duration is models.format_duration
    assert itinerary.format_km is models.format_km

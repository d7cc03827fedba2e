from __future__ import annotations

import csv
import json

import pytest

from worktrack import cli

ROWS = [
    {"_id": "a", "timestamp": "2024-03-05T03:30:00Z", "purpose": "Check In", "locationName": "Office"},
    {"_id": "b", "timestamp": "2024-03-05T04:35:00Z", "purpose": "Site Visit", "distanceFromPrevious": "bad-data"},
    {"_id": "c", "timestamp": "2024-03-05T06:10:00Z", "purpose": "Check Out", "distanceFromPrevious": "500 m"},
]


@pytest.fixture
def records_file(tmp_path):
    p = tmp_path / "records.json"
    p.write_text(json.dumps({"data": ROWS}), encoding="utf-8")
    return p


def test_summary(records_file, capsys):
    assert cli.main(["summary", "--records", str(records_file)]) == 0
    out = capsys.readouterr().out

    assert "### 2024-03-05  (3 movements)" in out
    assert "Transit Time: A → B (1 hr 5 min, 0.00 km)" in out
    assert "Transit Time: B → C (1 hr 35 min, 0.50 km)" in out
    assert "check-in=9:00:00 AM, check-out=11:40:00 AM, site visits=1" in out
    assert "Total Distance: 0.50 km" in out


def test_summary_json_and_backend_total(records_file, capsys):
    assert cli.main(["summary", "--records", str(records_file), "--json", "--backend-total", "0.8"]) == 0
    out = capsys.readouterr().out

    assert "diff=-0.300 km" in out
    payload = json.loads(out[out.index("[\n") :])
    assert payload[0]["date"] == "2024-03-05"
    assert payload[0]["totalDistanceKm"] == 0.5


def test_export_segments(records_file, tmp_path, capsys):
    out_csv = tmp_path / "segments.csv"
    assert cli.main(["export-segments", "--records", str(records_file), "--out", str(out_csv)]) == 0
    assert "days=1, legs=2" in capsys.readouterr().out

    with out_csv.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["transit_time"] for r in rows] == ["1 hr 5 min", "1 hr 35 min"]


def test_empty_file(tmp_path, capsys):
    p = tmp_path / "empty.json"
    p.write_text("[]", encoding="utf-8")
    assert cli.main(["summary", "--records", str(p)]) == 0
    assert "No worktrack for this date." in capsys.readouterr().out


def test_bad_input_exit_code(tmp_path, capsys):
    assert cli.main(["summary", "--records", str(tmp_path / "missing.json")]) == 2

    strict = tmp_path / "strict.json"
    strict.write_text(json.dumps([{"_id": "x"}]), encoding="utf-8")
    assert cli.main(["summary", "--records", str(strict), "--strict"]) == 2
    assert "missing timestamp" in capsys.readouterr().err


def test_fetch_and_save(monkeypatch, capsys):
    from worktrack.records import records_from_payload

    sent = {}

    def fake_fetch(session, day, cfg):
        assert session.token == "tok"
        assert cfg.base_url == "https://api.example.invalid"
        return records_from_payload(ROWS)[0]

    def fake_save(session, payload, cfg):
        sent.update(payload)

    monkeypatch.setattr(cli, "fetch_records_by_date", fake_fetch)
    monkeypatch.setattr(cli, "save_total_distance", fake_save)

    argv = ["fetch", "--date", "2024-03-05", "--token", "tok", "--api-url", "https://api.example.invalid", "--save"]
    assert cli.main(argv) == 0
    assert "Total distance saved successfully!" in capsys.readouterr().out
    assert sent["totalDistanceKm"] == 0.5
    assert len(sent["segments"]) == 2


def test_fetch_api_error(monkeypatch, capsys):
    from worktrack.client import ApiError

    def failing(session, day, cfg):
        raise ApiError("GET /api/attendance/filtered failed: timed out")

    monkeypatch.setattr(cli, "fetch_records_by_date", failing)
    assert cli.main(["fetch", "--date", "2024-03-05", "--token", "tok"]) == 1
    assert "Failed to fetch worktrack" in capsys.readouterr().err


def test_summary_skips_row_with_out_of_range_timestamp(tmp_path, capsys):
    p = tmp_path / "records.json"
    p.write_text(json.dumps(ROWS + [{"_id": "d", "timestamp": 1e20}]), encoding="utf-8")

    assert cli.main(["summary", "--records", str(p)]) == 0
    assert "Total Distance: 0.50 km" in capsys.readouterr().out

"""Command-line interface for worktrack.

Run:
    python -m worktrack summary --records day.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from worktrack.client import ApiConfig, ApiError, Session, fetch_records_by_date, save_total_distance
from worktrack.daily import DaySummary, summarize_days, write_segments_csv
from worktrack.itinerary import cross_check_total, format_duration, format_km, persistence_payload, transit_narrative
from worktrack.models import DEFAULT_TZ, VisitRecord
from worktrack.records import load_records, visit_record_to_dict
from worktrack.timeutils import format_clock

logger = logging.getLogger(__name__)


def _print_day(s: DaySummary, tz_name: str) -> None:
    print(f"### {s.day.isoformat()}  ({s.movements} movements)")
    for label, rec in zip(s.itinerary.labels, s.records):
        purpose = rec.purpose or "-"
        if rec.sub_purpose:
            purpose = f"{purpose} / {rec.sub_purpose}"
        print(f"  {label}  {format_clock(rec.timestamp, tz_name):>11}  {purpose}  @ {rec.display_location}")
    if s.itinerary.segments:
        print()
        for seg in s.itinerary.segments:
            print(f"  {transit_narrative(seg)}  [{seg.from_name} -> {seg.to_name}]")
    print()
    check_in = format_clock(s.check_in_time, tz_name) if s.check_in_time else "N/A"
    check_out = format_clock(s.check_out_time, tz_name) if s.check_out_time else "N/A"
    travel = sum(seg.duration_minutes for seg in s.itinerary.segments)
    print(
        f"  check-in={check_in}, check-out={check_out}, site visits={s.site_visits}, "
        f"in transit={format_duration(travel)}"
    )
    print(f"  Total Distance: {s.itinerary.total_distance_text}")
    print()


def _load(path: str, strict: bool) -> list[VisitRecord]:
    records, summary = load_records(path, strict=strict)
    logger.info(
        "%s: rows=%s parsed=%s skipped=%s", path, summary.rows_total, summary.rows_parsed, summary.rows_skipped
    )
    return records


def _cmd_summary(args: argparse.Namespace) -> int:
    records = _load(args.records, args.strict)
    summaries = summarize_days(records, args.tz)
    if not summaries:
        print("No worktrack for this date.")
        return 0

    for s in summaries:
        _print_day(s, args.tz)

    if args.backend_total is not None:
        grand = sum(s.itinerary.total_distance_km for s in summaries)
        diff = grand - args.backend_total
        print(f"backend total={format_km(args.backend_total)}, summed legs={format_km(grand)}, diff={diff:+.3f} km")

    if args.json:
        payload = [persistence_payload(s.day, s.itinerary) for s in summaries]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_export_segments(args: argparse.Namespace) -> int:
    records = _load(args.records, args.strict)
    summaries = summarize_days(records, args.tz)
    write_segments_csv(summaries, args.out, args.tz)
    legs = sum(len(s.itinerary.segments) for s in summaries)
    print(f"days={len(summaries)}, legs={legs}")
    print(f"Exported: {args.out}")
    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    day = date.fromisoformat(args.date)
    session = Session(token=args.token, email=args.email)
    cfg = ApiConfig.from_env(args.api_url)
    try:
        records = fetch_records_by_date(session, day, cfg)
    except ApiError as exc:
        print(f"Failed to fetch worktrack: {exc}", file=sys.stderr)
        return 1

    if args.out:
        rows = [visit_record_to_dict(r) for r in records]
        Path(args.out).write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"Saved: {args.out}")

    summary = {s.day: s for s in summarize_days(records, args.tz)}.get(day)
    if summary is None:
        print("No worktrack for this date.")
        return 0
    _print_day(summary, args.tz)
    if args.backend_total is not None:
        cross_check_total(summary.itinerary, args.backend_total)

    if args.save:
        try:
            save_total_distance(session, persistence_payload(day, summary.itinerary), cfg)
        except ApiError as exc:
            print(f"Failed to save total distance: {exc}", file=sys.stderr)
            return 1
        print("Total distance saved successfully!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="worktrack")
    p.add_argument("-v", "--verbose", action="store_true", help="log decoding details")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_sum = sub.add_parser("summary", help="print waypoints, transit legs and total distance per day")
    p_sum.add_argument("--records", type=str, default="records.json", help="records file (.json or .csv)")
    p_sum.add_argument("--tz", type=str, default=DEFAULT_TZ, help="display timezone (IANA)")
    p_sum.add_argument("--strict", action="store_true", help="fail on the first malformed row")
    p_sum.add_argument("--json", action="store_true", help="also print the save-total-distance payloads")
    p_sum.add_argument(
        "--backend-total",
        type=float,
        default=None,
        help="total distance reported by the backend (km), compared with the summed legs",
    )
    p_sum.set_defaults(func=_cmd_summary)

    p_exp = sub.add_parser("export-segments", help="export one CSV row per transit leg")
    p_exp.add_argument("--records", type=str, default="records.json", help="records file (.json or .csv)")
    p_exp.add_argument("--out", type=str, default="segments.csv", help="output CSV path")
    p_exp.add_argument("--tz", type=str, default=DEFAULT_TZ, help="display timezone (IANA)")
    p_exp.add_argument("--strict", action="store_true", help="fail on the first malformed row")
    p_exp.set_defaults(func=_cmd_export_segments)

    p_f = sub.add_parser("fetch", help="download one day from the attendance API and summarize it")
    p_f.add_argument("--date", type=str, required=True, help="calendar date, YYYY-MM-DD")
    p_f.add_argument("--token", type=str, required=True, help="bearer token of the signed-in user")
    p_f.add_argument("--email", type=str, default=None, help="user whose records to fetch")
    p_f.add_argument("--api-url", type=str, default=None, help="API base URL (default: $WORKTRACK_API_URL)")
    p_f.add_argument("--tz", type=str, default=DEFAULT_TZ, help="display timezone (IANA)")
    p_f.add_argument("--out", type=str, default=None, help="also save the fetched records as JSON")
    p_f.add_argument("--backend-total", type=float, default=None, help="backend total (km) to cross-check")
    p_f.add_argument("--save", action="store_true", help="post the computed total back to the API")
    p_f.set_defaults(func=_cmd_fetch)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except (ValueError, OSError) as exc:
        # RecordError, unreadable file, bad --date or --tz
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

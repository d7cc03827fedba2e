"""Attendance API client (fetch a day's check-ins, save computed totals).

Uses only the Python standard library. The pure itinerary code never calls
this module; callers fetch first and hand the decoded records over.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import date
from typing import Any

from worktrack.models import VisitRecord
from worktrack.records import RecordError, records_from_payload

logger = logging.getLogger(__name__)

API_URL_ENV = "WORKTRACK_API_URL"
DEFAULT_API_URL = "http://localhost:5000"


class ApiError(RuntimeError):
    """The attendance API could not be reached or answered with an error."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True, slots=True)
class Session:
    """Credentials of the signed-in user, passed explicitly to API calls."""

    token: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Configuration for the attendance backend."""

    base_url: str = DEFAULT_API_URL
    timeout_seconds: float = 20.0
    user_agent: str = "worktrack/0.1.0"

    @classmethod
    def from_env(cls, override: str | None = None) -> ApiConfig:
        """Base URL from `override`, else WORKTRACK_API_URL, else the local default."""

        base = override or os.environ.get(API_URL_ENV) or DEFAULT_API_URL
        return cls(base_url=base)


def _request_json(
    method: str,
    path: str,
    session: Session,
    cfg: ApiConfig,
    *,
    params: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> Any:
    url = cfg.base_url.rstrip("/") + path
    if params:
        url = f"{url}?{urllib.parse.urlencode(params)}"
    headers = {
        "Authorization": f"Bearer {session.token}",
        "Accept": "application/json",
        "User-Agent": cfg.user_agent,
    }
    data = None
    if body is not None:
        data = json.dumps(body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = urllib.request.Request(url, data=data, headers=headers, method=method)

    logger.debug("%s %s", method, url)
    try:
        with urllib.request.urlopen(req, timeout=cfg.timeout_seconds) as resp:  # noqa: S310
            text = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        try:
            message = json.loads(detail).get("error") or detail
        except (json.JSONDecodeError, AttributeError):
            message = detail
        raise ApiError(f"{method} {path} failed with HTTP {exc.code}: {message}", status=exc.code) from exc
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        raise ApiError(f"{method} {path} failed: {exc}") from exc

    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ApiError(f"{method} {path} returned invalid JSON") from exc


def fetch_records_by_date(session: Session, day: date, cfg: ApiConfig, email: str | None = None) -> list[VisitRecord]:
    """Fetch one user's check-ins for a calendar date.

    Args:
        session: Caller's credentials.
        day: Calendar date.
        cfg: API configuration.
        email: Whose records to fetch; defaults to the session user.

    Returns:
        Decoded records. Malformed rows are skipped (and logged).

    Raises:
        ApiError: On network failure, HTTP error or an undecodable body.
    """

    params = {"startDate": day.isoformat(), "endDate": day.isoformat()}
    who = email or session.email
    if who:
        params["email"] = who
    payload = _request_json("GET", "/api/attendance/filtered", session, cfg, params=params)
    try:
        records, _ = records_from_payload(payload if payload is not None else [])
    except RecordError as exc:
        raise ApiError(f"unexpected response shape: {exc}") from exc
    return records


def save_total_distance(session: Session, payload: dict[str, Any], cfg: ApiConfig) -> Any:
    """Send {date, totalDistanceKm, segments} to the backend."""

    return _request_json("POST", "/api/attendance/save-total-distance", session, cfg, body=payload)

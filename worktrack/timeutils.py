"""Time parsing and formatting utilities."""

from __future__ import annotations

from datetime import UTC, date, datetime, timezone

from zoneinfo import ZoneInfo


def tzinfo_from_name(tz_name: str) -> timezone:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Asia/Kolkata".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"Invalid timezone: {tz_name!r}. Example: Asia/Kolkata") from exc


def dt_from_epoch_ms(epoch_ms: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""

    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=UTC)


def parse_timestamp(text: str) -> datetime:
    """Parse a backend ISO-8601 timestamp into an aware UTC datetime.

    The backend serializes instants like "2024-03-05T03:30:00.000Z". A string
    without an offset is taken as UTC, since storage is absolute.

    Raises:
        ValueError: If the text is not an ISO-8601 datetime.
    """

    s = text.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Cannot parse timestamp: {text!r}. Expected e.g. 2024-03-05T09:30:00Z") from exc

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the display timezone."""

    return dt.astimezone(tzinfo_from_name(tz_name)).date()


def format_clock(dt: datetime, tz_name: str) -> str:
    """Render a wall-clock time like "9:05:00 AM" in the display timezone."""

    local = dt.astimezone(tzinfo_from_name(tz_name))
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d}:{local.second:02d} {suffix}"


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored and clamped at zero."""

    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)

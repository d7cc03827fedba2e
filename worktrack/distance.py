"""Parsing of backend distance strings ("350 m", "1.2 km") into meters."""

from __future__ import annotations

import logging
import math
import re
from typing import Final

logger = logging.getLogger(__name__)

# Leading numeric portion, the way the browser's parseFloat reads it.
_LEADING_NUMBER: Final = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

_PLACEHOLDERS: Final[frozenset[str]] = frozenset({"", "n/a", "na", "null", "undefined", "none", "nan"})


def _split_number(text: str) -> tuple[float, str] | None:
    """Leading number and the lowercased unit text after it."""

    m = _LEADING_NUMBER.match(text)
    if m is None:
        return None
    return float(m.group(0)), text[m.end() :].strip().lower()


def parse_distance_m(value: object) -> float:
    """Convert a distance value into meters.

    Accepted shapes:
      - "1.2 km" / "1.2km"  -> 1200.0
      - "350 m"             -> 350.0
      - "42" (no unit)      -> 42.0
      - int / float         -> treated as meters
      - None, "", "N/A", "null", "undefined" -> 0.0
      - any other unit ("5 ft")             -> 0.0

    Anything that cannot be read as a non-negative finite number becomes 0.0.
    This function never raises.

    Args:
        value: Raw distance value from the backend.

    Returns:
        Distance in meters.
    """

    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        meters = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.lower() in _PLACEHOLDERS:
            return 0.0
        parts = _split_number(text)
        if parts is None:
            logger.debug("distance %r is not numeric, using 0", value)
            return 0.0
        number, unit = parts
        if "km" in unit:
            meters = number * 1000.0
        elif not unit or "m" in unit:
            meters = number
        else:
            logger.debug("distance %r has unknown unit, using 0", value)
            return 0.0
    else:
        logger.debug("distance of type %s ignored, using 0", type(value).__name__)
        return 0.0

    if not math.isfinite(meters) or meters < 0:
        return 0.0
    return meters


def meters_to_km(meters: float) -> float:
    return meters / 1000.0

"""Clock and timezone helpers shared by pricing and booking rules."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

import pytz

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_OFFSET_RE = re.compile(r"^UTC([+-])(\d{2}):(\d{2})$")


def utcnow() -> datetime:
    """Timezone-aware current UTC time. The default clock."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    Naive values are read as UTC; SQLite hands them back that way.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timezone(timezone_str: str):
    """
    Parse a timezone string which can be either:
    - A standard IANA timezone name (e.g., 'America/Lima')
    - An offset-based string (e.g., 'UTC-05:00')

    Returns a pytz timezone object
    """
    try:
        return pytz.timezone(timezone_str)
    except pytz.exceptions.UnknownTimeZoneError:
        pass

    match = _OFFSET_RE.match(timezone_str or "")
    if match:
        sign, hours, minutes = match.groups()
        total_offset = int(hours) * 60 + int(minutes)
        if sign == "-":
            total_offset = -total_offset
        return pytz.FixedOffset(total_offset)

    logger.warning("Could not parse timezone %r, using UTC", timezone_str)
    return pytz.UTC

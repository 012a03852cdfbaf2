# studyplan/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_AMPM_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def hhmm_to_minutes(s: str) -> int:
    """Minutes since midnight for "HH:MM"; "24:00" is accepted as end of day."""
    if s.strip() == "24:00":
        return MINUTES_PER_DAY
    hh, mm = parse_hhmm(s)
    return hh * 60 + mm


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_minutes(minutes: int) -> str:
    """540 -> "9:00 AM", 0 -> "12:00 AM"."""
    hours = int(minutes) // 60
    mins = int(minutes) % 60
    ampm = "PM" if hours % 24 >= 12 else "AM"
    display = hours % 12 or 12
    return f"{display}:{mins:02d} {ampm}"


def parse_time_to_minutes(s: str) -> int:
    """Inverse of format_minutes: "9:00 AM" -> 540, "12:30 AM" -> 30."""
    m = _AMPM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid time (expected 'H:MM AM/PM'): {s!r}")
    hour = int(m.group(1))
    minute = int(m.group(2))
    if not (1 <= hour <= 12 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time (expected 'H:MM AM/PM'): {s!r}")
    ampm = m.group(3).upper()
    if ampm == "PM" and hour < 12:
        hour += 12
    elif ampm == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute


def parse_day(s: str) -> dt.date:
    """Strict calendar-day parse (YYYY-MM-DD)."""
    return dt.datetime.strptime(str(s).strip(), "%Y-%m-%d").date()


def try_parse_day(s: object) -> Optional[dt.date]:
    if not isinstance(s, str):
        return None
    try:
        return parse_day(s)
    except ValueError:
        return None


def parse_due_date(s: object) -> Optional[dt.datetime]:
    """Parse a task due date into a naive UTC datetime.

    Accepts a bare date ("2025-03-01", midnight) or an ISO datetime with or
    without offset ("2025-03-01T23:59:00Z"). Aware values are converted to
    UTC so the calendar day matches the ISO string the due date came from.
    Returns None when the value cannot be parsed.
    """
    if not isinstance(s, str):
        return None
    raw = s.strip()
    if not raw:
        return None
    try:
        d = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if d.tzinfo is not None:
        d = d.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return d

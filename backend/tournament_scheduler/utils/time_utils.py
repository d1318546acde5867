"""
Canonical "HH:MM" time handling for schedule validation.

All scheduling math is done in integer minutes since midnight. Malformed
strings raise ParseError instead of silently defaulting to 00:00.
"""
import re
from typing import List

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60


class ParseError(ValueError):
    """Time string is not of the form HH:MM"""
    pass


def to_minutes(value: str) -> int:
    """
    Convert an "HH:MM" string to minutes since midnight.

    - "09:30" -> 570
    - "9:30"  -> 570
    - "24:00", "9.30", "", None -> ParseError
    """
    if not isinstance(value, str):
        raise ParseError(f"Expected HH:MM string, got {value!r}")
    m = _TIME_RE.match(value.strip())
    if not m:
        raise ParseError(f"Invalid time {value!r}: expected HH:MM")
    hours = int(m.group(1))
    minutes = int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ParseError(f"Invalid time {value!r}: out of range")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Check if [start_a, end_a) overlaps [start_b, end_b). Touching spans do not overlap."""
    return start_a < end_b and start_b < end_a


def build_time_slots(start: str = "08:00", end: str = "22:00", interval_minutes: int = 30) -> List[str]:
    """Slot labels in [start, end) every interval_minutes (timeline/grid rows)."""
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    return [minutes_to_time(m) for m in range(start_min, end_min, interval_minutes)]

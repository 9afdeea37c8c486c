"""
Daily activation window around an intersection's schedule time.

The window is a fixed band of +/- window_minutes around today's occurrence of
the schedule time, evaluated on local wall-clock. It does not wrap across
midnight: a schedule at 00:10 is active from 00:00 to 00:40 only, the
23:40-23:59 part of its band is never reached.
"""
import re
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional, Tuple

WINDOW_MINUTES = 30
UNSET_WINDOW = "--:--:-- ~ --:--:--"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

class GateEdge(Enum):
    NONE = "none"
    OPENED = "opened"
    CLOSED = "closed"

def _lenient_int(part: str) -> int:
    match = _LEADING_INT.match(part)
    return int(match.group(1)) if match else 0

def parse_schedule_time(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """
    Splits "HH:MM[:SS]" into (hours, minutes, seconds).
    Unparseable or missing parts count as 0. Returns None when unset.
    """
    if not value or not value.strip():
        return None
    parts = [_lenient_int(p) for p in value.split(":")]
    parts += [0] * (3 - len(parts))
    return parts[0], parts[1], parts[2]

def target_for(schedule_time: Optional[str], now: datetime) -> Optional[datetime]:
    """
    Today's occurrence of the schedule time. Out of range parts overflow
    into the next unit instead of failing (e.g. 00:90:00 is 01:30:00).
    Values past the representable calendar count as unset.
    """
    try:
        parsed = parse_schedule_time(schedule_time)
        if parsed is None:
            return None
        hours, minutes, seconds = parsed
        midnight = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
        return midnight + timedelta(hours=hours, minutes=minutes, seconds=seconds)
    except (OverflowError, ValueError):
        return None

def window_bounds(schedule_time: Optional[str], now: datetime, window_minutes: int = WINDOW_MINUTES) -> Optional[Tuple[datetime, datetime]]:
    target = target_for(schedule_time, now)
    if target is None:
        return None
    band = timedelta(minutes=window_minutes)
    try:
        return target - band, target + band
    except OverflowError:
        return None

def is_within_window(schedule_time: Optional[str], now: datetime, window_minutes: int = WINDOW_MINUTES) -> bool:
    bounds = window_bounds(schedule_time, now, window_minutes)
    if bounds is None:
        return False
    start, end = bounds
    return start <= now <= end

def format_window(schedule_time: Optional[str], now: Optional[datetime] = None, window_minutes: int = WINDOW_MINUTES) -> str:
    """Operating range as "HH:MM:SS~HH:MM:SS"."""
    bounds = window_bounds(schedule_time, now or datetime.now(), window_minutes)
    if bounds is None:
        return UNSET_WINDOW
    start, end = bounds
    return f"{start:%H:%M:%S}~{end:%H:%M:%S}"

class ScheduleGate:
    """
    Remembers the last evaluation so callers only react to edges:
    Standby->Active on a closed->open edge and Active->Standby on open->closed.
    """

    def __init__(self, window_minutes: int = WINDOW_MINUTES):
        self.window_minutes = window_minutes
        self.is_open = False

    def evaluate(self, schedule_time: Optional[str], now: datetime) -> GateEdge:
        within = is_within_window(schedule_time, now, self.window_minutes)
        if within and not self.is_open:
            self.is_open = True
            return GateEdge.OPENED
        if not within and self.is_open:
            self.is_open = False
            return GateEdge.CLOSED
        return GateEdge.NONE

    def reset(self):
        self.is_open = False

"""Time-of-day windows for experiment logging.

An interval is either one of the named presets or an explicit
``HH:MM``-``HH:MM`` pair.  When the end is earlier than the start the
window wraps past midnight.  All comparisons are done in minutes since
midnight and are inclusive at both ends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Iterable, Union

from selftrack.errors import IntervalError

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class TimeInterval:
    """A daily clock-time window.

    An interval with an empty start or end places no restriction.
    """

    start: str
    end: str
    label: str | None = None

    @property
    def is_open(self) -> bool:
        return not self.start or not self.end

    @property
    def start_minute(self) -> int:
        return _to_minute(self.start)

    @property
    def end_minute(self) -> int:
        return _to_minute(self.end)

    @property
    def wraps_midnight(self) -> bool:
        return not self.is_open and self.end_minute < self.start_minute

    def contains(self, minute: int) -> bool:
        """Whether a minute-of-day falls inside this window."""
        if self.is_open:
            return True
        start, end = self.start_minute, self.end_minute
        if self.wraps_midnight:
            return minute >= start or minute <= end
        return start <= minute <= end

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "label": self.label}


PRESET_INTERVALS = {
    "Morning": TimeInterval("05:00", "12:00", "Morning"),
    "Afternoon": TimeInterval("12:00", "17:00", "Afternoon"),
    "Evening": TimeInterval("17:00", "22:00", "Evening"),
    "Night": TimeInterval("22:00", "05:00", "Night"),
}

IntervalLike = Union[TimeInterval, str, dict]


def _to_minute(hhmm: str) -> int:
    match = _HHMM_RE.match(hhmm.strip())
    if not match:
        raise IntervalError(f"invalid time {hhmm!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise IntervalError(f"time out of range: {hhmm!r}")
    return hours * 60 + minutes


def minute_of_day(now: datetime | time) -> int:
    """Minutes since midnight, dropping seconds."""
    return now.hour * 60 + now.minute


def parse_interval(entry: IntervalLike) -> TimeInterval:
    """Build a TimeInterval from a preset name, a dict, or an interval.

    Dicts carry ``start``/``end`` and an optional ``label``; a dict with
    only a preset label resolves to that preset.  A bare ``HH:MM`` string
    gives an open interval labelled with that time.

    Raises:
        IntervalError: For unknown preset names or malformed times.
    """
    if isinstance(entry, TimeInterval):
        interval = entry
    elif isinstance(entry, str):
        text = entry.strip()
        preset = PRESET_INTERVALS.get(text.title())
        if preset is not None:
            return preset
        if not _HHMM_RE.match(text):
            raise IntervalError(f"unknown interval preset: {entry!r}")
        # Older rows stored a bare reminder time; it places no restriction
        _to_minute(text)
        return TimeInterval(start="", end="", label=text)
    elif isinstance(entry, dict):
        start = entry.get("start") or ""
        end = entry.get("end") or ""
        label = entry.get("label") or None
        if not start and not end and label:
            return parse_interval(label)
        interval = TimeInterval(start=start, end=end, label=label)
    else:
        raise IntervalError(f"unsupported interval entry: {entry!r}")

    if not interval.is_open:
        _to_minute(interval.start)
        _to_minute(interval.end)
    return interval


def match_interval(
    intervals: Iterable[IntervalLike] | None,
    now: datetime | time,
) -> TimeInterval | None:
    """The first interval that contains ``now``, or None.

    Used to attribute a new log to the window it was entered in.
    """
    minute = minute_of_day(now)
    for entry in intervals or ():
        interval = parse_interval(entry)
        if interval.contains(minute):
            return interval
    return None


def is_now_in_intervals(
    intervals: Iterable[IntervalLike] | None,
    now: datetime | time,
) -> bool:
    """Whether ``now`` falls in any of the intervals.

    An empty or missing list means the experiment can be logged at any
    time.
    """
    intervals = list(intervals or ())
    if not intervals:
        return True
    return match_interval(intervals, now) is not None

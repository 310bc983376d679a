"""Turn raw log records into numeric series and join them by date.

Sources share no key other than the calendar date, so alignment is an
exact string join on :func:`normalize_date_key`.  A date-only key never
matches a full timestamp for the same day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from selftrack.records import DateLike, LogRecord, parse_numeric

logger = logging.getLogger(__name__)

# Minimum points for a series to enter analysis, and minimum matched
# dates for a pair to be correlated
MIN_POINTS = 3


def normalize_date_key(value: DateLike) -> str:
    """Join key for a record's date.

    Strings pass through unchanged; date and datetime objects use their
    ISO form.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


@dataclass
class NumericSeries:
    """The numeric observations of one variable, in input order."""

    variable_key: str
    points: list[tuple[str, float]] = field(default_factory=list)  # (date_key, value)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def dates(self) -> list[str]:
        return [d for d, _ in self.points]

    @property
    def values(self) -> list[float]:
        return [v for _, v in self.points]


@dataclass(frozen=True)
class MatchedPair:
    """Two variables' values observed on the same date key."""

    date: str
    value_a: float
    value_b: float


def build_numeric_series(logs: Iterable[LogRecord], variable_key: str) -> NumericSeries:
    """Collect the parseable values logged for one variable.

    Non-numeric values are dropped silently.  Missing dates are not
    filled.
    """
    series = NumericSeries(variable_key=variable_key)
    for log in logs:
        if log.variable_key != variable_key:
            continue
        number = parse_numeric(log.value)
        if number is None:
            continue
        series.points.append((normalize_date_key(log.date), number))
    return series


def qualifies_for_analysis(series: NumericSeries, min_points: int = MIN_POINTS) -> bool:
    """Gate a series on size, non-zero content and variance.

    All three checks must pass: at least ``min_points`` points, at least
    one value other than zero, and not every value identical.
    """
    values = series.values
    if len(values) < min_points:
        logger.debug("%s excluded: %d points", series.variable_key, len(values))
        return False
    if all(v == 0 for v in values):
        logger.debug("%s excluded: all values zero", series.variable_key)
        return False
    if all(v == values[0] for v in values):
        logger.debug("%s excluded: no variance", series.variable_key)
        return False
    return True


def match_by_date(series_a: NumericSeries, series_b: NumericSeries) -> list[MatchedPair]:
    """Inner-join two series on exact date-key equality.

    For every point in A, the first point in B with the same key is used;
    later duplicates in B are ignored rather than averaged.  Points of A
    with no partner are dropped.  The result is sorted ascending by date
    key (stable, so duplicate A dates keep their input order).
    """
    first_in_b: dict[str, float] = {}
    for key, value in series_b.points:
        first_in_b.setdefault(key, value)

    matched = [
        MatchedPair(date=key, value_a=value, value_b=first_in_b[key])
        for key, value in series_a.points
        if key in first_in_b
    ]
    matched.sort(key=lambda p: p.date)
    return matched


def numeric_variables(logs: Iterable[LogRecord]) -> list[str]:
    """Sorted variable keys that have at least one numeric value."""
    keys = {log.variable_key for log in logs if parse_numeric(log.value) is not None}
    return sorted(keys)

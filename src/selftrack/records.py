"""Log records and the row normalization that feeds the engines.

Manual entries and wearable sync tables are fetched separately and use
different field names.  Everything downstream works on :class:`LogRecord`,
so callers flatten their result sets through :func:`merge_sources` (or
:meth:`LogRecord.from_row`) first.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from selftrack.errors import RecordError


class Source(str, Enum):
    """Where a log record came from."""

    MANUAL = "manual"
    OURA = "oura"
    WITHINGS = "withings"


DateLike = str | date | datetime

# Field aliases seen across the manual and wearable tables
VARIABLE_FIELDS = ("variable_key", "variable", "variable_id", "label", "metric")
DATE_FIELDS = ("date", "created_at", "logged_at")

# Plain decimal / scientific notation; no nan, inf or digit separators
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class LogRecord:
    """A single observation of one variable."""

    id: str
    variable_key: str
    date: DateLike  # date-only or full timestamp, kept as stored
    value: str | float | int
    notes: str | None = None
    source: Source = Source.MANUAL

    @property
    def numeric_value(self) -> float | None:
        return parse_numeric(self.value)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        source: Source | str | None = None,
    ) -> LogRecord:
        """Build a record from a raw data-store row.

        Args:
            row: Row dict with an id, a variable field (``variable``,
                ``variable_id``, ``label``, ...) and a date field
                (``date``, ``created_at``, ...).
            source: Source to stamp on the record.  Falls back to the
                row's own ``source`` field, then to manual.

        Raises:
            RecordError: If the row has no variable key or no date.
        """
        variable = _first_present(row, VARIABLE_FIELDS)
        if variable is None or variable == "":
            raise RecordError(f"row {row.get('id')!r} has no variable key")
        when = _first_present(row, DATE_FIELDS)
        if when is None or when == "":
            raise RecordError(f"row {row.get('id')!r} has no date")

        return cls(
            id=str(row.get("id", "")),
            variable_key=str(variable),
            date=when,
            value=row.get("value", ""),
            notes=row.get("notes") or None,
            source=parse_source(source if source is not None else row.get("source")),
        )


def _first_present(row: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def parse_source(value: Source | str | None) -> Source:
    """Coerce a source name; ``None`` means a manual entry."""
    if value is None:
        return Source.MANUAL
    if isinstance(value, Source):
        return value
    try:
        return Source(str(value).strip().lower())
    except ValueError:
        raise RecordError(f"unknown log source: {value!r}") from None


def parse_numeric(value: Any) -> float | None:
    """Parse a logged value as a finite number.

    Strings may carry surrounding whitespace.  ``NaN``, ``Infinity`` and
    anything that is not a plain decimal number yield None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.match(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def calendar_day(value: DateLike) -> date | None:
    """Truncate a stored date or timestamp to its calendar day.

    Returns None when the value does not start with an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def merge_sources(
    rows_by_source: Mapping[Source | str, Iterable[Mapping[str, Any]]],
) -> list[LogRecord]:
    """Flatten separately fetched result sets into one record list.

    Args:
        rows_by_source: Mapping of source name to its rows, e.g.
            ``{"manual": manual_rows, "oura": oura_rows}``.

    Returns:
        Records in source order, then row order.
    """
    records: list[LogRecord] = []
    for source, rows in rows_by_source.items():
        src = parse_source(source)
        records.extend(LogRecord.from_row(row, source=src) for row in rows)
    return records

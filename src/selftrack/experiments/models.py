"""Self-experiment definitions.

An experiment asks the user to log ``variable`` (and optionally a
``dependent_variable``) ``frequency_per_day`` times a day between
``start_date`` and ``end_date``, optionally only inside certain time
windows.  Whether it is active or completed is derived from the dates,
never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping

from selftrack.errors import ExperimentError, IntervalError
from selftrack.experiments.intervals import TimeInterval, parse_interval


@dataclass(frozen=True)
class Experiment:
    """A user-defined "does X affect Y?" tracking plan."""

    id: str
    variable: str
    start_date: date
    end_date: date
    frequency_per_day: int = 1
    dependent_variable: str | None = None
    time_intervals: tuple[TimeInterval, ...] = field(default_factory=tuple)
    sort_order: int = 0
    description: str | None = None

    def __post_init__(self) -> None:
        if self.frequency_per_day < 1:
            raise ExperimentError(
                f"experiment {self.id!r}: frequency must be at least 1, "
                f"got {self.frequency_per_day}"
            )
        if self.end_date < self.start_date:
            raise ExperimentError(
                f"experiment {self.id!r}: end date {self.end_date} "
                f"is before start date {self.start_date}"
            )

    @property
    def total_days(self) -> int:
        """Inclusive length of the experiment in days."""
        return (self.end_date - self.start_date).days + 1

    @property
    def tracked_variables(self) -> list[str]:
        if self.dependent_variable:
            return [self.variable, self.dependent_variable]
        return [self.variable]

    def is_active_on(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def is_completed_on(self, day: date) -> bool:
        return day > self.end_date

    def duplicate(
        self,
        today: date,
        new_id: str,
        sort_order: int | None = None,
    ) -> Experiment:
        """Copy this experiment to start today with the same duration."""
        return replace(
            self,
            id=new_id,
            start_date=today,
            end_date=today + timedelta(days=self.total_days - 1),
            sort_order=self.sort_order if sort_order is None else sort_order,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Experiment:
        """Build an experiment from a data-store row.

        Accepts ``frequency`` for the per-day quota and ``effect`` as an
        older name for the dependent variable.  Dates may be ISO strings
        or timestamps (only the date part is used).

        Raises:
            ExperimentError: For missing fields, bad dates or intervals.
        """
        variable = row.get("variable")
        if not variable:
            raise ExperimentError(f"experiment {row.get('id')!r} has no variable")
        try:
            intervals = tuple(parse_interval(e) for e in row.get("time_intervals") or ())
        except IntervalError as exc:
            raise ExperimentError(f"experiment {row.get('id')!r}: {exc}") from exc

        frequency = row.get("frequency_per_day", row.get("frequency"))
        try:
            frequency = int(frequency) if frequency else 1
        except (TypeError, ValueError):
            raise ExperimentError(
                f"experiment {row.get('id')!r}: invalid frequency {frequency!r}"
            ) from None
        return cls(
            id=str(row.get("id", "")),
            variable=str(variable),
            start_date=_parse_day(row.get("start_date"), "start_date", row),
            end_date=_parse_day(row.get("end_date"), "end_date", row),
            frequency_per_day=frequency,
            dependent_variable=row.get("dependent_variable") or row.get("effect") or None,
            time_intervals=intervals,
            sort_order=int(row.get("sort_order") or 0),
            description=row.get("description") or None,
        )


def _parse_day(value: Any, name: str, row: Mapping[str, Any]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ExperimentError(
            f"experiment {row.get('id')!r}: invalid {name} {value!r}"
        ) from None


def partition_experiments(
    experiments: Iterable[Experiment],
    today: date,
) -> tuple[list[Experiment], list[Experiment]]:
    """Split experiments into (active, completed) buckets.

    Anything that has not ended yet, including experiments that start in
    the future, counts as active.  Both lists are ordered by sort_order.
    """
    active: list[Experiment] = []
    completed: list[Experiment] = []
    for exp in sorted(experiments, key=lambda e: e.sort_order):
        (completed if exp.is_completed_on(today) else active).append(exp)
    return active, completed

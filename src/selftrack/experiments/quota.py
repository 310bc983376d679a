"""Per-day logging quotas and progress for self-experiments.

:func:`evaluate_experiments` answers "does this experiment still need a
log from me right now?" for every experiment, in the caller's order.
Picking the one experiment that blocks free-form logging is a separate
step (:func:`select_blocking_experiment`) so callers that want to show
every pending experiment can skip it.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from selftrack.experiments.intervals import match_interval
from selftrack.experiments.models import Experiment
from selftrack.records import LogRecord, calendar_day


@dataclass
class QuotaState:
    """Today's logging status for one experiment."""

    experiment_id: str
    logs_logged_today: int
    needs_more_logs: bool
    in_time_interval: bool
    must_log_now: bool
    dependent_logs_today: int | None = None
    active_interval: str | None = None  # label or "HH:MM-HH:MM" of the matching window

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ExperimentProgress:
    """Completion statistics over an experiment's whole date range."""

    experiment_id: str
    total_days: int
    expected_logs_per_variable: int
    logged_count: int
    dependent_logged_count: int
    completion_rate: int  # percent
    dependent_completion_rate: int
    overall_completion_rate: int
    streak: int  # consecutive days with a log, counted back from today

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"ExperimentProgress({self.experiment_id}: "
            f"{self.completion_rate}% of {self.expected_logs_per_variable}, "
            f"streak={self.streak}d)"
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _count(logs: Iterable[LogRecord], variable: str) -> int:
    return sum(1 for log in logs if log.variable_key == variable)


# ---------------------------------------------------------------------------
# Quota evaluation
# ---------------------------------------------------------------------------


def evaluate_experiment(
    experiment: Experiment,
    todays_logs: Sequence[LogRecord],
    now: datetime,
) -> QuotaState:
    """Quota state of a single experiment.

    ``todays_logs`` is taken as already restricted to today; every record
    whose variable matches counts toward the quota.
    """
    independent = _count(todays_logs, experiment.variable)
    needs_more = independent < experiment.frequency_per_day

    dependent = None
    if experiment.dependent_variable:
        dependent = _count(todays_logs, experiment.dependent_variable)
        needs_more = needs_more or dependent < experiment.frequency_per_day

    if experiment.time_intervals:
        window = match_interval(experiment.time_intervals, now)
        in_interval = window is not None
        active = None
        if window is not None and not window.is_open:
            active = window.label or f"{window.start}-{window.end}"
    else:
        in_interval = True
        active = None

    return QuotaState(
        experiment_id=experiment.id,
        logs_logged_today=independent,
        needs_more_logs=needs_more,
        in_time_interval=in_interval,
        must_log_now=needs_more and in_interval,
        dependent_logs_today=dependent,
        active_interval=active,
    )


def evaluate_experiments(
    experiments: Sequence[Experiment],
    todays_logs: Sequence[LogRecord],
    now: datetime,
) -> list[QuotaState]:
    """Evaluate every experiment, one state each, in the given order.

    Args:
        experiments: Experiments in priority order (usually sort_order).
        todays_logs: Logs recorded today, from any source.
        now: Current local time; only hour and minute are used.
    """
    return [evaluate_experiment(exp, todays_logs, now) for exp in experiments]


def experiments_needing_logs(
    experiments: Sequence[Experiment],
    logs: Sequence[LogRecord],
    now: datetime,
) -> list[Experiment]:
    """Experiments running today that must be logged right now.

    Unlike :func:`evaluate_experiments` this filters for the caller: logs
    are restricted to ``now``'s calendar day and experiments outside
    their date range are dropped.
    """
    today = now.date()
    todays = [log for log in logs if calendar_day(log.date) == today]
    running = [exp for exp in experiments if exp.is_active_on(today)]
    states = evaluate_experiments(running, todays, now)
    return [exp for exp, state in zip(running, states) if state.must_log_now]


def select_blocking_experiment(states: Sequence[QuotaState]) -> QuotaState | None:
    """The first experiment that must be logged now, if any.

    The UI holds free-form logging until this one is satisfied.
    """
    return next((state for state in states if state.must_log_now), None)


# ---------------------------------------------------------------------------
# Progress statistics
# ---------------------------------------------------------------------------


def logging_streak(logs: Iterable[LogRecord], variable: str, today: date) -> int:
    """Consecutive days, ending today, with at least one log of ``variable``.

    The count stops at the first day without a log; gaps are not skipped.
    """
    days = {
        calendar_day(log.date)
        for log in logs
        if log.variable_key == variable
    }
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def experiment_progress(
    experiment: Experiment,
    logs: Sequence[LogRecord],
    today: date,
) -> ExperimentProgress:
    """Completion rates and streak for one experiment.

    Only logs dated inside the experiment's range count toward the
    completion rates.  Rates are percentages rounded half up.
    """
    in_range = []
    for log in logs:
        day = calendar_day(log.date)
        if day is not None and experiment.is_active_on(day):
            in_range.append(log)
    expected = experiment.total_days * experiment.frequency_per_day
    logged = _count(in_range, experiment.variable)
    completion = _round_half_up(logged / expected * 100)

    if experiment.dependent_variable:
        dep_logged = _count(in_range, experiment.dependent_variable)
        dep_completion = _round_half_up(dep_logged / expected * 100)
        overall = _round_half_up((logged + dep_logged) / (expected * 2) * 100)
    else:
        dep_logged = 0
        dep_completion = 100
        overall = completion

    return ExperimentProgress(
        experiment_id=experiment.id,
        total_days=experiment.total_days,
        expected_logs_per_variable=expected,
        logged_count=logged,
        dependent_logged_count=dep_logged,
        completion_rate=completion,
        dependent_completion_rate=dep_completion,
        overall_completion_rate=overall,
        streak=logging_streak(logs, experiment.variable, today),
    )

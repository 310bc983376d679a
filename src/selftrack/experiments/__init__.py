"""Self-experiment tracking.

Modules:
    intervals -- Time-of-day windows (presets and explicit HH:MM ranges)
    models    -- Experiment definitions and active/completed bucketing
    quota     -- Daily quota evaluation, blocking selection, progress stats
"""

from selftrack.experiments.intervals import (
    is_now_in_intervals,
    match_interval,
    parse_interval,
    TimeInterval,
    PRESET_INTERVALS,
)
from selftrack.experiments.models import Experiment, partition_experiments
from selftrack.experiments.quota import (
    evaluate_experiment,
    evaluate_experiments,
    experiments_needing_logs,
    select_blocking_experiment,
    experiment_progress,
    logging_streak,
    QuotaState,
    ExperimentProgress,
)

__all__ = [
    # intervals
    "is_now_in_intervals",
    "match_interval",
    "parse_interval",
    "TimeInterval",
    "PRESET_INTERVALS",
    # models
    "Experiment",
    "partition_experiments",
    # quota
    "evaluate_experiment",
    "evaluate_experiments",
    "experiments_needing_logs",
    "select_blocking_experiment",
    "experiment_progress",
    "logging_streak",
    "QuotaState",
    "ExperimentProgress",
]

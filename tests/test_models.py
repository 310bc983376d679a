"""Tests for selftrack.experiments.models -- experiment definitions."""

from datetime import date, datetime

import pytest

from selftrack.errors import ExperimentError
from selftrack.experiments.intervals import PRESET_INTERVALS, TimeInterval
from selftrack.experiments.models import Experiment, partition_experiments
from tests.conftest import make_experiment


class TestExperiment:
    def test_total_days_inclusive(self):
        exp = make_experiment(start=date(2024, 1, 1), end=date(2024, 1, 10))
        assert exp.total_days == 10

    def test_single_day(self):
        exp = make_experiment(start=date(2024, 1, 1), end=date(2024, 1, 1))
        assert exp.total_days == 1

    def test_zero_frequency_rejected(self):
        with pytest.raises(ExperimentError):
            make_experiment(frequency=0)

    def test_end_before_start_rejected(self):
        with pytest.raises(ExperimentError):
            make_experiment(start=date(2024, 2, 1), end=date(2024, 1, 1))

    def test_active_and_completed(self):
        exp = make_experiment(start=date(2024, 1, 10), end=date(2024, 1, 20))
        assert not exp.is_active_on(date(2024, 1, 9))
        assert exp.is_active_on(date(2024, 1, 10))
        assert exp.is_active_on(date(2024, 1, 20))
        assert not exp.is_completed_on(date(2024, 1, 20))
        assert exp.is_completed_on(date(2024, 1, 21))

    def test_tracked_variables(self):
        assert make_experiment("Coffee").tracked_variables == ["Coffee"]
        assert make_experiment("Coffee", dependent="Sleep").tracked_variables == ["Coffee", "Sleep"]

    def test_duplicate_keeps_duration(self):
        exp = make_experiment(start=date(2024, 1, 1), end=date(2024, 1, 14), sort_order=2)
        copy = exp.duplicate(date(2024, 3, 5), new_id="copy")
        assert copy.id == "copy"
        assert copy.start_date == date(2024, 3, 5)
        assert copy.end_date == date(2024, 3, 18)
        assert copy.total_days == exp.total_days
        assert copy.variable == exp.variable
        assert copy.sort_order == 2

    def test_duplicate_new_sort_order(self):
        copy = make_experiment().duplicate(date(2024, 3, 5), new_id="copy", sort_order=9)
        assert copy.sort_order == 9


class TestFromRow:
    def test_full_row(self):
        exp = Experiment.from_row({
            "id": 3,
            "variable": "Caffeine",
            "effect": "Sleep Score",
            "start_date": "2024-01-01",
            "end_date": "2024-01-31T00:00:00Z",
            "frequency": 2,
            "time_intervals": ["Morning", {"start": "18:00", "end": "20:00", "label": "Dinner"}],
            "sort_order": 4,
            "description": "Does afternoon coffee hurt sleep?",
        })
        assert exp.id == "3"
        assert exp.dependent_variable == "Sleep Score"
        assert exp.end_date == date(2024, 1, 31)
        assert exp.frequency_per_day == 2
        assert exp.time_intervals == (
            PRESET_INTERVALS["Morning"],
            TimeInterval("18:00", "20:00", "Dinner"),
        )
        assert exp.sort_order == 4

    def test_defaults(self):
        exp = Experiment.from_row({
            "id": "x", "variable": "Water",
            "start_date": date(2024, 1, 1), "end_date": datetime(2024, 1, 2, 12, 0),
        })
        assert exp.frequency_per_day == 1
        assert exp.dependent_variable is None
        assert exp.time_intervals == ()
        assert exp.end_date == date(2024, 1, 2)

    def test_dependent_variable_preferred_over_effect(self):
        exp = Experiment.from_row({
            "id": "x", "variable": "Water", "dependent_variable": "Energy", "effect": "Mood",
            "start_date": "2024-01-01", "end_date": "2024-01-02",
        })
        assert exp.dependent_variable == "Energy"

    def test_missing_variable(self):
        with pytest.raises(ExperimentError):
            Experiment.from_row({"id": "x", "start_date": "2024-01-01", "end_date": "2024-01-02"})

    def test_bad_date(self):
        with pytest.raises(ExperimentError):
            Experiment.from_row({"id": "x", "variable": "Water", "start_date": "soon",
                                 "end_date": "2024-01-02"})

    @pytest.mark.parametrize("frequency", ["2.5", "twice", [2]])
    def test_bad_frequency(self, frequency):
        with pytest.raises(ExperimentError):
            Experiment.from_row({"id": "x", "variable": "Water", "start_date": "2024-01-01",
                                 "end_date": "2024-01-02", "frequency": frequency})

    def test_numeric_string_frequency(self):
        exp = Experiment.from_row({"id": "x", "variable": "Water", "start_date": "2024-01-01",
                                   "end_date": "2024-01-02", "frequency": "3"})
        assert exp.frequency_per_day == 3

    def test_bad_interval(self):
        with pytest.raises(ExperimentError):
            Experiment.from_row({"id": "x", "variable": "Water", "start_date": "2024-01-01",
                                 "end_date": "2024-01-02", "time_intervals": ["Brunch"]})


class TestPartition:
    def test_buckets_by_end_date(self):
        past = make_experiment("A", end=date(2024, 1, 9), exp_id="past", sort_order=1)
        current = make_experiment("B", exp_id="current", sort_order=2)
        future = make_experiment("C", start=date(2024, 2, 1), end=date(2024, 2, 5),
                                 exp_id="future", sort_order=0)
        active, completed = partition_experiments([past, current, future], date(2024, 1, 10))
        assert [e.id for e in active] == ["future", "current"]
        assert [e.id for e in completed] == ["past"]

    def test_ends_today_is_active(self):
        exp = make_experiment(end=date(2024, 1, 10))
        active, completed = partition_experiments([exp], date(2024, 1, 10))
        assert active == [exp]
        assert completed == []

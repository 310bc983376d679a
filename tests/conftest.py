"""Shared fixtures and helpers for the selftrack test suite."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from selftrack.experiments.models import Experiment
from selftrack.records import LogRecord, Source


# ---------------------------------------------------------------------------
# Record-building helpers
# ---------------------------------------------------------------------------


def make_log(
    variable: str,
    day: str,
    value="1",
    source: Source = Source.MANUAL,
    log_id: str | None = None,
) -> LogRecord:
    """Build a single LogRecord."""
    return LogRecord(
        id=log_id or f"{variable}-{day}",
        variable_key=variable,
        date=day,
        value=value,
        source=source,
    )


def make_series(variable: str, values: list, start_day: int = 1) -> list[LogRecord]:
    """One log per day in January 2024, starting at ``start_day``."""
    return [
        make_log(variable, f"2024-01-{start_day + i:02d}", v)
        for i, v in enumerate(values)
    ]


def make_experiment(
    variable: str = "Water",
    frequency: int = 1,
    dependent: str | None = None,
    intervals=(),
    start: date = date(2024, 1, 1),
    end: date = date(2024, 1, 31),
    exp_id: str | None = None,
    sort_order: int = 0,
) -> Experiment:
    """Build an Experiment with sensible defaults."""
    return Experiment(
        id=exp_id or f"exp-{variable.lower()}",
        variable=variable,
        start_date=start,
        end_date=end,
        frequency_per_day=frequency,
        dependent_variable=dependent,
        time_intervals=tuple(intervals),
        sort_order=sort_order,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sleep_mood_logs() -> list[LogRecord]:
    """Three days of Sleep and Mood, strongly positively related."""
    return [
        make_log("Sleep", "2024-01-01", "7"),
        make_log("Mood", "2024-01-01", "8"),
        make_log("Sleep", "2024-01-02", "5"),
        make_log("Mood", "2024-01-02", "4"),
        make_log("Sleep", "2024-01-03", "9"),
        make_log("Mood", "2024-01-03", "9"),
    ]


def write_export(path: Path, payload) -> Path:
    """Write an export payload as JSON to the given path."""
    with open(path, "w") as f:
        json.dump(payload, f)
    return path


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    """A JSON export with manual and wearable logs plus two experiments."""
    payload = {
        "logs": [
            {"id": "1", "variable": "Sleep", "date": "2024-01-01", "value": "7"},
            {"id": "2", "variable": "Mood", "date": "2024-01-01", "value": "8"},
            {"id": "3", "variable": "Sleep", "date": "2024-01-02", "value": "5"},
            {"id": "4", "variable": "Mood", "date": "2024-01-02", "value": "4"},
            {"id": "5", "variable": "Sleep", "date": "2024-01-03", "value": "9"},
            {"id": "6", "variable": "Mood", "date": "2024-01-03", "value": "9"},
            {"id": "7", "variable": "Water", "date": "2024-01-03T08:15:00", "value": "1"},
        ],
        "sources": {
            "oura": [
                {"id": "o1", "variable_id": "Readiness", "date": "2024-01-01", "value": 80},
                {"id": "o2", "variable_id": "Readiness", "date": "2024-01-02", "value": 62},
                {"id": "o3", "variable_id": "Readiness", "date": "2024-01-03", "value": 85},
            ],
        },
        "experiments": [
            {
                "id": "e2", "variable": "Coffee", "start_date": "2024-01-01",
                "end_date": "2024-01-10", "frequency": 1, "sort_order": 1,
                "time_intervals": ["Evening"],
            },
            {
                "id": "e1", "variable": "Water", "start_date": "2024-01-01",
                "end_date": "2024-01-10", "frequency": 2, "sort_order": 0,
            },
        ],
    }
    return write_export(tmp_path / "export.json", payload)

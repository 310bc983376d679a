"""Load exported logs and experiments for offline analysis.

Two file shapes are understood:

* ``.json`` -- an object with ``logs`` (rows carrying their own
  ``source``), optional ``sources`` (``{"oura": [...], ...}`` fetched
  separately) and optional ``experiments``.
* ``.jsonl`` -- one log row per line.  Blank and invalid lines are
  skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from selftrack.errors import RecordError
from selftrack.experiments.models import Experiment
from selftrack.records import LogRecord, merge_sources

logger = logging.getLogger(__name__)


@dataclass
class Export:
    """Everything read from one export file."""

    logs: list[LogRecord] = field(default_factory=list)
    experiments: list[Experiment] = field(default_factory=list)


def _load_jsonl(path: Path) -> Export:
    export = Export()
    skipped = 0
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("%s:%d invalid JSON, skipping", path.name, line_num)
                skipped += 1
                continue
            export.logs.append(LogRecord.from_row(row))
    logger.info("Loaded %d logs from %s (%d lines skipped)", len(export.logs), path.name, skipped)
    return export


def _load_json(path: Path) -> Export:
    with open(path) as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise RecordError(f"{path.name}: invalid JSON ({exc})") from exc

    if isinstance(payload, list):
        payload = {"logs": payload}
    if not isinstance(payload, dict):
        raise RecordError(f"{path.name}: expected an object or a list of log rows")

    export = Export()
    export.logs.extend(LogRecord.from_row(row) for row in payload.get("logs") or [])
    export.logs.extend(merge_sources(payload.get("sources") or {}))
    export.experiments.extend(
        Experiment.from_row(row) for row in payload.get("experiments") or []
    )
    export.experiments.sort(key=lambda e: e.sort_order)
    logger.info(
        "Loaded %d logs and %d experiments from %s",
        len(export.logs), len(export.experiments), path.name,
    )
    return export


def load_export(export_path: str | Path) -> Export:
    """Read logs (and experiments) from an export file.

    Raises:
        FileNotFoundError: If the path does not exist.
        RecordError: If the file or one of its log rows is malformed.
        ExperimentError: If an experiment row is malformed.
    """
    path = Path(export_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {export_path}")
    if path.suffix == ".jsonl":
        return _load_jsonl(path)
    return _load_json(path)

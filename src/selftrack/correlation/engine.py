"""Pairwise correlation ranking across every logged variable.

:func:`compute_all_correlations` is the dashboard view: every qualifying
variable against every other, ranked by |r|.  :func:`compute_correlation_detail`
is the on-demand single-pair view used when a chart is opened.

Sparse data is expected, so neither function reports anything for
variables or pairs that fall short; they are simply absent.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from selftrack.correlation.alignment import (
    MIN_POINTS,
    MatchedPair,
    build_numeric_series,
    match_by_date,
    qualifies_for_analysis,
)
from selftrack.correlation.stats import (
    RegressionResult,
    StrengthLabel,
    classify_strength,
    correlation_p_value,
    fisher_confidence_interval,
    linear_regression,
    pearson_correlation,
)
from selftrack.records import LogRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation between two variables over their matched dates."""

    variable1: str
    variable2: str
    correlation_coefficient: float  # -1..1
    strength_label: StrengthLabel
    point_count: int
    regression_line: RegressionResult
    p_value: float | None = None
    confidence_95: tuple[float, float] | None = None
    matched: tuple[MatchedPair, ...] = ()

    @property
    def direction(self) -> str:
        return "positive" if self.correlation_coefficient >= 0 else "negative"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly, r rounded to 3 places)."""
        line = self.regression_line
        if line.is_degenerate:
            regression = None
        else:
            regression = {
                "slope": line.slope,
                "intercept": line.intercept,
                "points": [list(p) for p in line.points],
            }
        return {
            "variable1": self.variable1,
            "variable2": self.variable2,
            "correlation": round(self.correlation_coefficient, 3),
            "strength": self.strength_label.value,
            "direction": self.direction,
            "data_points": self.point_count,
            "p_value": self.p_value,
            "confidence_95": list(self.confidence_95) if self.confidence_95 else None,
            "regression": regression,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"CorrelationResult({self.variable1} ~ {self.variable2}: "
            f"r={self.correlation_coefficient:.3f}, "
            f"{self.strength_label.value}, n={self.point_count})"
        )


def _correlate(
    variable1: str,
    variable2: str,
    matched: list[MatchedPair],
) -> CorrelationResult:
    x = [p.value_a for p in matched]
    y = [p.value_b for p in matched]
    r = pearson_correlation(x, y)
    n = len(matched)
    return CorrelationResult(
        variable1=variable1,
        variable2=variable2,
        correlation_coefficient=r,
        strength_label=classify_strength(r),
        point_count=n,
        regression_line=linear_regression(x, y),
        p_value=correlation_p_value(r, n),
        confidence_95=fisher_confidence_interval(r, n),
        matched=tuple(matched),
    )


def compute_all_correlations(
    logs: Sequence[LogRecord],
    min_points: int = MIN_POINTS,
) -> list[CorrelationResult]:
    """Correlate every pair of qualifying variables and rank them.

    Args:
        logs: Records from all sources, already merged.
        min_points: Minimum points per series and matched dates per pair.

    Returns:
        One result per pair with enough matched dates, sorted by
        descending |r|.  Ties keep pair-generation order (variables are
        paired in sorted key order, i < j).
    """
    keys = sorted({log.variable_key for log in logs})
    qualifying = []
    for key in keys:
        series = build_numeric_series(logs, key)
        if qualifies_for_analysis(series, min_points):
            qualifying.append(series)

    results: list[CorrelationResult] = []
    for i, series_a in enumerate(qualifying):
        for series_b in qualifying[i + 1:]:
            matched = match_by_date(series_a, series_b)
            if len(matched) < min_points:
                logger.debug(
                    "Skipping %s ~ %s: %d matched dates",
                    series_a.variable_key, series_b.variable_key, len(matched),
                )
                continue
            results.append(_correlate(series_a.variable_key, series_b.variable_key, matched))

    results.sort(key=lambda r: abs(r.correlation_coefficient), reverse=True)
    logger.info(
        "Correlated %d pairs from %d qualifying of %d variables",
        len(results), len(qualifying), len(keys),
    )
    return results


def compute_correlation_detail(
    logs: Sequence[LogRecord],
    variable1: str,
    variable2: str,
    min_points: int = MIN_POINTS,
) -> CorrelationResult | None:
    """Recompute a single pair for chart rendering.

    Unlike :func:`compute_all_correlations` the series are not gated on
    variance; only the matched-date count matters.

    Returns:
        The result, or None when the variables are the same or fewer than
        ``min_points`` dates match.
    """
    if variable1 == variable2:
        return None
    matched = match_by_date(
        build_numeric_series(logs, variable1),
        build_numeric_series(logs, variable2),
    )
    if len(matched) < min_points:
        return None
    return _correlate(variable1, variable2, matched)


def interpret_correlation(result: CorrelationResult) -> str:
    """One-sentence plain-language reading of a result."""
    r = round(result.correlation_coefficient, 3)
    if result.strength_label is StrengthLabel.VERY_WEAK:
        return (
            f"No meaningful correlation found (r = {r}) "
            f"with {result.point_count} data points."
        )
    return (
        f"{result.strength_label.value} {result.direction} correlation "
        f"(r = {r}) found with {result.point_count} data points."
    )

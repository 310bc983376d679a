"""Correlation and regression statistics over paired numeric series.

Everything here works from the raw sums (n, Σx, Σy, Σxy, Σx², Σy²) so the
correlation coefficient and the regression line always agree with each
other.  Degenerate inputs resolve to fallback values instead of raising:
a zero-variance series correlates at 0, and a regression over a single
x value comes back as :class:`DegenerateRegression`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
from scipy import stats as sp_stats


class StrengthLabel(str, Enum):
    """Qualitative strength of a correlation coefficient."""

    VERY_WEAK = "Very Weak"
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"


# Lower bound (inclusive) on |r| for each band, strongest first
STRENGTH_BANDS = [
    (0.8, StrengthLabel.VERY_STRONG),
    (0.6, StrengthLabel.STRONG),
    (0.4, StrengthLabel.MODERATE),
    (0.2, StrengthLabel.WEAK),
]

# Two-sided 95% critical value of the standard normal
Z_95 = 1.96


@dataclass
class _Sums:
    n: int
    sx: float
    sy: float
    sxy: float
    sxx: float
    syy: float
    # Checked on the values; nΣx² − (Σx)² rarely cancels to exactly 0
    constant_x: bool
    constant_y: bool


def _sums(x: Sequence[float], y: Sequence[float]) -> _Sums:
    if len(x) != len(y):
        raise ValueError("x and y must have the same length")
    if len(x) == 0:
        raise ValueError("x and y must not be empty")
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    return _Sums(
        n=len(xa),
        sx=float(np.sum(xa)),
        sy=float(np.sum(ya)),
        sxy=float(np.sum(xa * ya)),
        sxx=float(np.sum(xa * xa)),
        syy=float(np.sum(ya * ya)),
        constant_x=bool(np.all(xa == xa[0])),
        constant_y=bool(np.all(ya == ya[0])),
    )


# ---------------------------------------------------------------------------
# Pearson correlation
# ---------------------------------------------------------------------------


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson's r from the sum formula.

    r = (nΣxy − ΣxΣy) / sqrt((nΣx² − (Σx)²)(nΣy² − (Σy)²))

    Returns 0.0 when either series has no variance.

    Raises:
        ValueError: If the series differ in length or are empty.
    """
    s = _sums(x, y)
    if s.constant_x or s.constant_y:
        return 0.0
    numerator = s.n * s.sxy - s.sx * s.sy
    var_x = s.n * s.sxx - s.sx * s.sx
    var_y = s.n * s.syy - s.sy * s.sy
    if var_x <= 0 or var_y <= 0:
        return 0.0
    denominator = math.sqrt(var_x * var_y)
    if denominator == 0:
        return 0.0
    # Float drift can push |r| a hair past 1
    return max(-1.0, min(1.0, numerator / denominator))


def classify_strength(r: float) -> StrengthLabel:
    """Map |r| onto the five strength bands (lower bounds inclusive)."""
    magnitude = abs(r)
    for lower, label in STRENGTH_BANDS:
        if magnitude >= lower:
            return label
    return StrengthLabel.VERY_WEAK


def correlation_p_value(r: float, n: int) -> float | None:
    """Two-sided p-value for H0: ρ = 0, via the t distribution.

    Returns None when n ≤ 2 (no degrees of freedom).
    """
    if n <= 2:
        return None
    if abs(r) >= 1.0:
        return 0.0
    df = n - 2
    t = r * math.sqrt(df / (1.0 - r * r))
    return float(2.0 * sp_stats.t.sf(abs(t), df))


def fisher_confidence_interval(
    r: float,
    n: int,
    z_critical: float = Z_95,
) -> tuple[float, float] | None:
    """Confidence interval for r using Fisher's z-transformation.

    Returns None when n < 4, since the standard error 1/sqrt(n − 3) is
    undefined.
    """
    if n < 4:
        return None
    # atanh(±1) is infinite; nudge inside the open interval
    clipped = max(-0.999999, min(0.999999, r))
    z = math.atanh(clipped)
    se = 1.0 / math.sqrt(n - 3)
    lower = math.tanh(z - z_critical * se)
    upper = math.tanh(z + z_critical * se)
    return (max(-1.0, lower), min(1.0, upper))


def lag_correlations(
    x: Sequence[float],
    y: Sequence[float],
    max_lag: int = 7,
) -> list[tuple[int, float]]:
    """Correlate x against y shifted forward by 0..max_lag steps.

    Pairs ``x[:n-lag]`` with ``y[lag:]``, so a positive lag asks whether
    x today tracks y later.  Lags leaving fewer than 3 pairs are skipped.

    Returns:
        List of ``(lag, r)`` tuples in increasing lag order.
    """
    if len(x) != len(y):
        raise ValueError("x and y must have the same length")
    results: list[tuple[int, float]] = []
    n = len(x)
    for lag in range(max_lag + 1):
        if n - lag < 3:
            break
        results.append((lag, pearson_correlation(x[: n - lag], y[lag:])))
    return results


# ---------------------------------------------------------------------------
# Linear regression
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegressionLine:
    """Least-squares line plus its two plotting endpoints."""

    slope: float
    intercept: float
    points: tuple[tuple[float, float], tuple[float, float]]  # at min(x), max(x)

    is_degenerate = False

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class DegenerateRegression:
    """Regression over a series whose x values are all identical.

    ``slope`` is nan when every x is identical.  It is ±inf only when the
    sums leave a non-positive denominator for x values that do differ.
    Charts should skip drawing a trend line.
    """

    slope: float
    x_value: float

    is_degenerate = True


RegressionResult = RegressionLine | DegenerateRegression


def linear_regression(x: Sequence[float], y: Sequence[float]) -> RegressionResult:
    """Ordinary least squares fit of y on x.

    Raises:
        ValueError: If the series differ in length or are empty.
    """
    s = _sums(x, y)
    numerator = s.n * s.sxy - s.sx * s.sy
    denominator = s.n * s.sxx - s.sx * s.sx

    if s.constant_x or denominator <= 0:
        if s.constant_x or numerator == 0:
            slope = math.nan
        elif numerator > 0:
            slope = math.inf
        else:
            slope = -math.inf
        return DegenerateRegression(slope=slope, x_value=float(x[0]))

    slope = numerator / denominator
    intercept = (s.sy - slope * s.sx) / s.n
    x_min = float(min(x))
    x_max = float(max(x))
    return RegressionLine(
        slope=slope,
        intercept=intercept,
        points=(
            (x_min, slope * x_min + intercept),
            (x_max, slope * x_max + intercept),
        ),
    )

"""Correlation analysis across heterogeneous log sources.

Modules:
    stats     -- Pearson r, OLS regression, strength bands, p-value, CI
    alignment -- Numeric series extraction and exact-date joins
    engine    -- All-pairs ranking and single-pair detail
"""

from selftrack.correlation.stats import (
    pearson_correlation,
    linear_regression,
    classify_strength,
    correlation_p_value,
    fisher_confidence_interval,
    lag_correlations,
    RegressionLine,
    DegenerateRegression,
    StrengthLabel,
)
from selftrack.correlation.alignment import (
    normalize_date_key,
    build_numeric_series,
    qualifies_for_analysis,
    match_by_date,
    numeric_variables,
    NumericSeries,
    MatchedPair,
)
from selftrack.correlation.engine import (
    compute_all_correlations,
    compute_correlation_detail,
    interpret_correlation,
    CorrelationResult,
)

__all__ = [
    # stats
    "pearson_correlation",
    "linear_regression",
    "classify_strength",
    "correlation_p_value",
    "fisher_confidence_interval",
    "lag_correlations",
    "RegressionLine",
    "DegenerateRegression",
    "StrengthLabel",
    # alignment
    "normalize_date_key",
    "build_numeric_series",
    "qualifies_for_analysis",
    "match_by_date",
    "numeric_variables",
    "NumericSeries",
    "MatchedPair",
    # engine
    "compute_all_correlations",
    "compute_correlation_detail",
    "interpret_correlation",
    "CorrelationResult",
]

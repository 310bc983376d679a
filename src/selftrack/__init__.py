"""selftrack -- correlation analysis and experiment quota tracking for
personal health logs.

Subpackages:
    correlation -- Pearson/regression statistics, date alignment, ranking
    experiments -- Experiment definitions, time intervals, quota evaluation
"""

__version__ = "0.1.0"

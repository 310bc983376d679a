"""Exceptions raised while normalizing caller-supplied rows.

The computation core never raises for sparse or degenerate data; these
errors only surface at the seams where raw dicts become typed records.
"""


class SelftrackError(ValueError):
    """Base class for all selftrack input errors."""


class RecordError(SelftrackError):
    """A log row could not be turned into a LogRecord."""


class ExperimentError(SelftrackError):
    """An experiment definition is malformed."""


class IntervalError(SelftrackError):
    """A time interval is not a known preset or valid HH:MM pair."""

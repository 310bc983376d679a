"""Memoization boundary for correlation results.

Re-rendering a dashboard should not redo the all-pairs computation when
nothing changed.  Entries are keyed by a digest of the log contents, so
two equal log lists share an entry no matter which objects hold them,
and any edit to a value produces a new key.  Callers still invalidate a
user's entries after they write logs, which frees the stale ones.
"""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from typing import Sequence

from selftrack.config import Settings
from selftrack.correlation.alignment import MIN_POINTS, normalize_date_key
from selftrack.correlation.engine import (
    CorrelationResult,
    compute_all_correlations,
    compute_correlation_detail,
)
from selftrack.records import LogRecord

logger = logging.getLogger(__name__)


def cache_key(user_id: str, logs: Sequence[LogRecord], *extra: str) -> str:
    """Content digest of a user's log set.

    Covers the variable set, the date range and every record's id,
    variable, date, value and source.  Record order does not matter.
    """
    variables = sorted({log.variable_key for log in logs})
    dates = sorted(normalize_date_key(log.date) for log in logs)
    date_range = f"{dates[0]}..{dates[-1]}" if dates else ""
    fingerprints = sorted(
        "\x1f".join((
            str(log.id),
            log.variable_key,
            normalize_date_key(log.date),
            str(log.value),
            log.source.value,
        ))
        for log in logs
    )

    h = hashlib.sha256()
    for part in (user_id, "\x1e".join(variables), date_range, *extra, *fingerprints):
        h.update(part.encode("utf-8"))
        h.update(b"\x00")
    return h.hexdigest()


class CorrelationCache:
    """Bounded LRU cache of correlation results per user.

    Results are frozen and each call gets its own list, so callers cannot
    alter what later hits return.
    """

    def __init__(self, maxsize: int = 128, min_points: int = MIN_POINTS) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self.min_points = min_points
        self._entries: OrderedDict[tuple[str, str], object] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> CorrelationCache:
        return cls(maxsize=settings.cache_size, min_points=settings.min_points)

    def __len__(self) -> int:
        return len(self._entries)

    def _get_or_compute(self, user_id: str, digest: str, compute):
        key = (user_id, digest)
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("Cache hit for user %s", user_id)
            return self._entries[key]

        self.misses += 1
        value = compute()
        self._entries[key] = value
        if len(self._entries) > self.maxsize:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry for user %s", evicted[0])
        return value

    def correlations(
        self,
        user_id: str,
        logs: Sequence[LogRecord],
    ) -> list[CorrelationResult]:
        """Cached :func:`compute_all_correlations`."""
        digest = cache_key(user_id, logs, "all", str(self.min_points))
        ranked = self._get_or_compute(
            user_id, digest,
            lambda: tuple(compute_all_correlations(logs, min_points=self.min_points)),
        )
        return list(ranked)

    def detail(
        self,
        user_id: str,
        logs: Sequence[LogRecord],
        variable1: str,
        variable2: str,
    ) -> CorrelationResult | None:
        """Cached :func:`compute_correlation_detail`."""
        digest = cache_key(
            user_id, logs, "detail", variable1, variable2, str(self.min_points),
        )
        return self._get_or_compute(
            user_id, digest,
            lambda: compute_correlation_detail(
                logs, variable1, variable2, min_points=self.min_points,
            ),
        )

    def invalidate(self, user_id: str) -> int:
        """Drop every entry for one user; returns how many were removed."""
        stale = [key for key in self._entries if key[0] == user_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Invalidated %d cache entries for user %s", len(stale), user_id)
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

"""
Memoized group series.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

__all__ = [
    "ResultCache",
    "measure_set_key",
]


def measure_set_key(measures: Iterable[str]) -> str:
    """Canonical key of a set of measures: sorted ids joined by comma."""
    return ",".join(sorted(measures))


def _focus_key(focus: str | None, dice: bool):
    # An undiced read of a dimension is a different series than its groups
    if focus is None or dice:
        return focus
    return (focus, False)


class ResultCache:
    """Series by focus dimension and measure set.

    Entries are valid only for the filter state they were computed under.
    The owner calls `invalidate_all()` on every filter change; there is no
    partial invalidation.

    Cached series are returned as they are stored, callers must not modify
    them.
    """

    def __init__(self):
        # focus dimension (None for no dimension) -> measure set key -> series
        self._datasets: dict[Any, dict[str, list]] = {}
        self.generation = 0
        self.hits = 0
        self.misses = 0

    def get(
        self, focus: str | None, measures: Iterable[str], dice: bool = True
    ) -> list | None:
        """Return the cached series or ``None``. Counts a hit or a miss."""
        series = self.peek(focus, measures, dice)
        if series is None:
            self.misses += 1
        else:
            self.hits += 1
        return series

    def peek(
        self, focus: str | None, measures: Iterable[str], dice: bool = True
    ) -> list | None:
        """Same as `get()` without counting a hit or a miss."""
        return self._datasets.get(_focus_key(focus, dice), {}).get(measure_set_key(measures))

    def contains(
        self, focus: str | None, measures: Iterable[str], dice: bool = True
    ) -> bool:
        return measure_set_key(measures) in self._datasets.get(_focus_key(focus, dice), {})

    def store(
        self,
        focus: str | None,
        measures: Iterable[str],
        series: list,
        generation: int | None = None,
        dice: bool = True,
    ) -> bool:
        """Store `series`. When `generation` is given and the cache was
        invalidated since, the series is stale and is not stored. Returns
        whether the series was stored."""
        if generation is not None and generation != self.generation:
            return False
        key = _focus_key(focus, dice)
        self._datasets.setdefault(key, {})[measure_set_key(measures)] = series
        return True

    def get_or_compute(
        self,
        focus: str | None,
        measures: Iterable[str],
        compute: Callable[[], list],
        dice: bool = True,
    ) -> list:
        """Return the cached series, computing and storing it on a miss.

        Exceptions raised by `compute` propagate and nothing is stored.
        """
        measures = list(measures)
        series = self.get(focus, measures, dice)
        if series is None:
            series = compute()
            self.store(focus, measures, series, dice=dice)
        return series

    def invalidate_all(self) -> None:
        """Drop every cached series."""
        self._datasets.clear()
        self.generation += 1

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._datasets.values())

    def stats(self) -> dict[str, Any]:
        return {
            "series": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "generation": self.generation,
        }

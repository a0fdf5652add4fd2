"""
Adapters presenting a remote cube through a crossfilter-like interface.

An adapter owns the filter state and the result cache of one metadata
document. Reads go through the cache; on a miss a query plan is built from
the current filters, replayed on the engine and its rows are normalized and
cached. Every filter change invalidates the whole cache before the mutating
call returns.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from cubefilter.common import IgnoringDictionary
from cubefilter.config import AdapterSettings
from cubefilter.errors import ArgumentError
from cubefilter.logging import get_logger
from cubefilter.metadata import CubeMetadata, read_metadata, validate_metadata

from .builder import QueryBuilder, QueryPlan
from .cache import ResultCache, measure_set_key
from .dimension import Dimension, GroupAll
from .engine import AsyncQueryEngine
from .filters import FilterStore
from .results import Record, normalize_rows

__all__ = [
    "BaseCrossfilterServer",
    "CrossfilterServer",
    "AsyncCrossfilterServer",
]


def _top_records(records: list[Record], k: int) -> list[Record]:
    """Return `k` records with the largest value. Records with equal values
    keep their key order, records without a value come last."""
    if k < 0:
        raise ArgumentError("Number of top records can not be negative")

    def value(record: Record):
        return (1, record.value) if record.value is not None else (0, 0)

    return sorted(records, key=value, reverse=True)[:k]


class BaseCrossfilterServer(ABC):
    """Bookkeeping shared by the synchronous and asynchronous adapters:
    metadata validation, filter state, result cache and the dimension
    facade."""

    asynchronous = False

    def __init__(self, metadata: CubeMetadata | dict[str, Any], settings: AdapterSettings | None = None):
        """Creates the adapter for `metadata`. Raises `MalformedMetadata`
        if the document is not valid, in which case no adapter is
        created."""
        self.metadata = validate_metadata(metadata).unwrap()
        self.api = self.metadata.api
        self.settings = settings or AdapterSettings()

        self.filters = FilterStore(self.metadata)
        self.cache = ResultCache()
        self.builder = QueryBuilder(self.metadata, self.filters)
        self.logger = get_logger()

    @classmethod
    def from_file(cls, path: str | Path, api, settings: AdapterSettings | None = None):
        """Create an adapter from a JSON metadata file and an engine."""
        document = read_metadata(path)
        document["api"] = api
        return cls(document, settings=settings)

    def features(self) -> dict[str, Any]:
        """Capabilities of the adapter.

        Aggregation is fixed by the engine: groups can not be reduced with
        custom functions."""
        features = IgnoringDictionary()
        features["aggregation"] = "fixed"
        features["custom_reduce"] = False
        features["dimensions"] = self.metadata.dimension_names
        features["measures"] = list(self.metadata.measures)
        features["asynchronous"] = self.asynchronous
        return features

    def size(self) -> int:
        """Number of records of the unfiltered cube: the product of the
        member counts of all dimensions."""
        return self.metadata.size()

    def dimension(self, name: str) -> Dimension:
        """Return a facade for dimension `name`. Raises `UnknownDimension`
        if the dimension is not declared."""
        return Dimension(self, name)

    def group_all(self) -> GroupAll:
        """Aggregate over the whole cube that observes all current
        filters."""
        return GroupAll(self)

    # Filter state
    # ------------

    def set_filter(self, dimension: str, members: Iterable[str]) -> None:
        """Restrict `dimension` to `members`. Empty `members` clear the
        filter."""
        with self._mutation():
            self.filters.set(dimension, members)
            self._invalidate(f"filter on '{dimension}'")

    def clear_filter(self, dimension: str) -> None:
        with self._mutation():
            self.filters.clear(dimension)
            self._invalidate(f"filter cleared on '{dimension}'")

    def clear_filters(self) -> None:
        with self._mutation():
            self.filters.clear_all()
            self._invalidate("all filters cleared")

    def current_filters(self) -> dict[str, list[str]]:
        return self.filters.snapshot()

    def reset(self) -> None:
        """Drop all cached series. Filters are kept."""
        with self._mutation():
            self._invalidate("reset")

    def _invalidate(self, reason: str) -> None:
        self.cache.invalidate_all()
        self.logger.debug("cache of %s invalidated: %s", self.metadata, reason)

    @abstractmethod
    def _mutation(self):
        """Context manager held while the filter state changes."""

    # Reads
    # -----

    def prepare_measures(self, measures: str | Iterable[str] | None) -> list[str]:
        """Return the measure list of a read: the default measure if none is
        given. Unknown measures raise `ArgumentError`."""
        if measures is None:
            return [self.metadata.default_measure]
        if isinstance(measures, str):
            measures = [measures]

        measures = list(measures)
        if not measures:
            raise ArgumentError("At least one measure is required")

        unknown = [m for m in measures if m not in self.metadata.measures]
        if unknown:
            raise ArgumentError(
                f"Unknown measures {', '.join(unknown)} in cube '{self.metadata.cube}'"
            )
        return measures

    def prepare_read(
        self,
        dimension: str | None,
        dice: bool | None,
        measures: str | Iterable[str] | None,
    ) -> tuple[bool, list[str]]:
        if dimension is not None:
            self.metadata.dimension(dimension)
        if dice is None:
            dice = self.settings.dice
        return dice, self.prepare_measures(measures)

    def build_plan(self, dimension: str | None, dice: bool, measures: list[str]) -> QueryPlan:
        plan = self.builder.build(dimension, dice, measures)
        self.logger.debug("query plan for %s: %s", self.metadata, plan)
        return plan

    def _log_failure(self, dimension: str | None, measures: list[str], error: Exception) -> None:
        self.logger.warning(
            "query on %s for dimension %s [%s] failed: %s",
            self.metadata,
            dimension,
            measure_set_key(measures),
            error,
        )


class CrossfilterServer(BaseCrossfilterServer):
    """Adapter over a synchronous engine.

    Reads and filter changes are serialized with a lock: a plan is replayed
    on the engine from ``clear()`` to ``execute()`` without any other plan
    interleaving.
    """

    def __init__(self, metadata, settings: AdapterSettings | None = None):
        super().__init__(metadata, settings)
        if isinstance(self.api, AsyncQueryEngine) or inspect.iscoroutinefunction(
            self.api.execute
        ):
            raise ArgumentError(
                "Query engine is asynchronous, use AsyncCrossfilterServer"
            )
        self._lock = threading.RLock()

    def _mutation(self):
        return self._lock

    def get_data(
        self,
        dimension: str | None = None,
        dice: bool | None = None,
        measures: str | Iterable[str] | None = None,
    ) -> list[Record]:
        """Return the series of `measures` grouped by `dimension`.

        `dimension` is not restricted by its own filter. With `dimension`
        set to ``None`` the series holds one record aggregating the whole
        filtered cube. `dice` defaults to the adapter settings.

        The returned list is shared with the cache and must not be
        modified.
        """
        dice, measures = self.prepare_read(dimension, dice, measures)

        with self._lock:
            series = self.cache.get(dimension, measures, dice)
            if series is not None:
                self.logger.debug(
                    "cache hit for %s [%s]", dimension, measure_set_key(measures)
                )
                return series

            plan = self.build_plan(dimension, dice, measures)
            try:
                rows = plan.apply(self.api)
            except Exception as e:
                self._log_failure(dimension, measures, e)
                raise

            series = normalize_rows(rows, dimension, measures, dice)
            self.cache.store(dimension, measures, series, dice=dice)
            return series

    def group_all_value(
        self,
        measures: str | Iterable[str] | None = None,
        dimension: str | None = None,
    ):
        """Value of the single aggregate record of the filtered cube. With
        `dimension` set, the filter of that dimension is not observed."""
        series = self.get_data(dimension, False, measures)
        return series[0].value if series else None

    def top(self, dimension: str, k: int, measure: str | None = None) -> list[Record]:
        """Return `k` groups of `dimension` with the largest `measure`."""
        series = self.get_data(dimension, None, measure)
        return _top_records(series, k)


class AsyncCrossfilterServer(BaseCrossfilterServer):
    """Adapter over an engine whose primitives return awaitables.

    Reads are coroutines serialized by an `asyncio.Lock`. Filter changes
    are plain calls and invalidate the cache immediately; a read that was in
    flight during an invalidation returns its result but does not cache
    it.
    """

    asynchronous = True

    def __init__(self, metadata, settings: AdapterSettings | None = None):
        super().__init__(metadata, settings)
        self._lock = asyncio.Lock()
        self._mutation_lock = threading.RLock()

    def _mutation(self):
        return self._mutation_lock

    async def get_data(
        self,
        dimension: str | None = None,
        dice: bool | None = None,
        measures: str | Iterable[str] | None = None,
    ) -> list[Record]:
        """Coroutine version of `CrossfilterServer.get_data`."""
        dice, measures = self.prepare_read(dimension, dice, measures)

        series = self.cache.get(dimension, measures, dice)
        if series is not None:
            return series

        async with self._lock:
            # Another read may have stored the series while we waited
            series = self.cache.peek(dimension, measures, dice)
            if series is not None:
                return series

            generation = self.cache.generation
            plan = self.build_plan(dimension, dice, measures)
            try:
                rows = await plan.apply_async(self.api)
            except Exception as e:
                self._log_failure(dimension, measures, e)
                raise

            series = normalize_rows(rows, dimension, measures, dice)
            if not self.cache.store(
                dimension, measures, series, generation=generation, dice=dice
            ):
                self.logger.debug(
                    "discarding series for %s computed before invalidation", dimension
                )
            return series

    async def group_all_value(
        self,
        measures: str | Iterable[str] | None = None,
        dimension: str | None = None,
    ):
        series = await self.get_data(dimension, False, measures)
        return series[0].value if series else None

    async def top(self, dimension: str, k: int, measure: str | None = None) -> list[Record]:
        series = await self.get_data(dimension, None, measure)
        return _top_records(series, k)

"""
Query translation and result caching for remote cubes.

Adapters keep filters per dimension, translate group reads into engine
primitives and memoize the resulting series until the filters change.
"""

from .browser import AsyncCrossfilterServer, BaseCrossfilterServer, CrossfilterServer
from .builder import QueryBuilder, QueryPlan, QueryStep
from .cache import ResultCache, measure_set_key
from .dimension import Dimension, Group, GroupAll
from .engine import (
    ALL_KEY,
    AsyncQueryEngine,
    InMemoryQueryEngine,
    QueryEngine,
    SQLQueryEngine,
)
from .filters import FilterStore, SliceResolver
from .results import Record, normalize_rows, records_to_dicts

__all__ = [
    "ALL_KEY",
    "AsyncCrossfilterServer",
    "AsyncQueryEngine",
    "BaseCrossfilterServer",
    "CrossfilterServer",
    "Dimension",
    "FilterStore",
    "Group",
    "GroupAll",
    "InMemoryQueryEngine",
    "QueryBuilder",
    "QueryEngine",
    "QueryPlan",
    "QueryStep",
    "Record",
    "ResultCache",
    "SQLQueryEngine",
    "SliceResolver",
    "measure_set_key",
    "normalize_rows",
    "records_to_dicts",
]

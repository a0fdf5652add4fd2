"""
Query engine contract and reference engines.

An engine accumulates a query through primitive calls and runs it on
`execute()`::

    engine.clear()
    engine.select_cube("sales")
    engine.select_measure("revenue")
    engine.restrict("[Region]", ["east", "west"])
    engine.restrict("[Product]", ["a"])
    engine.group_by(["[Region]"])
    rows = engine.execute()

Every row is a mapping with the grouped dimension (or ``"_all"`` when
nothing is grouped) as a field and one field per selected measure.

Aggregation is fixed per engine instance. Engines take the aggregation
function as a constructor argument, callers of the contract can not choose
it per query.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import sqlalchemy as sa

from ..common import ALL_KEY
from ..errors import ArgumentError

__all__ = [
    "ALL_KEY",
    "QueryEngine",
    "AsyncQueryEngine",
    "InMemoryQueryEngine",
    "SQLQueryEngine",
]


class QueryEngine(ABC):
    """Synchronous query engine contract."""

    @abstractmethod
    def clear(self) -> None:
        """Reset any pending query state."""

    @abstractmethod
    def select_cube(self, cube: str) -> None:
        """Select the cube to be queried."""

    @abstractmethod
    def select_measure(self, measure: str) -> None:
        """Add a measure to the query. Calls are additive."""

    @abstractmethod
    def restrict(self, hierarchy: str, members: list[str]) -> None:
        """Restrict `hierarchy` to `members`."""

    @abstractmethod
    def group_by(self, hierarchies: list[str]) -> None:
        """Break the result out along `hierarchies`."""

    @abstractmethod
    def execute(self) -> list[Mapping[str, Any]]:
        """Run the accumulated query and return result rows."""


class AsyncQueryEngine(ABC):
    """Asynchronous query engine contract. Same primitives as `QueryEngine`
    but every call returns an awaitable."""

    @abstractmethod
    async def clear(self) -> None: ...

    @abstractmethod
    async def select_cube(self, cube: str) -> None: ...

    @abstractmethod
    async def select_measure(self, measure: str) -> None: ...

    @abstractmethod
    async def restrict(self, hierarchy: str, members: list[str]) -> None: ...

    @abstractmethod
    async def group_by(self, hierarchies: list[str]) -> None: ...

    @abstractmethod
    async def execute(self) -> list[Mapping[str, Any]]: ...


class _QueryState:
    """Accumulated primitives of one query."""

    def __init__(self):
        self.cube: str | None = None
        self.measures: list[str] = []
        self.restrictions: dict[str, list[str]] = {}
        self.group_by: list[str] = []


class _AccumulatingEngine(QueryEngine):
    """Keeps the primitive calls in a `_QueryState` until `execute()`."""

    def __init__(self, hierarchies: Mapping[str, str], keys: Mapping[str, str] | None = None):
        if not hierarchies:
            raise ArgumentError("No hierarchies given for query engine")
        self.hierarchies = dict(hierarchies)
        self.keys = dict(keys or {})
        self.state = _QueryState()

    def clear(self) -> None:
        self.state = _QueryState()

    def select_cube(self, cube: str) -> None:
        self.state.cube = cube

    def select_measure(self, measure: str) -> None:
        self.state.measures.append(measure)

    def restrict(self, hierarchy: str, members: list[str]) -> None:
        self.field(hierarchy)
        self.state.restrictions[hierarchy] = list(members)

    def group_by(self, hierarchies: list[str]) -> None:
        for hierarchy in hierarchies:
            self.field(hierarchy)
        self.state.group_by = list(hierarchies)

    def field(self, hierarchy: str) -> str:
        """Fact field (column) of `hierarchy`."""
        try:
            return self.hierarchies[hierarchy]
        except KeyError:
            raise ArgumentError(f"Unknown hierarchy '{hierarchy}'") from None

    def key_field(self, hierarchy: str) -> str:
        """Result row field under which members of `hierarchy` are returned."""
        return self.keys.get(hierarchy, self.field(hierarchy))

    def _check_query(self) -> None:
        if self.state.cube is None:
            raise ArgumentError("No cube selected")
        if not self.state.measures:
            raise ArgumentError("No measures selected")


class InMemoryQueryEngine(_AccumulatingEngine):
    """Engine aggregating a list of fact dictionaries.

    `hierarchies` maps a hierarchy id to the fact field holding its members,
    `keys` optionally maps a hierarchy id to the result field name (defaults
    to the fact field). `aggregate` reduces the list of measure values of a
    cell to one number.
    """

    def __init__(
        self,
        facts: Iterable[Mapping[str, Any]],
        hierarchies: Mapping[str, str],
        keys: Mapping[str, str] | None = None,
        aggregate: Callable[[list[Any]], Any] = sum,
    ):
        super().__init__(hierarchies, keys)
        self.facts = list(facts)
        self.aggregate = aggregate

    def execute(self) -> list[dict[str, Any]]:
        self._check_query()
        state = self.state

        restrictions = [
            (self.field(hierarchy), set(members))
            for hierarchy, members in state.restrictions.items()
        ]
        facts = [
            fact
            for fact in self.facts
            if all(fact[field] in members for field, members in restrictions)
        ]

        if not state.group_by:
            row = {ALL_KEY: ALL_KEY}
            row.update(self._aggregate_cell(facts))
            return [row]

        fields = [self.field(h) for h in state.group_by]
        key_fields = [self.key_field(h) for h in state.group_by]

        cells: dict[tuple, list] = {}
        for fact in facts:
            key = tuple(fact[field] for field in fields)
            cells.setdefault(key, []).append(fact)

        rows = []
        for key, cell_facts in cells.items():
            row = dict(zip(key_fields, key))
            row.update(self._aggregate_cell(cell_facts))
            rows.append(row)

        return rows

    def _aggregate_cell(self, facts: list[Mapping[str, Any]]) -> dict[str, Any]:
        return {
            measure: self.aggregate([fact[measure] for fact in facts])
            for measure in self.state.measures
        }


class SQLQueryEngine(_AccumulatingEngine):
    """Engine compiling the accumulated primitives into a SQL aggregation
    query over a fact table.

    `tables` is either a single fact table or a mapping of cube id to fact
    table. Measures are columns of the fact table with the same name;
    `hierarchies` maps hierarchy ids to member columns.
    """

    def __init__(
        self,
        engine: sa.Engine,
        tables: sa.Table | Mapping[str, sa.Table],
        hierarchies: Mapping[str, str],
        keys: Mapping[str, str] | None = None,
        aggregate: Callable[[Any], Any] = sa.func.sum,
    ):
        super().__init__(hierarchies, keys)
        self.engine = engine
        self.tables = tables
        self.aggregate = aggregate

    def table(self, cube: str) -> sa.Table:
        if isinstance(self.tables, sa.Table):
            return self.tables
        try:
            return self.tables[cube]
        except KeyError:
            raise ArgumentError(f"No fact table for cube '{cube}'") from None

    def column(self, table: sa.Table, name: str) -> sa.Column:
        try:
            return table.c[name]
        except KeyError:
            raise ArgumentError(
                f"Table '{table.name}' has no column '{name}'"
            ) from None

    def statement(self) -> sa.Select:
        """Return the SELECT statement of the accumulated query."""
        self._check_query()
        state = self.state
        table = self.table(state.cube)

        group_columns = [self.column(table, self.field(h)) for h in state.group_by]

        if group_columns:
            selection = [
                column.label(self.key_field(hierarchy))
                for column, hierarchy in zip(group_columns, state.group_by)
            ]
        else:
            selection = [sa.literal(ALL_KEY).label(ALL_KEY)]

        selection += [
            self.aggregate(self.column(table, measure)).label(measure)
            for measure in state.measures
        ]

        statement = sa.select(*selection).select_from(table)

        for hierarchy, members in state.restrictions.items():
            column = self.column(table, self.field(hierarchy))
            statement = statement.where(column.in_(members))

        if group_columns:
            statement = statement.group_by(*group_columns)

        return statement

    def execute(self) -> list[dict[str, Any]]:
        statement = self.statement()
        with self.engine.connect() as connection:
            result = connection.execute(statement)
            return [dict(row._mapping) for row in result]

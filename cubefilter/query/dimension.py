"""
Crossfilter-style dimension, group and group-all objects bound to an
adapter.

Filter operations change the adapter's filter state, which invalidates its
cached series. Group reads return the adapter's cached series. On an
asynchronous adapter the read methods return coroutines.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

__all__ = [
    "Dimension",
    "Group",
    "GroupAll",
]


class Dimension:
    """Filterable dimension of a remote cube."""

    def __init__(self, server, name: str):
        self.server = server
        self.spec = server.metadata.dimension(name)
        self.name = name

    @property
    def hierarchy(self) -> str:
        return self.spec.hierarchy

    @property
    def members(self) -> list[str]:
        """All declared members of the dimension."""
        return list(self.spec.members)

    def filter(self, value: Any = None) -> Dimension:
        """Filter by `value`: ``None`` removes the filter, a list, tuple or
        set filters to those members and any other value to that single
        member."""
        if value is None:
            return self.filter_all()
        if isinstance(value, list | tuple | set | frozenset):
            return self.filter_exact(value)
        return self.filter_exact([value])

    def filter_exact(self, members: Iterable[str]) -> Dimension:
        """Filter to `members`. An empty collection removes the filter."""
        self.server.set_filter(self.name, members)
        return self

    def filter_range(self, lower, upper) -> Dimension:
        """Filter to declared members ``m`` with ``lower <= m < upper``.

        If no member falls in the range the filter is removed, as an empty
        member list means no restriction.
        """
        self.server.set_filter(self.name, self.spec.members_in_range(lower, upper))
        return self

    def filter_function(self, predicate: Callable[[str], bool]) -> Dimension:
        """Filter to declared members for which `predicate` is true."""
        members = [member for member in self.spec.members if predicate(member)]
        self.server.set_filter(self.name, members)
        return self

    def filter_all(self) -> Dimension:
        """Remove the filter of this dimension."""
        self.server.clear_filter(self.name)
        return self

    def current_filter(self) -> list[str] | None:
        """Active filter members or ``None`` when not filtered."""
        return self.server.current_filters().get(self.name)

    def has_current_filter(self) -> bool:
        return self.server.filters.is_filtered(self.name)

    def group(self) -> Group:
        return Group(self.server, self.name)

    def group_all(self) -> GroupAll:
        """Aggregate of the whole cube observing the filters of all other
        dimensions. Unlike the adapter's `group_all()`, the filter of this
        dimension is ignored."""
        return GroupAll(self.server, self.name)

    def dispose(self) -> None:
        """Remove this dimension's filter."""
        self.filter_all()

    def __repr__(self) -> str:
        return f"<Dimension(name='{self.name}', hierarchy='{self.hierarchy}')>"


class Group:
    """Series of a dimension's members with their aggregated measures.

    Groups can not be reduced: aggregation is done by the engine.
    """

    def __init__(self, server, dimension: str):
        self.server = server
        self.dimension = dimension

    def all(self, measures: str | Iterable[str] | None = None, dice: bool | None = None):
        """Records of every group, sorted by key."""
        return self.server.get_data(self.dimension, dice, measures)

    def top(self, k: int, measure: str | None = None):
        """`k` records with the largest value of `measure`."""
        return self.server.top(self.dimension, k, measure)

    def size(self) -> int:
        """Number of groups: the declared members of the dimension."""
        return self.server.metadata.dimension(self.dimension).cardinality

    def __repr__(self) -> str:
        return f"<Group(dimension='{self.dimension}')>"


class GroupAll:
    """Single aggregate of the cube. Observes all current filters, except
    the filter of `dimension` when one is given."""

    def __init__(self, server, dimension: str | None = None):
        self.server = server
        self.dimension = dimension

    def value(self, measures: str | Iterable[str] | None = None):
        return self.server.group_all_value(measures, self.dimension)

    def __repr__(self) -> str:
        return f"<GroupAll(dimension={self.dimension!r})>"

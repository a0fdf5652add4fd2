"""
Filter state of an adapter and the slice each dimension contributes to a
query.
"""

from __future__ import annotations

from collections.abc import Iterable

from cubefilter.metadata import CubeMetadata

__all__ = [
    "FilterStore",
    "SliceResolver",
]


class FilterStore:
    """Active member filters by dimension id.

    A dimension without an entry is unfiltered and `get()` returns its full
    declared member universe. Members are not checked against the declared
    universe.

    The store does not know about cached results: the owning adapter has to
    invalidate its cache after every mutating call.
    """

    def __init__(self, metadata: CubeMetadata):
        self.metadata = metadata
        self._filters: dict[str, list[str]] = {}

    def set(self, dimension: str, members: Iterable[str]) -> None:
        """Replace the filter of `dimension`. An empty member list removes
        the filter. A single string is one member."""
        self.metadata.dimension(dimension)
        if isinstance(members, str):
            members = [members]
        members = list(dict.fromkeys(members))

        if members:
            self._filters[dimension] = members
        else:
            self._filters.pop(dimension, None)

    def clear(self, dimension: str) -> None:
        """Remove the filter of `dimension`."""
        self.metadata.dimension(dimension)
        self._filters.pop(dimension, None)

    def clear_all(self) -> None:
        self._filters.clear()

    def get(self, dimension: str) -> list[str]:
        """Return the active members of `dimension`, or all declared members
        when the dimension is not filtered."""
        spec = self.metadata.dimension(dimension)
        members = self._filters.get(dimension)
        if members is None:
            return list(spec.members)
        return list(members)

    def is_filtered(self, dimension: str) -> bool:
        self.metadata.dimension(dimension)
        return dimension in self._filters

    def snapshot(self) -> dict[str, list[str]]:
        """Copy of the active filters, only filtered dimensions included."""
        return {dim: list(members) for dim, members in self._filters.items()}

    def __len__(self) -> int:
        return len(self._filters)

    def __bool__(self) -> bool:
        return bool(self._filters)


class SliceResolver:
    """Decides which members restrict a dimension in a query.

    The focus dimension of a query is never restricted by its own filter: it
    is sliced to its full declared universe so a chart on that dimension
    still shows every member, while all other dimensions are restricted by
    their filters.
    """

    def __init__(self, metadata: CubeMetadata, filters: FilterStore):
        self.metadata = metadata
        self.filters = filters

    def resolve(self, focus: str | None, candidate: str) -> list[str]:
        if candidate == focus:
            return list(self.metadata.dimension(candidate).members)
        return self.filters.get(candidate)

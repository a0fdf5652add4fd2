"""
Translation of a group read into engine primitives.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from cubefilter.errors import ArgumentError
from cubefilter.metadata import CubeMetadata

from .filters import FilterStore, SliceResolver

__all__ = [
    "QueryStep",
    "QueryPlan",
    "QueryBuilder",
]


@dataclass(frozen=True, slots=True)
class QueryStep:
    """One primitive call of the engine contract."""

    operation: str
    arguments: tuple[Any, ...] = ()

    def apply(self, engine) -> Any:
        return getattr(engine, self.operation)(*self.arguments)

    def __str__(self) -> str:
        args = ", ".join(repr(arg) for arg in self.arguments)
        return f"{self.operation}({args})"


@dataclass(frozen=True, slots=True)
class QueryPlan:
    """Ordered primitives of one read, ending with ``execute()``.

    The steps start with ``clear()``, so replaying a plan never depends on
    earlier engine state. Replaying has to be exclusive: no other plan may
    be applied to the same engine between the first step and ``execute()``.
    """

    focus: str | None
    dice: bool
    measures: tuple[str, ...]
    steps: tuple[QueryStep, ...]

    def apply(self, engine) -> list[Any]:
        """Replay the steps on `engine` and return the executed rows."""
        for step in self.steps:
            step.apply(engine)
        return list(engine.execute())

    async def apply_async(self, engine) -> list[Any]:
        """Replay the steps on `engine`, awaiting calls that return an
        awaitable, and return the executed rows."""
        for step in self.steps:
            result = step.apply(engine)
            if inspect.isawaitable(result):
                await result

        rows = engine.execute()
        if inspect.isawaitable(rows):
            rows = await rows
        return list(rows)

    @property
    def operations(self) -> list[str]:
        return [step.operation for step in self.steps]

    def __iter__(self) -> Iterator[QueryStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return "; ".join(str(step) for step in self.steps)


class QueryBuilder:
    """Builds `QueryPlan`s from the metadata and current filters."""

    def __init__(self, metadata: CubeMetadata, filters: FilterStore):
        self.metadata = metadata
        self.resolver = SliceResolver(metadata, filters)

    def build(
        self, focus: str | None, dice: bool, measures: Sequence[str]
    ) -> QueryPlan:
        """Return the plan reading `measures` grouped by the `focus`
        dimension.

        With `focus` set to ``None`` no dimension is grouped and the engine
        returns a single aggregate row. Measures are selected in the given
        order and are not deduplicated.

        Raises `UnknownDimension` if `focus` is not declared.
        """
        if focus is not None:
            focus_spec = self.metadata.dimension(focus)

        if not measures:
            raise ArgumentError("At least one measure is required")

        steps = [
            QueryStep("clear"),
            QueryStep("select_cube", (self.metadata.cube,)),
        ]
        steps += [QueryStep("select_measure", (measure,)) for measure in measures]

        for name, spec in self.metadata.dimensions.items():
            members = self.resolver.resolve(focus, name)
            steps.append(QueryStep("restrict", (spec.hierarchy, members)))

        if focus is not None and dice:
            steps.append(QueryStep("group_by", ([focus_spec.hierarchy],)))

        return QueryPlan(
            focus=focus, dice=dice, measures=tuple(measures), steps=tuple(steps)
        )

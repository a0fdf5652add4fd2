"""Shared fixtures for the test suite."""

import asyncio
import copy

from cubefilter.query import AsyncQueryEngine, InMemoryQueryEngine

FACTS = [
    {"region": "east", "product": "a", "revenue": 10, "units": 1},
    {"region": "east", "product": "b", "revenue": 20, "units": 2},
    {"region": "east", "product": "c", "revenue": 30, "units": 3},
    {"region": "west", "product": "a", "revenue": 5, "units": 4},
    {"region": "west", "product": "b", "revenue": 15, "units": 5},
    {"region": "west", "product": "c", "revenue": 25, "units": 6},
]

HIERARCHIES = {"[Region]": "region", "[Product]": "product"}

DOCUMENT = {
    "schema": "retail",
    "cube": "sales",
    "measures": ["revenue", "units"],
    "dimensions": {
        "region": {"hierarchy": "[Region]", "level": 1, "members": ["east", "west"]},
        "product": {"hierarchy": "[Product]", "level": 1, "members": ["a", "b", "c"]},
    },
}


class RecordingEngine(InMemoryQueryEngine):
    """In-memory engine keeping a log of primitive calls. Setting `fail`
    makes `execute()` raise it."""

    def __init__(self, facts=None, hierarchies=None, **options):
        super().__init__(
            FACTS if facts is None else facts,
            HIERARCHIES if hierarchies is None else hierarchies,
            **options,
        )
        self.calls = []
        self.executions = 0
        self.fail = None

    def clear(self):
        self.calls.append(("clear",))
        super().clear()

    def select_cube(self, cube):
        self.calls.append(("select_cube", cube))
        super().select_cube(cube)

    def select_measure(self, measure):
        self.calls.append(("select_measure", measure))
        super().select_measure(measure)

    def restrict(self, hierarchy, members):
        self.calls.append(("restrict", hierarchy, list(members)))
        super().restrict(hierarchy, members)

    def group_by(self, hierarchies):
        self.calls.append(("group_by", list(hierarchies)))
        super().group_by(hierarchies)

    def execute(self):
        self.calls.append(("execute",))
        self.executions += 1
        if self.fail is not None:
            raise self.fail
        return super().execute()


class AsyncRecordingEngine(AsyncQueryEngine):
    """Asynchronous wrapper of `RecordingEngine` yielding to the event
    loop on every primitive. Setting `gate` holds `execute()` until the
    event is set."""

    def __init__(self):
        self.engine = RecordingEngine()
        self.gate = None
        self.entered = asyncio.Event()

    @property
    def calls(self):
        return self.engine.calls

    async def clear(self):
        await asyncio.sleep(0)
        self.engine.clear()

    async def select_cube(self, cube):
        await asyncio.sleep(0)
        self.engine.select_cube(cube)

    async def select_measure(self, measure):
        await asyncio.sleep(0)
        self.engine.select_measure(measure)

    async def restrict(self, hierarchy, members):
        await asyncio.sleep(0)
        self.engine.restrict(hierarchy, members)

    async def group_by(self, hierarchies):
        await asyncio.sleep(0)
        self.engine.group_by(hierarchies)

    async def execute(self):
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        return self.engine.execute()


def create_document(api, **changes):
    """Return a copy of the sample metadata document with `api` attached."""
    document = copy.deepcopy(DOCUMENT)
    document.update(changes)
    document["api"] = api
    return document

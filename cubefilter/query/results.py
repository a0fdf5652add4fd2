"""
Shaping engine rows into keyed series.
"""

from __future__ import annotations

from collections import namedtuple
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from cubefilter.errors import QueryEngineError

from .engine import ALL_KEY

__all__ = [
    "Record",
    "normalize_rows",
    "records_to_dicts",
]

Record = namedtuple("Record", ["key", "value"])


def _sort_key(record: Record) -> str:
    return str(record.key)


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    focus: str | None,
    measures: Sequence[str],
    dice: bool = True,
) -> list[Record]:
    """Convert engine rows into records sorted by key.

    The key of a record is the row field named after the `focus` dimension,
    or the ``"_all"`` field when there is no focus. A focus that was not
    diced is aggregated away by the engine, its rows are keyed by the
    ``"_all"`` field unless they carry the focus field. With a single
    measure the value is that measure, otherwise a dictionary of all
    requested measures in requested order.

    Records are ordered by the string form of their key. The sort is stable
    and duplicate keys are kept.
    """
    key_field = ALL_KEY if focus is None else focus
    single = len(measures) == 1
    records = []

    for row in rows:
        if not isinstance(row, Mapping):
            raise QueryEngineError(
                f"Query engine returned a row that is not a mapping: {row!r}"
            )
        try:
            if not dice and key_field not in row:
                key = row[ALL_KEY]
            else:
                key = row[key_field]
            if single:
                value = row[measures[0]]
            else:
                value = {measure: row[measure] for measure in measures}
        except KeyError as e:
            raise QueryEngineError(
                f"Query engine row is missing field {e}",
                context={"fields": sorted(str(f) for f in row)},
            ) from None

        records.append(Record(key, value))

    records.sort(key=_sort_key)
    return records


def records_to_dicts(records: Iterable[Record]) -> list[dict[str, Any]]:
    """Return records as ``{"key": ..., "value": ...}`` dictionaries."""
    return [record._asdict() for record in records]

"""
Reshape flat query results into the nested mappings the views render.

Every mapping is a plain ``dict``, so keys keep the order in which they were
first seen in the input. Feeding the flattened output of ``group_nested``
back into it yields the same structure.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

R = TypeVar("R")
K = TypeVar("K", bound=Hashable)
K2 = TypeVar("K2", bound=Hashable)


def group_by(records: Iterable[R], key: Callable[[R], K]) -> Dict[K, List[R]]:
    """Bucket records by ``key``, preserving first-seen order of keys and records."""
    grouped: Dict[K, List[R]] = {}
    for record in records:
        grouped.setdefault(key(record), []).append(record)
    return grouped


def group_nested(
    records: Iterable[R],
    outer_key: Callable[[R], K],
    inner_key: Callable[[R], K2],
) -> Dict[K, Dict[K2, List[R]]]:
    """Two-level grouping, e.g. date -> subject -> entries."""
    grouped: Dict[K, Dict[K2, List[R]]] = {}
    for record in records:
        grouped.setdefault(outer_key(record), {}).setdefault(inner_key(record), []).append(record)
    return grouped


def flatten(grouped: Dict[Any, Any]) -> List[Any]:
    """Walk a (possibly nested) grouping back into a flat list in bucket order."""
    flat: List[Any] = []
    for bucket in grouped.values():
        if isinstance(bucket, dict):
            flat.extend(flatten(bucket))
        else:
            flat.extend(bucket)
    return flat


@dataclass
class CrossTab:
    rows: List[Hashable] = field(default_factory=list)
    columns: List[Hashable] = field(default_factory=list)
    cells: Dict[Hashable, Dict[Hashable, Any]] = field(default_factory=dict)
    row_records: Dict[Hashable, Any] = field(default_factory=dict)

    def get(self, row: Hashable, column: Hashable) -> Any:
        return self.cells[row][column]


def cross_tab(
    records: Iterable[R],
    row_key: Callable[[R], Hashable],
    column_key: Callable[[R], Hashable],
    value: Callable[[R], Any],
    sentinel: Any,
    row_sort: Optional[Callable[[R], Any]] = None,
    column_sort: Optional[Callable[[Hashable], Any]] = None,
) -> CrossTab:
    """
    Build a row x column table over every discovered row and column.

    Combinations with no record hold ``sentinel``. When two records share a
    (row, column) pair the later one wins. ``row_sort`` receives the first
    record seen for a row; the sort is stable so ties keep first-seen order.
    """
    table = CrossTab()
    seen: Dict[Hashable, Dict[Hashable, Any]] = {}
    columns: Dict[Hashable, None] = {}

    for record in records:
        row = row_key(record)
        column = column_key(record)
        if row not in table.row_records:
            table.row_records[row] = record
            seen[row] = {}
        columns.setdefault(column, None)
        cell_value = value(record)
        seen[row][column] = sentinel if cell_value is None else cell_value

    rows = list(table.row_records)
    if row_sort is not None:
        rows.sort(key=lambda r: row_sort(table.row_records[r]))
    column_list = list(columns)
    if column_sort is not None:
        column_list.sort(key=column_sort)

    table.rows = rows
    table.columns = column_list
    table.cells = {
        row: {column: seen[row].get(column, sentinel) for column in column_list}
        for row in rows
    }
    return table

"""Mutable accumulator threaded through the set-expression walker."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from analyzer_engine.models.query import WindowFunction


class OrderedSet:
    """Insertion-ordered, duplicate-free collection of names."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: dict[str, None] = dict.fromkeys(items)

    def add(self, item: str) -> None:
        self._items.setdefault(item, None)

    def update(self, items: Iterable[str]) -> None:
        for item in items:
            self._items.setdefault(item, None)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"

    def to_list(self) -> list[str]:
        return list(self._items)


@dataclass
class ExtractionContext:
    """Per-query accumulator of tables, clause columns and flags.

    A derived table is walked with :meth:`child`, which shares the
    ``tables`` set but starts with empty column sets and flags.
    """

    tables: OrderedSet = field(default_factory=OrderedSet)
    where_cols: OrderedSet = field(default_factory=OrderedSet)
    join_cols: OrderedSet = field(default_factory=OrderedSet)
    group_cols: OrderedSet = field(default_factory=OrderedSet)
    having_cols: OrderedSet = field(default_factory=OrderedSet)
    window_funcs: list[WindowFunction] = field(default_factory=list)
    has_union: bool = False
    has_distinct: bool = False
    has_subquery: bool = False

    def child(self) -> ExtractionContext:
        return ExtractionContext(tables=self.tables)

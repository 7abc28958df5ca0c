"""
Query model shared by every store implementation.

Queries are evaluated in Python over the documents of one collection, which
keeps the semantics identical across the in-memory and SQL stores.
"""

from __future__ import annotations

import copy
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}

ASCENDING = "asc"
DESCENDING = "desc"

_MISSING = object()


@dataclass(frozen=True)
class DocumentSnapshot:
    """One document as read from the store."""

    id: str
    path: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Document fields plus its ``id``."""
        return {**copy.deepcopy(self.data), "id": self.id}


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ValueError(f"Unsupported filter operator: '{self.op}'")
        if self.op == "in" and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError("'in' filter requires a list of values")

    def matches(self, data: dict[str, Any]) -> bool:
        value = data.get(self.field, _MISSING)
        if value is _MISSING:
            return False
        try:
            return bool(_COMPARATORS[self.op](value, self.value))
        except TypeError:
            # Values of different types never match (e.g. "3" < 4)
            return False


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = ASCENDING

    def __post_init__(self) -> None:
        if self.direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"Unsupported sort direction: '{self.direction}'")


@dataclass(frozen=True)
class Query:
    """
    A collection query: equality/range filters plus ordering.

        Query("tenants/u1/menuItems").where("categoryId", "==", cid).order("createdAt", "desc")

    Documents that lack an ordered field are left out of the result, the
    same way a hosted document database treats them.
    """

    collection: str
    filters: tuple[Filter, ...] = field(default_factory=tuple)
    order_by: tuple[OrderBy, ...] = field(default_factory=tuple)

    def where(self, field_name: str, op: str, value: Any) -> Query:
        return Query(self.collection, self.filters + (Filter(field_name, op, value),), self.order_by)

    def order(self, field_name: str, direction: str = ASCENDING) -> Query:
        return Query(self.collection, self.filters, self.order_by + (OrderBy(field_name, direction),))

    def apply(self, snapshots: Iterable[DocumentSnapshot]) -> list[DocumentSnapshot]:
        results = [
            snap for snap in snapshots
            if all(f.matches(snap.data) for f in self.filters)
            and all(o.field in snap.data for o in self.order_by)
        ]
        # Stable sorts applied from the least to the most significant key
        results.sort(key=lambda snap: snap.id)
        for order in reversed(self.order_by):
            results.sort(
                key=lambda snap, f=order.field: _sort_key(snap.data[f]),
                reverse=order.direction == DESCENDING,
            )
        return results


def _sort_key(value: Any) -> tuple:
    # None sorts first; mixed types are grouped by type name before comparing
    if value is None:
        return (0, "", 0)
    if isinstance(value, bool):
        return (1, "bool", value)
    if isinstance(value, (int, float)):
        return (1, "number", value)
    return (1, type(value).__name__, value)

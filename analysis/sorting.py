"""Stable field sort for tabular views."""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Mapping, TypeVar, Union

from pydantic import BaseModel

from analysis.common import snapshot, split_by_type
from logbook.schema import MedicationDose

T = TypeVar("T")

_MISSING = object()


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"

    @classmethod
    def _missing_(cls, value: object) -> "SortDirection":
        if not isinstance(value, str):
            raise ValueError(f"Unknown sort direction: {value}")
        val = value.strip().lower()
        synonyms = {"ascending": "asc", "descending": "desc"}
        if val in synonyms:
            return cls(synonyms[val])
        if val in ("asc", "desc"):
            return cls(val)
        return super()._missing_(value)


def _field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key, _MISSING)
    if isinstance(item, BaseModel):
        # accept wire names such as "medicationName"
        for name, info in type(item).model_fields.items():
            if info.alias == key:
                return getattr(item, name)
    return getattr(item, key, _MISSING)


def sort_by(items: Iterable[T], key: str, direction: Union[SortDirection, str] = "asc") -> List[T]:
    """
    Return a new list of ``items`` ordered by the field ``key``.

    The sort is stable in both directions: items with equal keys keep their
    input order. Items lacking the field (or holding ``None``) go last, in
    input order, whatever the direction.

    Raises:
        ValueError: if ``direction`` is not ascending or descending.
    """
    order = SortDirection(direction)
    present: List[tuple[Any, T]] = []
    absent: List[T] = []
    for item in items:
        value = _field(item, key)
        if value is _MISSING or value is None:
            absent.append(item)
        else:
            present.append((value, item))

    # reverse=True keeps equal elements in their original order
    present.sort(key=lambda pair: pair[0], reverse=order is SortDirection.desc)
    return [item for _, item in present] + absent


def medication_history(
    entries: Iterable, key: str = "timestamp", direction: Union[SortDirection, str] = "desc"
) -> List[MedicationDose]:
    """Doses only, newest first unless told otherwise."""
    doses, _ = split_by_type(snapshot(entries))
    return sort_by(doses, key, direction)
